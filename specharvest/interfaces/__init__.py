"""Public interface definitions for the engine's external collaborators.

The incremental-crawl engine talks to the outside world only through the
abstract base classes defined here.  Concrete adapters live in
``specharvest/providers/`` and are wired together in
``specharvest/cli/harvest.py``; tests inject fakes.

CONCRETE PROVIDER MAP:
    Interface        ->  Concrete implementations (in specharvest/providers/)
    ---------------------------------------------------------------------
    ITransport       ->  ScraperAPITransport, DirectHttpTransport
    IExtractor       ->  GSMArenaExtractor
    IItemSink        ->  JsonFileSink, SQLiteItemSink
    ILedgerStore     ->  JsonLedgerStore
"""

from specharvest.interfaces.extractor import IExtractor
from specharvest.interfaces.ledger_store import ILedgerStore
from specharvest.interfaces.sink import IItemSink
from specharvest.interfaces.transport import FetchResponse, ITransport

__all__ = [
    "FetchResponse",
    "IExtractor",
    "IItemSink",
    "ILedgerStore",
    "ITransport",
]
