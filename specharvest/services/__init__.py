"""Engine services.

- **budget_governor** -- credit accounting, block detection, and the
  governed fetch path every request goes through.
- **ledger** -- in-memory dedup index over a pluggable store.
- **paginator** -- walks one category's listing pages into references.
- **item_pipeline** -- fetch, extract, filter and persist one reference.
- **ledger_rebuild** / **sql_loader** -- maintenance over the JSON output.
"""

from specharvest.services.budget_governor import (
    BLOCK_INDICATORS,
    BudgetGovernor,
    FetchCharge,
    GovernedFetcher,
)
from specharvest.services.item_pipeline import ItemPipeline, utc_timestamp
from specharvest.services.ledger import Ledger
from specharvest.services.ledger_rebuild import LedgerRebuildReport, rebuild_ledger
from specharvest.services.paginator import Paginator
from specharvest.services.sql_loader import FileLoadResult, load_output_dir

__all__ = [
    "BLOCK_INDICATORS",
    "BudgetGovernor",
    "FetchCharge",
    "FileLoadResult",
    "GovernedFetcher",
    "ItemPipeline",
    "Ledger",
    "LedgerRebuildReport",
    "Paginator",
    "load_output_dir",
    "rebuild_ledger",
    "utc_timestamp",
]
