"""Utility modules for specharvest.

- **errors** -- Exception hierarchy rooted at HarvestError; fatal errors
  (block, budget, configuration) derive from FatalHarvestError so every
  handler can re-raise them before dealing with recoverable failures.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output for interactive runs, structured JSON for scheduled runs.
- **pacing** -- randomized inter-request delay shared by every fetch.
- **atomic** -- temp-file-and-rename writer used by the file-backed stores.
- **snapshots** -- HTML snapshot writer for debugging extractor selectors.
"""

from specharvest.utils.atomic import atomic_write_text
from specharvest.utils.errors import (
    BlockDetectedError,
    BudgetExhaustedError,
    ConfigurationError,
    ExtractionError,
    FatalHarvestError,
    FetchError,
    FetchTimeoutError,
    HarvestError,
    LedgerError,
    SinkError,
)
from specharvest.utils.logging import configure_logging, get_logger, run_context
from specharvest.utils.pacing import RequestPacer
from specharvest.utils.snapshots import HtmlSnapshotWriter

__all__ = [
    "BlockDetectedError",
    "BudgetExhaustedError",
    "ConfigurationError",
    "ExtractionError",
    "FatalHarvestError",
    "FetchError",
    "FetchTimeoutError",
    "HarvestError",
    "HtmlSnapshotWriter",
    "LedgerError",
    "RequestPacer",
    "SinkError",
    "atomic_write_text",
    "configure_logging",
    "get_logger",
    "run_context",
]
