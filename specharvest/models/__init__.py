"""Pydantic data models for catalog entities and run results."""

from specharvest.models.catalog import (
    Category,
    ExtractedItem,
    ItemRecord,
    LedgerEntry,
    ListingUrl,
    Reference,
    normalize_output_document,
)
from specharvest.models.run import (
    CategoryResult,
    ItemOutcome,
    ItemStatus,
    PaginationResult,
    PaginationStopReason,
    RunStatus,
    RunSummary,
)

__all__ = [
    "Category",
    "CategoryResult",
    "ExtractedItem",
    "ItemOutcome",
    "ItemRecord",
    "ItemStatus",
    "LedgerEntry",
    "ListingUrl",
    "PaginationResult",
    "PaginationStopReason",
    "Reference",
    "RunStatus",
    "RunSummary",
    "normalize_output_document",
]
