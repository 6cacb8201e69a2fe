"""Run-level result models: pagination, per-item outcomes, summaries.

These are the explicit state objects passed between the engine stages
instead of module-level counters.  ``RunSummary`` is what the CLI prints
at the end of every run and what decides the process exit status.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from specharvest.models.catalog import Reference


class PaginationStopReason(str, Enum):  # noqa: UP042
    """Why the paginator stopped walking a category's listing pages."""

    EMPTY_LISTING = "empty_listing"      # a page yielded zero references
    SATURATED = "saturated"              # N consecutive pages with nothing new
    FETCH_ERROR = "fetch_error"          # recoverable page-level failure


class PaginationResult(BaseModel):
    """Unseen references collected for one category."""

    model_config = ConfigDict(frozen=True)

    category: str
    references: list[Reference] = Field(default_factory=list)
    pages_fetched: int = 0
    stop_reason: PaginationStopReason
    error: str | None = None


class ItemStatus(str, Enum):  # noqa: UP042
    """Terminal state of one reference after the item pipeline."""

    ACCEPTED = "accepted"          # recorded in the ledger and handed to the sink
    ALREADY_SEEN = "already_seen"  # ledger hit on re-check, no fetch issued
    OUT_OF_SCOPE = "out_of_scope"  # valid page that fails the validity filter
    FAILED = "failed"              # fetch, extraction or sink failure


class ItemOutcome(BaseModel):
    """Result of processing one reference."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    url: str
    status: ItemStatus
    reason: str | None = None
    launch_year: int | None = None


class CategoryResult(BaseModel):
    """Aggregated counters for one category."""

    model_config = ConfigDict(frozen=True)

    category: str
    pages_fetched: int = 0
    new_references: int = 0
    accepted: int = 0
    already_seen: int = 0
    out_of_scope: int = 0
    failed: int = 0
    abandoned_references: int = 0
    stop_reason: str | None = None
    error: str | None = None


class RunStatus(str, Enum):  # noqa: UP042
    """Terminal status of a whole run."""

    COMPLETED = "completed"
    BLOCKED = "blocked"
    BUDGET_EXHAUSTED = "budget_exhausted"
    CONFIGURATION_ERROR = "configuration_error"
    FAILED = "failed"


class RunSummary(BaseModel):
    """Final report of a run; ``exit_code`` is what the scheduler sees."""

    model_config = ConfigDict(frozen=True)

    status: RunStatus
    categories: list[CategoryResult] = Field(default_factory=list)
    credits_used: int = 0
    max_credits: int = 0
    ledger_size: int = 0
    fatal_error: str | None = None

    @property
    def accepted(self) -> int:
        return sum(c.accepted for c in self.categories)

    @property
    def failed(self) -> int:
        return sum(c.failed for c in self.categories)

    @property
    def out_of_scope(self) -> int:
        return sum(c.out_of_scope for c in self.categories)

    @property
    def exit_code(self) -> int:
        return 0 if self.status == RunStatus.COMPLETED else 1
