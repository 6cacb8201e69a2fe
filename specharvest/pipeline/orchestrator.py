"""Run orchestrator for the incremental catalog harvest.

Sequences categories, isolates per-category failures, and guarantees the
ledger is flushed after every category and on every exit path.

ARCHITECTURE NOTE:
    Control flow is strictly sequential:

        for each category:
            Paginator.collect()      -> unseen references
            for each reference:
                ItemPipeline.process() -> ItemOutcome
            Ledger.flush()

    Errors are handled at the narrowest scope that keeps the run moving:

        - item failures are contained by ItemPipeline (FAILED outcome),
        - page / category failures end that category only,
        - FatalHarvestError (block, budget, configuration) crosses every
          boundary, is caught once here, the ledger is flushed, and the
          run ends with a non-zero exit status.

    After ``out_of_scope_streak_limit`` consecutive out-of-scope items the
    rest of the category is abandoned.  This assumes listings are ordered
    newest first; if the source ever breaks that order, valid items after
    the streak are skipped silently until a later run.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from specharvest.models.catalog import Category
from specharvest.models.run import (
    CategoryResult,
    ItemOutcome,
    ItemStatus,
    RunStatus,
    RunSummary,
)
from specharvest.services.budget_governor import BudgetGovernor
from specharvest.services.item_pipeline import ItemPipeline
from specharvest.services.ledger import Ledger
from specharvest.services.paginator import Paginator
from specharvest.utils.errors import (
    BlockDetectedError,
    BudgetExhaustedError,
    ConfigurationError,
    FatalHarvestError,
)
from specharvest.utils.logging import get_logger

_DEFAULT_OUT_OF_SCOPE_STREAK_LIMIT = 3


@dataclass
class _CategoryTally:
    """Mutable per-category counters (internal; frozen into CategoryResult)."""

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

    def add(self, outcome: ItemOutcome) -> None:
        if outcome.status == ItemStatus.ACCEPTED:
            self.accepted += 1
        elif outcome.status == ItemStatus.ALREADY_SEEN:
            self.already_seen += 1
        elif outcome.status == ItemStatus.OUT_OF_SCOPE:
            self.out_of_scope += 1
        else:
            self.failed += 1

    def freeze(self) -> CategoryResult:
        return CategoryResult(
            category=self.category,
            pages_fetched=self.pages_fetched,
            new_references=self.new_references,
            accepted=self.accepted,
            already_seen=self.already_seen,
            out_of_scope=self.out_of_scope,
            failed=self.failed,
            abandoned_references=self.abandoned_references,
            stop_reason=self.stop_reason,
            error=self.error,
        )


class RunOrchestrator:
    """Runs the paginator and item pipeline over an ordered category list.

    All collaborators are injected; the orchestrator never builds them.
    """

    def __init__(
        self,
        ledger: Ledger,
        governor: BudgetGovernor,
        paginator: Paginator,
        pipeline: ItemPipeline,
        out_of_scope_streak_limit: int = _DEFAULT_OUT_OF_SCOPE_STREAK_LIMIT,
    ) -> None:
        self._ledger = ledger
        self._governor = governor
        self._paginator = paginator
        self._pipeline = pipeline
        self._streak_limit = max(1, int(out_of_scope_streak_limit))
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, categories: list[Category]) -> RunSummary:
        """Harvest every category in order and return the run summary.

        Never raises for fatal harvest conditions; they are reported through
        ``RunSummary.status`` and a non-zero ``exit_code``.
        """
        self._ledger.load()
        self._logger.info(
            "run_start",
            categories=len(categories),
            ledger_entries=len(self._ledger),
            max_credits=self._governor.max_credits,
        )

        tallies: list[_CategoryTally] = []
        status = RunStatus.COMPLETED
        fatal_error: str | None = None
        flush_error: str | None = None

        try:
            for category in categories:
                tally = _CategoryTally(category=category.name)
                tallies.append(tally)
                await self._run_category(category, tally)
                self._flush_ledger(category=category.name)
        except FatalHarvestError as exc:
            status = self._status_for(exc)
            fatal_error = str(exc)
            self._logger.error(
                "run_halted",
                status=status.value,
                error=fatal_error,
                credits_used=self._governor.credits_used,
            )
        except Exception as exc:
            status = RunStatus.FAILED
            fatal_error = f"{type(exc).__name__}: {exc}"
            self._logger.exception("run_unexpected_error", error=fatal_error)
        finally:
            # Runs on interruption and cancellation too; those still propagate.
            flush_error = self._flush_ledger(category=None)

        if flush_error is not None:
            message = f"ledger flush failed: {flush_error}"
            if status == RunStatus.COMPLETED:
                status = RunStatus.FAILED
                fatal_error = message
            else:
                fatal_error = f"{fatal_error}; {message}"

        summary = RunSummary(
            status=status,
            categories=[tally.freeze() for tally in tallies],
            credits_used=self._governor.credits_used,
            max_credits=self._governor.max_credits,
            ledger_size=len(self._ledger),
            fatal_error=fatal_error,
        )
        self._log_summary(summary)
        return summary

    # ------------------------------------------------------------------
    # Per-category work
    # ------------------------------------------------------------------

    async def _run_category(self, category: Category, tally: _CategoryTally) -> None:
        self._logger.info("category_start", category=category.name, kind=category.kind)

        try:
            pagination = await self._paginator.collect(category)
        except FatalHarvestError:
            raise
        except Exception as exc:
            tally.error = str(exc)
            self._logger.error("category_failed", category=category.name, error=str(exc))
            return

        tally.pages_fetched = pagination.pages_fetched
        tally.new_references = len(pagination.references)
        tally.stop_reason = pagination.stop_reason.value
        tally.error = pagination.error
        self._logger.info(
            "category_references_collected",
            category=category.name,
            new_references=len(pagination.references),
            pages_fetched=pagination.pages_fetched,
            stop_reason=pagination.stop_reason.value,
        )

        out_of_scope_streak = 0
        references = pagination.references
        for index, reference in enumerate(references):
            try:
                outcome = await self._pipeline.process(reference, category)
            except FatalHarvestError:
                raise
            except Exception as exc:
                tally.failed += 1
                self._logger.error(
                    "item_unexpected_error",
                    category=category.name,
                    item_id=reference.id,
                    error=str(exc),
                )
                continue

            tally.add(outcome)
            if outcome.status == ItemStatus.ACCEPTED:
                out_of_scope_streak = 0
            elif outcome.status == ItemStatus.OUT_OF_SCOPE:
                out_of_scope_streak += 1
                if out_of_scope_streak >= self._streak_limit:
                    tally.abandoned_references = len(references) - index - 1
                    self._logger.info(
                        "category_abandoned_out_of_scope",
                        category=category.name,
                        streak=out_of_scope_streak,
                        abandoned=tally.abandoned_references,
                    )
                    break

        self._logger.info(
            "category_complete",
            category=category.name,
            accepted=tally.accepted,
            out_of_scope=tally.out_of_scope,
            failed=tally.failed,
            credits_used=self._governor.credits_used,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _flush_ledger(self, category: str | None) -> str | None:
        """Flush the ledger; return the error text on failure, else ``None``."""
        try:
            self._ledger.flush()
        except Exception as exc:
            self._logger.error("ledger_flush_failed", category=category, error=str(exc))
            return str(exc)
        return None

    @staticmethod
    def _status_for(exc: FatalHarvestError) -> RunStatus:
        if isinstance(exc, BlockDetectedError):
            return RunStatus.BLOCKED
        if isinstance(exc, BudgetExhaustedError):
            return RunStatus.BUDGET_EXHAUSTED
        if isinstance(exc, ConfigurationError):
            return RunStatus.CONFIGURATION_ERROR
        return RunStatus.FAILED

    def _log_summary(self, summary: RunSummary) -> None:
        log = self._logger.info if summary.status == RunStatus.COMPLETED else self._logger.error
        log(
            "run_summary",
            status=summary.status.value,
            accepted=summary.accepted,
            failed=summary.failed,
            out_of_scope=summary.out_of_scope,
            credits_used=summary.credits_used,
            max_credits=summary.max_credits,
            ledger_size=summary.ledger_size,
            exit_code=summary.exit_code,
        )
        if summary.status == RunStatus.BLOCKED:
            self._logger.error(
                "run_blocked_advice",
                message="Stopped to avoid spending credits on blocked requests; run again later.",
            )
