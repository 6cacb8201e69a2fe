"""Per-reference fetch -> extract -> validate -> persist pipeline.

Turns one :class:`Reference` into exactly one :class:`ItemOutcome`:

1. re-check the ledger (no fetch if the id is already known),
2. fetch the item page through the governed fetch path,
3. hand the body to the extractor,
4. apply the launch-year validity filter,
5. hand the record to the sink, then record it in the ledger.

The sink is written before the ledger so that an id only enters the
ledger once its record exists in the output.  Everything except a fatal
error is contained here and reported as a ``FAILED`` outcome; failed and
out-of-scope items are never recorded and may resurface on a later run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import structlog

from specharvest.interfaces.extractor import IExtractor
from specharvest.interfaces.sink import IItemSink
from specharvest.models.catalog import Category, ItemRecord, Reference
from specharvest.models.run import ItemOutcome, ItemStatus
from specharvest.services.budget_governor import GovernedFetcher
from specharvest.services.ledger import Ledger
from specharvest.utils.errors import FatalHarvestError
from specharvest.utils.logging import get_logger


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ItemPipeline:
    """Processes item references one at a time.

    Parameters
    ----------
    fetcher:
        Governed fetch path.
    extractor:
        Site extractor for item pages.
    ledger:
        Dedup ledger; updated only for accepted items.
    sink:
        Destination for accepted item records.
    min_launch_year:
        Items announced before this year are out of scope.
    clock:
        Returns the ``scrapedAt`` timestamp; injectable for tests.
    """

    def __init__(
        self,
        fetcher: GovernedFetcher,
        extractor: IExtractor,
        ledger: Ledger,
        sink: IItemSink,
        min_launch_year: int,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._ledger = ledger
        self._sink = sink
        self._min_launch_year = min_launch_year
        self._clock = clock
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def process(self, reference: Reference, category: Category) -> ItemOutcome:
        """Process *reference*; only fatal errors escape."""
        if self._ledger.has(reference.id):
            self._logger.info("item_already_seen", item_id=reference.id, category=category.name)
            return self._outcome(reference, ItemStatus.ALREADY_SEEN)

        try:
            self._logger.info("item_fetch", item_id=reference.id, url=reference.url)
            body = await self._fetcher.fetch(reference.url)
            extracted = self._extractor.extract_item(body, reference.url, category.name)
        except FatalHarvestError:
            raise
        except Exception as exc:
            self._logger.warning(
                "item_failed",
                item_id=reference.id,
                url=reference.url,
                category=category.name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._outcome(reference, ItemStatus.FAILED, reason=str(exc))

        if extracted.launch_year < self._min_launch_year:
            self._logger.info(
                "item_out_of_scope",
                item_id=reference.id,
                name=extracted.name,
                launch_year=extracted.launch_year,
                min_launch_year=self._min_launch_year,
            )
            return self._outcome(
                reference,
                ItemStatus.OUT_OF_SCOPE,
                reason=f"launch year {extracted.launch_year} < {self._min_launch_year}",
                launch_year=extracted.launch_year,
            )

        record = ItemRecord(
            id=reference.id,
            name=extracted.name,
            category=category.name,
            kind=extracted.kind,
            launch_year=extracted.launch_year,
            image=extracted.image,
            url=reference.url,
            specs=extracted.specs,
            scraped_at=self._clock(),
        )

        try:
            await self._sink.append(record)
        except FatalHarvestError:
            raise
        except Exception as exc:
            self._logger.error(
                "item_sink_failed",
                item_id=reference.id,
                sink=self._sink.get_provider_name(),
                error=str(exc),
            )
            return self._outcome(reference, ItemStatus.FAILED, reason=str(exc))

        self._ledger.record(record.to_ledger_entry())
        self._logger.info(
            "item_accepted",
            item_id=record.id,
            name=record.name,
            launch_year=record.launch_year,
            kind=record.kind,
        )
        return self._outcome(reference, ItemStatus.ACCEPTED, launch_year=record.launch_year)

    @staticmethod
    def _outcome(
        reference: Reference,
        status: ItemStatus,
        reason: str | None = None,
        launch_year: int | None = None,
    ) -> ItemOutcome:
        return ItemOutcome(
            item_id=reference.id,
            url=reference.url,
            status=status,
            reason=reason,
            launch_year=launch_year,
        )
