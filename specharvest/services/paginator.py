"""Listing-page walker that collects references unseen by the ledger.

Walks a category's listing pages in order and stops on the first of:

- a page with zero references (the source's end-of-list signal),
- ``saturation_page_limit`` consecutive pages without a single unseen
  reference (older pages are assumed to hold only items already in the
  ledger; the counter resets whenever a page yields something new),
- a recoverable page failure (fetch error, timeout, unreadable page),
  which ends this category only and keeps what was collected so far.

Block and budget exhaustion propagate immediately.  A malformed listing
URL is a configuration error and fails before any fetch.
"""

from __future__ import annotations

import structlog

from specharvest.interfaces.extractor import IExtractor
from specharvest.models.catalog import Category, ListingUrl, Reference
from specharvest.models.run import PaginationResult, PaginationStopReason
from specharvest.services.budget_governor import GovernedFetcher
from specharvest.services.ledger import Ledger
from specharvest.utils.errors import FatalHarvestError
from specharvest.utils.logging import get_logger

_DEFAULT_SATURATION_PAGE_LIMIT = 3


class Paginator:
    """Collects unseen item references for one category at a time.

    Parameters
    ----------
    fetcher:
        Governed fetch path (charges credits, paces, detects blocks).
    extractor:
        Site extractor used to read references from listing pages.
    ledger:
        Dedup ledger consulted for every reference.
    saturation_page_limit:
        Consecutive pages without unseen references that end pagination.
    """

    def __init__(
        self,
        fetcher: GovernedFetcher,
        extractor: IExtractor,
        ledger: Ledger,
        saturation_page_limit: int = _DEFAULT_SATURATION_PAGE_LIMIT,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._ledger = ledger
        self._saturation_page_limit = max(1, int(saturation_page_limit))
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def collect(self, category: Category) -> PaginationResult:
        """Walk *category*'s listing and return its unseen references.

        Raises
        ------
        ConfigurationError
            If the category's listing URL is malformed.
        BlockDetectedError, BudgetExhaustedError
            Propagated from the fetch path without further pagination.
        """
        listing = ListingUrl.parse(category.listing_url)

        collected: list[Reference] = []
        queued_ids: set[str] = set()
        consecutive_stale_pages = 0
        pages_fetched = 0
        page = 1

        while True:
            page_url = listing.page_url(page)
            self._logger.info("listing_page_fetch", category=category.name, page=page, url=page_url)

            try:
                body = await self._fetcher.fetch(page_url)
                pages_fetched += 1
                references = self._extractor.extract_references(body, page_url)
            except FatalHarvestError:
                raise
            except Exception as exc:
                self._logger.error(
                    "listing_page_failed",
                    category=category.name,
                    page=page,
                    error=str(exc),
                    error_type=type(exc).__name__,
                    collected=len(collected),
                )
                return self._result(
                    category, collected, pages_fetched, PaginationStopReason.FETCH_ERROR, error=str(exc)
                )

            if not references:
                self._logger.info("listing_page_empty", category=category.name, page=page)
                return self._result(category, collected, pages_fetched, PaginationStopReason.EMPTY_LISTING)

            fresh = [
                ref for ref in references
                if not self._ledger.has(ref.id) and ref.id not in queued_ids
            ]
            for ref in fresh:
                queued_ids.add(ref.id)
            collected.extend(fresh)

            self._logger.info(
                "listing_page_parsed",
                category=category.name,
                page=page,
                total=len(references),
                new=len(fresh),
            )

            if fresh:
                consecutive_stale_pages = 0
            else:
                consecutive_stale_pages += 1
                if consecutive_stale_pages >= self._saturation_page_limit:
                    self._logger.info(
                        "listing_saturated",
                        category=category.name,
                        page=page,
                        consecutive_stale_pages=consecutive_stale_pages,
                    )
                    return self._result(category, collected, pages_fetched, PaginationStopReason.SATURATED)

            page += 1

    @staticmethod
    def _result(
        category: Category,
        collected: list[Reference],
        pages_fetched: int,
        stop_reason: PaginationStopReason,
        error: str | None = None,
    ) -> PaginationResult:
        return PaginationResult(
            category=category.name,
            references=list(collected),
            pages_fetched=pages_fetched,
            stop_reason=stop_reason,
            error=error,
        )
