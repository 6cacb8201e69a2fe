"""Abstract base class for site-specific page extractors.

The extractor is the only component that knows the site's markup.  It
maps listing pages to item references and item pages to attribute
groups; everything else in the engine is markup-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from specharvest.models.catalog import ExtractedItem, Reference


class IExtractor(ABC):
    """Contract for HTML -> structured data extraction."""

    @abstractmethod
    def extract_references(self, body: str, page_url: str) -> list[Reference]:
        """Return every item reference on a listing page, in page order.

        An empty list means the listing has ended.
        """

    @abstractmethod
    def extract_item(self, body: str, url: str, category: str) -> ExtractedItem:
        """Extract one item page.

        Raises
        ------
        specharvest.utils.errors.ExtractionError
            If a mandatory field (name, launch year) cannot be located.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"gsmarena"``."""
