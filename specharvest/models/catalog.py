"""Pydantic v2 models for catalog categories, references, and items.

All models use frozen config (immutable).  Models that are persisted to
disk (ledger entries, item records) use camelCase aliases so the files
stay compatible with the historical ``seen_products.json`` and
per-category output documents; in Python they are always addressed by
their snake_case field names.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from specharvest.utils.errors import ConfigurationError

# /<slug>-<type>-<numeric id>.php, e.g. /apple-phones-48.php
_LISTING_PATH_RE = re.compile(
    r"/([a-z0-9-]+)-(phones|tablets|watch|earbuds)-(\d+)\.php",
    re.IGNORECASE,
)


class Category(BaseModel):
    """One entry of the externally supplied, ordered category list."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Category key, e.g. 'apple'. Also names the output file.")
    listing_url: str = Field(description="Canonical URL of the first listing page.")
    kind: str = Field(default="phones", description="Catalog section, e.g. 'phones'.")


class ListingUrl(BaseModel):
    """A parsed category listing URL that can derive its paginated URLs."""

    model_config = ConfigDict(frozen=True)

    base: str = Field(description="Scheme and host, e.g. 'https://www.gsmarena.com'.")
    slug: str
    type: str
    numeric_id: str

    @classmethod
    def parse(cls, url: str) -> ListingUrl:
        """Parse *url* into its components.

        Raises
        ------
        ConfigurationError
            If *url* does not follow the ``/<slug>-<type>-<id>.php`` pattern.
            A malformed listing URL is a configuration mistake and is never
            retried.
        """
        match = _LISTING_PATH_RE.search(url or "")
        parts = urlsplit(url or "")
        if match is None or not parts.scheme or not parts.netloc:
            raise ConfigurationError(message=f"Invalid listing URL: {url!r}")
        return cls(
            base=f"{parts.scheme}://{parts.netloc}",
            slug=match.group(1),
            type=match.group(2),
            numeric_id=match.group(3),
        )

    def page_url(self, page: int) -> str:
        """Return the URL of listing page *page* (1-based)."""
        if page < 1:
            raise ValueError(f"Page numbers start at 1, got {page}")
        if page == 1:
            return f"{self.base}/{self.slug}-{self.type}-{self.numeric_id}.php"
        return f"{self.base}/{self.slug}-{self.type}-f-{self.numeric_id}-0-p{page}.php"


class Reference(BaseModel):
    """A discovered, not-yet-processed item link."""

    model_config = ConfigDict(frozen=True)

    url: str
    id: str


class LedgerEntry(BaseModel):
    """One accepted item in the dedup ledger.

    Only ``id`` takes part in identity; the other fields are denormalized
    for humans reading the ledger file.  They are optional because older
    ledgers stored only ``id``, ``name`` and ``scrapedAt``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str | None = None
    category: str | None = None
    launch_year: int | None = Field(default=None, alias="launchYear")
    scraped_at: str | None = Field(default=None, alias="scrapedAt")


class ExtractedItem(BaseModel):
    """The attribute mapping an extractor produces from one item page."""

    model_config = ConfigDict(frozen=True)

    name: str
    launch_year: int
    kind: str = "phone"
    image: str | None = None
    specs: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Attribute groups: group name -> {key: value}.",
    )


class ItemRecord(BaseModel):
    """The enriched output of one successful fetch, handed to a sink."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    category: str
    kind: str
    launch_year: int = Field(alias="launchYear")
    image: str | None = None
    url: str
    specs: dict[str, dict[str, str]] = Field(default_factory=dict)
    scraped_at: str = Field(alias="scrapedAt")

    def to_ledger_entry(self) -> LedgerEntry:
        return LedgerEntry(
            id=self.id,
            name=self.name,
            category=self.category,
            launch_year=self.launch_year,
            scraped_at=self.scraped_at,
        )

    def to_document(self) -> dict:
        """Serialize with the persisted (camelCase) key names."""
        return self.model_dump(mode="json", by_alias=True)


def normalize_output_document(doc: dict[str, Any], default_category: str) -> dict[str, Any]:
    """Return a copy of output document *doc* in the current key layout.

    Files written by the earlier scraper keep the brand in ``brand`` and
    the device kind in ``category``.  When ``kind`` is absent and ``brand``
    is present, those move to ``category`` and ``kind``.  A missing
    category falls back to *default_category* (the output file stem).
    """
    normalized = dict(doc)
    if "kind" not in normalized and "brand" in normalized:
        normalized["kind"] = normalized.get("category")
        brand = normalized.pop("brand")
        normalized["category"] = str(brand).lower() if brand else None
    if not normalized.get("category"):
        normalized["category"] = default_category
    return normalized
