"""GSMArena-style catalog extractor built on BeautifulSoup.

Listing pages expose item links as ``.makers li a[href$=".php"]``; the
numeric item id is the ``-<digits>.php`` suffix of the link.  Item pages
carry the name in ``<h1>``, the main photo in ``.specs-photo-main img``,
and the spec sheet as one ``<table>`` per attribute group inside
``#specs-list`` (group name in the first ``<th>``, rows as
``.ttl`` / ``.nfo`` cells).

Name and ``Launch -> Announced`` year are mandatory.  There is no
fallback for the year: a page without a parseable announcement year is
an extraction failure, not an item with a guessed date.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from specharvest.interfaces.extractor import IExtractor
from specharvest.models.catalog import ExtractedItem, Reference
from specharvest.utils.errors import ExtractionError

_ITEM_ID_RE = re.compile(r"-(\d+)\.php$")
_YEAR_RE = re.compile(r"\b(20\d{2})\b")


def extract_item_id(url: str) -> str | None:
    """Return the numeric item id at the end of *url*, or ``None``."""
    match = _ITEM_ID_RE.search(url or "")
    return match.group(1) if match else None


def extract_launch_year(specs: dict[str, dict[str, str]]) -> int | None:
    """Return the year from ``Launch -> Announced``, or ``None``."""
    announced = specs.get("Launch", {}).get("Announced", "")
    match = _YEAR_RE.search(announced)
    return int(match.group(1)) if match else None


def detect_kind(specs: dict[str, dict[str, str]], name: str) -> str:
    """Classify a device from which spec groups are present.

    - Sound without Display or SIM -> earbuds
    - Display + Battery without SIM -> watch (if named so) or tablet
    - Display + Battery + SIM       -> phone
    - only Body                     -> accessory
    - anything else                 -> phone
    """

    def has(group: str) -> bool:
        return bool(specs.get(group))

    display, battery, sim, sound, body = (
        has("Display"), has("Battery"), has("SIM"), has("Sound"), has("Body"),
    )

    if sound and not display and not sim:
        return "earbuds"
    if display and battery and not sim:
        lowered = name.lower()
        if "watch" in lowered:
            return "watch"
        return "tablet"
    if display and battery and sim:
        return "phone"
    if body and not display and not battery and not sim and not sound:
        return "accessory"
    return "phone"


class GSMArenaExtractor(IExtractor):
    """Parses GSMArena-style listing and item pages."""

    def get_provider_name(self) -> str:
        return "gsmarena"

    def extract_references(self, body: str, page_url: str) -> list[Reference]:
        soup = BeautifulSoup(body, "html.parser")
        references: list[Reference] = []
        for link in soup.select(".makers li a"):
            href = (link.get("href") or "").strip()
            if not href.endswith(".php"):
                continue
            url = urljoin(page_url, href)
            item_id = extract_item_id(url)
            if item_id:
                references.append(Reference(url=url, id=item_id))
        return references

    def extract_item(self, body: str, url: str, category: str) -> ExtractedItem:
        soup = BeautifulSoup(body, "html.parser")

        heading = soup.find("h1")
        name = heading.get_text(strip=True) if heading else ""
        if not name:
            raise ExtractionError(
                message=f"Could not extract product name from {url}",
                provider_name=self.get_provider_name(),
            )

        photo = soup.select_one(".specs-photo-main img")
        image = photo.get("src") if photo else None

        specs = self._parse_specs(soup)
        launch_year = extract_launch_year(specs)
        if launch_year is None:
            raise ExtractionError(
                message=f"Could not extract launch year from Launch.Announced for {url}",
                provider_name=self.get_provider_name(),
            )

        return ExtractedItem(
            name=name,
            launch_year=launch_year,
            kind=detect_kind(specs, name),
            image=image or None,
            specs=specs,
        )

    @staticmethod
    def _parse_specs(soup: BeautifulSoup) -> dict[str, dict[str, str]]:
        specs: dict[str, dict[str, str]] = {}
        for table in soup.select("#specs-list table"):
            header = table.find("th")
            section = header.get_text(strip=True) if header else ""
            if not section:
                continue
            group = specs.setdefault(section, {})
            for row in table.find_all("tr"):
                key_cell = row.select_one(".ttl")
                value_cell = row.select_one(".nfo")
                if key_cell is None or value_cell is None:
                    continue
                key = key_cell.get_text(" ", strip=True)
                value = value_cell.get_text(" ", strip=True)
                if key and value:
                    group[key] = value
        return specs
