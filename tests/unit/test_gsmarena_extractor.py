"""Unit tests for GSMArenaExtractor and its helpers."""

from __future__ import annotations

import pytest

from specharvest.providers.extractor.gsmarena_extractor import (
    GSMArenaExtractor,
    detect_kind,
    extract_item_id,
    extract_launch_year,
)
from specharvest.utils.errors import ExtractionError
from tests.conftest import item_html

_LISTING_PAGE = """
<html><body>
<div class="makers">
  <ul>
    <li><a href="apple_iphone_16_pro_max-13123.php"><img src="a.jpg"><strong><span>iPhone 16 Pro Max</span></strong></a></li>
    <li><a href="apple_iphone_16-13317.php"><img src="b.jpg"><strong><span>iPhone 16</span></strong></a></li>
    <li><a href="apple-phones-f-48-0-p2.php">next</a></li>
    <li><a href="/news.php3">news</a></li>
    <li><a>no href</a></li>
  </ul>
</div>
<div class="footer"><a href="samsung_galaxy_s24-12773.php">elsewhere</a></div>
</body></html>
"""

_ITEM_PAGE = """
<html><body>
<h1 class="specs-phone-name-title">Apple iPhone 16</h1>
<div class="specs-photo-main"><a href="#"><img alt="Apple iPhone 16" src="https://fdn2.gsmarena.com/vv/bigpic/apple-iphone-16.jpg"></a></div>
<div id="specs-list">
  <table cellspacing="0">
    <tr><th rowspan="3" scope="row">Network</th>
        <td class="ttl"><a href="network-bands.php3">Technology</a></td>
        <td class="nfo"><a href="#">GSM / CDMA / HSPA / EVDO / LTE / 5G</a></td></tr>
  </table>
  <table cellspacing="0">
    <tr><th rowspan="2" scope="row">Launch</th>
        <td class="ttl"><a href="glossary.php3?term=phone-life-cycle">Announced</a></td>
        <td class="nfo">2024, September 09</td></tr>
    <tr><td class="ttl"><a href="glossary.php3?term=phone-life-cycle">Status</a></td>
        <td class="nfo">Available. Released 2024, September 20</td></tr>
  </table>
  <table cellspacing="0">
    <tr><th rowspan="2" scope="row">Body</th>
        <td class="ttl"><a href="#">Dimensions</a></td>
        <td class="nfo">147.6 x 71.6 x 7.8 mm</td></tr>
    <tr><td class="ttl"><a href="#">SIM</a></td>
        <td class="nfo">Nano-SIM and eSIM<br>Dual eSIM</td></tr>
  </table>
  <table cellspacing="0">
    <tr><th rowspan="1" scope="row">Display</th>
        <td class="ttl"><a href="#">Type</a></td>
        <td class="nfo">Super Retina XDR OLED</td></tr>
    <tr><td class="ttl">&nbsp;</td><td class="nfo">continuation row</td></tr>
  </table>
  <table cellspacing="0">
    <tr><th scope="row">Battery</th>
        <td class="ttl"><a href="#">Type</a></td>
        <td class="nfo">Li-Ion 3561 mAh</td></tr>
  </table>
  <table cellspacing="0">
    <tr><th scope="row">SIM</th>
        <td class="ttl"><a href="#">Slots</a></td>
        <td class="nfo">Dual</td></tr>
  </table>
</div>
</body></html>
"""


class TestHelpers:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://www.gsmarena.com/apple_iphone_16-13317.php", "13317"),
            ("apple_iphone_16_pro_max-13123.php", "13123"),
            ("https://www.gsmarena.com/apple-phones-48.php", "48"),
            ("https://www.gsmarena.com/news.php3", None),
            ("", None),
        ],
    )
    def test_extract_item_id(self, url: str, expected: str | None) -> None:
        assert extract_item_id(url) == expected

    def test_extract_launch_year(self) -> None:
        assert extract_launch_year({"Launch": {"Announced": "2024, September 09"}}) == 2024
        assert extract_launch_year({"Launch": {"Announced": "Exp. announcement 2025, Q3"}}) == 2025
        assert extract_launch_year({"Launch": {"Announced": "Not officially announced yet"}}) is None
        assert extract_launch_year({}) is None

    @pytest.mark.parametrize(
        "groups,name,expected",
        [
            ({"Sound", "Battery", "Body"}, "Galaxy Buds3", "earbuds"),
            ({"Display", "Battery", "Body"}, "Galaxy Watch7", "watch"),
            ({"Display", "Battery", "Body"}, "Pixel Smartwatch", "watch"),
            ({"Display", "Battery", "Body"}, "Galaxy Tab S10", "tablet"),
            ({"Display", "Battery", "SIM", "Sound"}, "iPhone 16", "phone"),
            ({"Body"}, "Charger", "accessory"),
            (set(), "Mystery", "phone"),
            ({"Display", "SIM"}, "Feature phone", "phone"),
        ],
    )
    def test_detect_kind(self, groups: set[str], name: str, expected: str) -> None:
        specs = {group: {"Detail": "x"} for group in groups}
        assert detect_kind(specs, name) == expected


class TestGSMArenaExtractor:
    @pytest.fixture()
    def extractor(self) -> GSMArenaExtractor:
        return GSMArenaExtractor()

    def test_provider_name(self, extractor: GSMArenaExtractor) -> None:
        assert extractor.get_provider_name() == "gsmarena"

    def test_extract_references(self, extractor: GSMArenaExtractor) -> None:
        refs = extractor.extract_references(_LISTING_PAGE, "https://www.gsmarena.com/apple-phones-48.php")

        assert [(r.id, r.url) for r in refs] == [
            ("13123", "https://www.gsmarena.com/apple_iphone_16_pro_max-13123.php"),
            ("13317", "https://www.gsmarena.com/apple_iphone_16-13317.php"),
        ]

    def test_extract_references_empty_page(self, extractor: GSMArenaExtractor) -> None:
        assert extractor.extract_references("<html><body></body></html>", "https://x.test/a-phones-1.php") == []

    def test_extract_item(self, extractor: GSMArenaExtractor) -> None:
        item = extractor.extract_item(_ITEM_PAGE, "https://www.gsmarena.com/apple_iphone_16-13317.php", "apple")

        assert item.name == "Apple iPhone 16"
        assert item.launch_year == 2024
        assert item.kind == "phone"
        assert item.image == "https://fdn2.gsmarena.com/vv/bigpic/apple-iphone-16.jpg"
        assert item.specs["Network"]["Technology"] == "GSM / CDMA / HSPA / EVDO / LTE / 5G"
        assert item.specs["Launch"]["Status"] == "Available. Released 2024, September 20"
        assert item.specs["Body"]["SIM"] == "Nano-SIM and eSIM Dual eSIM"
        assert item.specs["Display"] == {"Type": "Super Retina XDR OLED"}

    def test_missing_name_raises(self, extractor: GSMArenaExtractor) -> None:
        html = _ITEM_PAGE.replace('<h1 class="specs-phone-name-title">Apple iPhone 16</h1>', "")
        with pytest.raises(ExtractionError, match="name"):
            extractor.extract_item(html, "https://x.test/a-1.php", "apple")

    def test_missing_launch_year_raises(self, extractor: GSMArenaExtractor) -> None:
        html = item_html("Acme Model 1", announced="Rumored")
        with pytest.raises(ExtractionError, match="launch year"):
            extractor.extract_item(html, "https://x.test/a-1.php", "acme")

    def test_missing_photo_is_allowed(self, extractor: GSMArenaExtractor) -> None:
        item = extractor.extract_item(item_html("Acme Model 1", image=None), "https://x.test/a-1.php", "acme")
        assert item.image is None

    def test_tablet_detected_from_groups(self, extractor: GSMArenaExtractor) -> None:
        html = item_html("Acme Tab 11", groups=("Launch", "Body", "Display", "Battery"))
        item = extractor.extract_item(html, "https://x.test/a-1.php", "acme")
        assert item.kind == "tablet"
