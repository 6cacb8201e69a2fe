"""Shared pytest fixtures for the specharvest test suite."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest
import structlog

from specharvest.interfaces.sink import IItemSink
from specharvest.interfaces.transport import FetchResponse, ITransport
from specharvest.models.catalog import Category, ItemRecord
from specharvest.pipeline.orchestrator import RunOrchestrator
from specharvest.providers.extractor.gsmarena_extractor import GSMArenaExtractor
from specharvest.providers.ledger.json_ledger_store import JsonLedgerStore
from specharvest.services.budget_governor import BudgetGovernor, GovernedFetcher
from specharvest.services.item_pipeline import ItemPipeline
from specharvest.services.ledger import Ledger
from specharvest.services.paginator import Paginator
from specharvest.utils.errors import SinkError
from specharvest.utils.pacing import RequestPacer

BASE_URL = "https://www.example-catalog.test"


# ---------------------------------------------------------------------------
# URL and HTML builders
# ---------------------------------------------------------------------------


def listing_url(slug: str = "acme", numeric_id: int = 7, page: int = 1) -> str:
    if page == 1:
        return f"{BASE_URL}/{slug}-phones-{numeric_id}.php"
    return f"{BASE_URL}/{slug}-phones-f-{numeric_id}-0-p{page}.php"


def item_url(item_id: str | int) -> str:
    return f"{BASE_URL}/acme_model_{item_id}-{item_id}.php"


def listing_html(ids: list[str | int]) -> str:
    items = "".join(
        f'<li><a href="acme_model_{i}-{i}.php"><img src="/t/{i}.jpg"><strong><span>Model {i}</span></strong></a></li>'
        for i in ids
    )
    return f'<html><body><div class="makers"><ul>{items}</ul></div></body></html>'


def item_html(
    name: str,
    announced: str = "2024, March 01",
    groups: tuple[str, ...] = ("Network", "Launch", "Body", "Display", "Battery", "SIM"),
    image: str | None = "https://cdn.example-catalog.test/pics/model.jpg",
) -> str:
    tables = []
    for group in groups:
        if group == "Launch":
            rows = (
                f'<tr><th rowspan="2">Launch</th><td class="ttl"><a>Announced</a></td>'
                f'<td class="nfo">{announced}</td></tr>'
                '<tr><td class="ttl"><a>Status</a></td><td class="nfo">Available</td></tr>'
            )
        else:
            rows = (
                f'<tr><th>{group}</th><td class="ttl"><a>Detail</a></td>'
                f'<td class="nfo">{group} detail</td></tr>'
            )
        tables.append(f"<table>{rows}</table>")
    photo = f'<div class="specs-photo-main"><a><img src="{image}"></a></div>' if image else ""
    return (
        "<html><body>"
        f'<h1 class="specs-phone-name-title">{name}</h1>'
        f"{photo}"
        f'<div id="specs-list">{"".join(tables)}</div>'
        "</body></html>"
    )


def ok(body: str, url: str = "") -> FetchResponse:
    return FetchResponse(url=url, body=body, ok=True, status_code=200)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeTransport(ITransport):
    """Scripted transport: URL -> response, body string, or exception.

    Unscripted URLs answer with an empty listing page, which ends
    pagination.
    """

    def __init__(self, pages: dict[str, FetchResponse | str | BaseException] | None = None) -> None:
        self.pages: dict[str, FetchResponse | str | BaseException] = dict(pages or {})
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        scripted = self.pages.get(url, listing_html([]))
        if isinstance(scripted, BaseException):
            raise scripted
        if isinstance(scripted, FetchResponse):
            return scripted
        return FetchResponse(url=url, body=scripted, ok=True, status_code=200)

    def get_provider_name(self) -> str:
        return "fake"

    async def aclose(self) -> None:
        self.closed = True


class InMemorySink(IItemSink):
    """Collects records in a list; ids in ``fail_ids`` raise SinkError."""

    def __init__(self, fail_ids: set[str] | None = None) -> None:
        self.records: list[ItemRecord] = []
        self.fail_ids = set(fail_ids or ())

    async def append(self, record: ItemRecord) -> None:
        if record.id in self.fail_ids:
            raise SinkError(message=f"cannot store {record.id}", provider_name="memory")
        self.records.append(record)

    @property
    def ids(self) -> list[str]:
        return [r.id for r in self.records]

    def get_provider_name(self) -> str:
        return "memory"


@dataclass
class Engine:
    transport: FakeTransport
    sink: InMemorySink
    store: JsonLedgerStore
    ledger: Ledger
    governor: BudgetGovernor
    fetcher: GovernedFetcher
    paginator: Paginator
    pipeline: ItemPipeline
    orchestrator: RunOrchestrator


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def acme_category() -> Category:
    return Category(name="acme", listing_url=listing_url())


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def memory_sink() -> InMemorySink:
    return InMemorySink()


@pytest.fixture
def instant_pacer() -> RequestPacer:
    """A pacer with a zero-width window: never sleeps."""
    return RequestPacer(0, 0)


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "seen_products.json"


@pytest.fixture
def engine_factory(ledger_path: Path) -> Callable[..., Engine]:
    """Build a fully wired engine around a scripted transport."""

    def _build(
        pages: dict[str, FetchResponse | str | BaseException] | None = None,
        max_credits: int = 950,
        min_launch_year: int = 2023,
        saturation_page_limit: int = 3,
        out_of_scope_streak_limit: int = 3,
        sink: InMemorySink | None = None,
    ) -> Engine:
        transport = FakeTransport(pages)
        sink = sink or InMemorySink()
        store = JsonLedgerStore(ledger_path)
        ledger = Ledger(store)
        governor = BudgetGovernor(max_credits=max_credits)
        fetcher = GovernedFetcher(transport=transport, governor=governor, pacer=RequestPacer(0, 0))
        extractor = GSMArenaExtractor()
        paginator = Paginator(fetcher, extractor, ledger, saturation_page_limit=saturation_page_limit)
        pipeline = ItemPipeline(
            fetcher,
            extractor,
            ledger,
            sink,
            min_launch_year=min_launch_year,
            clock=lambda: "2025-01-01T00:00:00.000Z",
        )
        orchestrator = RunOrchestrator(
            ledger,
            governor,
            paginator,
            pipeline,
            out_of_scope_streak_limit=out_of_scope_streak_limit,
        )
        return Engine(
            transport=transport,
            sink=sink,
            store=store,
            ledger=ledger,
            governor=governor,
            fetcher=fetcher,
            paginator=paginator,
            pipeline=pipeline,
            orchestrator=orchestrator,
        )

    return _build


@pytest.fixture(autouse=True)
def _uncached_loggers(monkeypatch: pytest.MonkeyPatch):
    """Resolve ``sys.stdout`` on every log call instead of caching loggers.

    Cached structlog loggers keep the stream they first wrote to, which
    breaks once ``capsys`` closes it.
    """
    from specharvest.cli import harvest
    from specharvest.utils.logging import configure_logging

    def _configure(*args, **kwargs):
        configure_logging(*args, **kwargs)
        structlog.configure(cache_logger_on_first_use=False)

    configure_logging()
    structlog.configure(cache_logger_on_first_use=False)
    monkeypatch.setattr(harvest, "configure_logging", _configure)
    yield
    logging.getLogger().handlers.clear()
