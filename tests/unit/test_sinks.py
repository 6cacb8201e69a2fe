"""Unit tests for JsonFileSink and SQLiteItemSink.

Each SQLite test uses a temporary database to ensure isolation.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import pytest_asyncio

from specharvest.models.catalog import ItemRecord
from specharvest.providers.sink import JsonFileSink, SQLiteItemSink
from specharvest.utils.errors import SinkError


def _record(item_id: str, year: int = 2024, category: str = "Acme", name: str | None = None) -> ItemRecord:
    return ItemRecord(
        id=item_id,
        name=name or f"Model {item_id}",
        category=category,
        kind="phone",
        launch_year=year,
        image=None,
        url=f"https://x.test/acme_model_{item_id}-{item_id}.php",
        specs={"Launch": {"Announced": str(year)}},
        scraped_at="2025-01-01T00:00:00.000Z",
    )


# ======================================================================
# JsonFileSink
# ======================================================================


class TestJsonFileSink:
    @pytest.mark.asyncio
    async def test_writes_one_lowercase_file_per_category(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        await sink.append(_record("1", category="Acme"))
        await sink.append(_record("2", category="globex"))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["acme.json", "globex.json"]
        docs = json.loads((tmp_path / "acme.json").read_text(encoding="utf-8"))
        assert docs[0]["id"] == "1"
        assert docs[0]["launchYear"] == 2024
        assert docs[0]["scrapedAt"] == "2025-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_sorted_newest_first(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        await sink.append(_record("1", year=2023))
        await sink.append(_record("2", year=2025))
        await sink.append(_record("3", year=2024))

        docs = json.loads((tmp_path / "acme.json").read_text(encoding="utf-8"))
        assert [d["launchYear"] for d in docs] == [2025, 2024, 2023]

    @pytest.mark.asyncio
    async def test_same_id_replaces_existing_document(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        await sink.append(_record("1", name="Old name"))
        await sink.append(_record("1", name="New name"))

        docs = json.loads((tmp_path / "acme.json").read_text(encoding="utf-8"))
        assert len(docs) == 1
        assert docs[0]["name"] == "New name"

    @pytest.mark.asyncio
    async def test_appends_to_existing_output_file(self, tmp_path: Path) -> None:
        (tmp_path / "acme.json").write_text(
            json.dumps([{"id": "900", "name": "Legacy", "launchYear": 2023}]),
            encoding="utf-8",
        )
        sink = JsonFileSink(tmp_path)
        await sink.append(_record("1", year=2024))

        docs = json.loads((tmp_path / "acme.json").read_text(encoding="utf-8"))
        assert [d["id"] for d in docs] == ["1", "900"]

    @pytest.mark.asyncio
    async def test_unreadable_existing_file_is_not_overwritten(self, tmp_path: Path) -> None:
        path = tmp_path / "acme.json"
        path.write_text("{broken", encoding="utf-8")
        sink = JsonFileSink(tmp_path)

        with pytest.raises(SinkError):
            await sink.append(_record("1"))
        assert path.read_text(encoding="utf-8") == "{broken"

    @pytest.mark.asyncio
    async def test_write_failure_raises_sink_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        sink = JsonFileSink(blocker / "out")

        with pytest.raises(SinkError):
            await sink.append(_record("1"))


# ======================================================================
# SQLiteItemSink
# ======================================================================


@pytest_asyncio.fixture
async def sqlite_sink(tmp_path: Path) -> SQLiteItemSink:
    """Create and initialize a sink with a temp DB."""
    sink = SQLiteItemSink(db_path=tmp_path / "items.db")
    await sink.initialize()
    return sink


class TestSQLiteItemSink:
    @pytest.mark.asyncio
    async def test_append_and_get(self, sqlite_sink: SQLiteItemSink) -> None:
        await sqlite_sink.append(_record("1"))

        row = await sqlite_sink.get_item("1")
        assert row is not None
        assert row["name"] == "Model 1"
        assert row["launch_year"] == 2024
        assert row["specs"] == {"Launch": {"Announced": "2024"}}

    @pytest.mark.asyncio
    async def test_missing_item_returns_none(self, sqlite_sink: SQLiteItemSink) -> None:
        assert await sqlite_sink.get_item("nope") is None

    @pytest.mark.asyncio
    async def test_upsert_replaces_row(self, sqlite_sink: SQLiteItemSink) -> None:
        await sqlite_sink.append(_record("1", name="Old"))
        await sqlite_sink.append(_record("1", name="New"))

        assert await sqlite_sink.count_items() == 1
        row = await sqlite_sink.get_item("1")
        assert row["name"] == "New"

    @pytest.mark.asyncio
    async def test_append_many_and_count_by_category(self, sqlite_sink: SQLiteItemSink) -> None:
        loaded = await sqlite_sink.append_many(
            [_record("1"), _record("2"), _record("3", category="globex")]
        )

        assert loaded == 3
        assert await sqlite_sink.count_items() == 3
        assert await sqlite_sink.count_items("Acme") == 2

    @pytest.mark.asyncio
    async def test_append_initializes_lazily(self, tmp_path: Path) -> None:
        sink = SQLiteItemSink(db_path=tmp_path / "nested" / "items.db")
        await sink.append(_record("1"))
        assert await sink.count_items() == 1

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self, sqlite_sink: SQLiteItemSink) -> None:
        assert await sqlite_sink.append_many([]) == 0
