"""SQLite-backed item sink.

Upserts accepted items into an ``items`` table keyed by item id, with the
spec groups stored as a JSON text column.  Uses ``aiosqlite`` for async
I/O.  The same table is the target of the ``load-sql`` bulk import.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from specharvest.interfaces.sink import IItemSink
from specharvest.models.catalog import ItemRecord
from specharvest.utils.errors import SinkError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/items.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS items (
    id           TEXT    PRIMARY KEY,
    name         TEXT    NOT NULL,
    category     TEXT    NOT NULL,
    kind         TEXT    NOT NULL,
    launch_year  INTEGER NOT NULL,
    image        TEXT,
    url          TEXT    NOT NULL,
    specs        TEXT    NOT NULL,
    scraped_at   TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_items_category ON items(category);",
    "CREATE INDEX IF NOT EXISTS idx_items_launch_year ON items(launch_year);",
]

_UPSERT_SQL = """\
INSERT INTO items (id, name, category, kind, launch_year, image, url, specs, scraped_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id)
DO UPDATE SET name        = excluded.name,
              category    = excluded.category,
              kind        = excluded.kind,
              launch_year = excluded.launch_year,
              image       = excluded.image,
              url         = excluded.url,
              specs       = excluded.specs,
              scraped_at  = excluded.scraped_at;
"""


def _row(record: ItemRecord) -> tuple:
    return (
        record.id,
        record.name,
        record.category,
        record.kind,
        record.launch_year,
        record.image,
        record.url,
        json.dumps(record.specs, ensure_ascii=False),
        record.scraped_at,
    )


class SQLiteItemSink(IItemSink):
    """SQLite-backed item persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._initialized = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Create the items table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        self._initialized = True
        logger.info("items_db_initialized", path=str(self._db_path))

    async def append(self, record: ItemRecord) -> None:
        await self.append_many([record])

    async def append_many(self, records: list[ItemRecord]) -> int:
        """Upsert *records* in one transaction.  Returns the row count."""
        if not records:
            return 0
        try:
            if not self._initialized:
                await self.initialize()
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.executemany(_UPSERT_SQL, [_row(r) for r in records])
                await db.commit()
        except (aiosqlite.Error, OSError) as exc:
            raise SinkError(
                message=f"Could not write {len(records)} item(s) to {self._db_path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return len(records)

    async def get_item(self, item_id: str) -> dict[str, Any] | None:
        """Return one stored item with ``specs`` decoded, or ``None``."""
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT id, name, category, kind, launch_year, image, url, specs, scraped_at "
                "FROM items WHERE id = ?",
                (item_id,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        result = dict(row)
        result["specs"] = json.loads(result["specs"])
        return result

    async def count_items(self, category: str | None = None) -> int:
        async with aiosqlite.connect(str(self._db_path)) as db:
            if category:
                cursor = await db.execute(
                    "SELECT COUNT(*) FROM items WHERE category = ?", (category,)
                )
            else:
                cursor = await db.execute("SELECT COUNT(*) FROM items")
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    def get_provider_name(self) -> str:
        return "sqlite_items"
