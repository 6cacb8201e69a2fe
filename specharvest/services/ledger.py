"""In-memory dedup ledger backed by an :class:`ILedgerStore`.

The ledger is the authoritative "have we emitted this item" index.  It
is loaded wholesale at process start, answers membership in O(1), and is
rewritten wholesale by :meth:`Ledger.flush` after every category and on
every exit path.  Entries are only ever added: the engine never mutates
or deletes one.
"""

from __future__ import annotations

from collections import Counter

import structlog

from specharvest.interfaces.ledger_store import ILedgerStore
from specharvest.models.catalog import LedgerEntry
from specharvest.utils.logging import get_logger


class Ledger:
    """Append-only id -> :class:`LedgerEntry` mapping with explicit flushes."""

    def __init__(self, store: ILedgerStore) -> None:
        self._store = store
        self._entries: dict[str, LedgerEntry] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    def load(self) -> dict[str, LedgerEntry]:
        """Replace the in-memory mapping with the persisted one."""
        self._entries = dict(self._store.read_all())
        self._logger.info(
            "ledger_loaded",
            entries=len(self._entries),
            store=self._store.get_provider_name(),
        )
        return dict(self._entries)

    def has(self, item_id: str) -> bool:
        return item_id in self._entries

    def record(self, entry: LedgerEntry) -> None:
        """Insert *entry* keyed by its id.

        Recording the same entry twice leaves the ledger unchanged.
        """
        self._entries[entry.id] = entry

    def flush(self) -> None:
        """Durably rewrite the persisted ledger with the current mapping.

        Raises
        ------
        specharvest.utils.errors.LedgerError
            If the store could not write; the previous file is left intact.
        """
        self._store.write_all(dict(self._entries))
        self._logger.info("ledger_flushed", entries=len(self._entries))

    def get(self, item_id: str) -> LedgerEntry | None:
        return self._entries.get(item_id)

    def entries(self) -> dict[str, LedgerEntry]:
        """Return a snapshot copy of the mapping."""
        return dict(self._entries)

    def count_by_category(self) -> dict[str, int]:
        counts = Counter(entry.category or "unknown" for entry in self._entries.values())
        return dict(sorted(counts.items()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries
