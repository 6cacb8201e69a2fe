"""Abstract base class for ledger persistence backends.

The ledger is read wholesale at process start and rewritten wholesale on
every flush; backends only need to honour those two operations.  Keeping
the backend behind this interface lets the flat JSON document be swapped
for an embedded key-value store without touching the engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from specharvest.models.catalog import LedgerEntry


class ILedgerStore(ABC):
    """Contract for durable id -> entry mappings."""

    @abstractmethod
    def read_all(self) -> dict[str, LedgerEntry]:
        """Return the persisted mapping.

        Returns an empty mapping (and logs a warning) when nothing is
        persisted yet or the persisted form is unreadable; never raises for
        those cases, because a missing ledger just means "first run".
        """

    @abstractmethod
    def write_all(self, entries: dict[str, LedgerEntry]) -> None:
        """Atomically replace the persisted mapping with *entries*.

        Raises
        ------
        specharvest.utils.errors.LedgerError
            If the mapping could not be written.  The previous persisted
            form is left intact.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"json_ledger"``."""
