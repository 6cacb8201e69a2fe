"""Abstract base class for item record sinks.

Sinks own the durable storage format (JSON files, SQLite) and any
storage-level dedup or ordering policy.  The engine calls ``append`` at
most once per accepted item.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from specharvest.models.catalog import ItemRecord


class IItemSink(ABC):
    """Contract for components that persist accepted item records."""

    @abstractmethod
    async def append(self, record: ItemRecord) -> None:
        """Persist *record*.

        Raises
        ------
        specharvest.utils.errors.SinkError
            If the record could not be written.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"json_files"``."""

    async def close(self) -> None:
        """Flush and release resources.  Default: nothing to release."""
