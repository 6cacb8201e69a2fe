"""JSON-document ledger store.

Persists the ledger as a single human-diffable JSON object
(``{"<id>": {"id", "name", "category", "launchYear", "scrapedAt"}}``) and
rewrites it atomically (temp file in the same directory, fsync, then
``os.replace``), so a crash mid-write never leaves a truncated ledger.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from specharvest.interfaces.ledger_store import ILedgerStore
from specharvest.models.catalog import LedgerEntry
from specharvest.utils.atomic import atomic_write_text
from specharvest.utils.errors import LedgerError
from specharvest.utils.logging import get_logger

_DEFAULT_LEDGER_PATH = Path("seen_products.json")


class JsonLedgerStore(ILedgerStore):
    """Ledger persisted to one JSON file."""

    def __init__(self, path: str | Path = _DEFAULT_LEDGER_PATH) -> None:
        self._path = Path(path)
        self._logger = get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def get_provider_name(self) -> str:
        return "json_ledger"

    def read_all(self) -> dict[str, LedgerEntry]:
        if not self._path.exists():
            self._logger.warning("ledger_missing_starting_fresh", path=str(self._path))
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._logger.warning("ledger_unreadable_starting_fresh", path=str(self._path), error=str(exc))
            return {}

        if not isinstance(raw, dict):
            self._logger.warning(
                "ledger_unreadable_starting_fresh",
                path=str(self._path),
                error=f"expected a JSON object, got {type(raw).__name__}",
            )
            return {}

        entries: dict[str, LedgerEntry] = {}
        for key, value in raw.items():
            if not isinstance(value, dict):
                self._logger.warning("ledger_entry_skipped", item_id=key, error="not an object")
                continue
            try:
                entries[str(key)] = LedgerEntry.model_validate({**value, "id": str(value.get("id") or key)})
            except ValidationError as exc:
                self._logger.warning("ledger_entry_skipped", item_id=key, error=str(exc))
        return entries

    def write_all(self, entries: dict[str, LedgerEntry]) -> None:
        document = {
            item_id: entry.model_dump(mode="json", by_alias=True, exclude_none=True)
            for item_id, entry in entries.items()
        }
        payload = json.dumps(document, indent=2, ensure_ascii=False) + "\n"
        try:
            atomic_write_text(self._path, payload)
        except OSError as exc:
            raise LedgerError(
                message=f"Could not write ledger {self._path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
