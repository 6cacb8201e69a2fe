"""Per-category JSON file sink.

Each category owns one file, ``<output_dir>/<category>.json``, holding a
JSON array of item documents.  Every append rewrites the whole file
atomically: the record replaces any existing document with the same id
and the array is re-sorted newest ``launchYear`` first.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from specharvest.interfaces.sink import IItemSink
from specharvest.models.catalog import ItemRecord
from specharvest.utils.atomic import atomic_write_text
from specharvest.utils.errors import SinkError
from specharvest.utils.logging import get_logger

_DEFAULT_OUTPUT_DIR = Path("scraped_products")


def category_file_name(category: str) -> str:
    return f"{category.lower()}.json"


class JsonFileSink(IItemSink):
    """Writes accepted items into one JSON array per category."""

    def __init__(self, output_dir: str | Path = _DEFAULT_OUTPUT_DIR) -> None:
        self._output_dir = Path(output_dir)
        self._documents: dict[str, list[dict[str, Any]]] = {}
        self._logger = get_logger(__name__)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def get_provider_name(self) -> str:
        return "json_files"

    def output_path(self, category: str) -> Path:
        return self._output_dir / category_file_name(category)

    async def append(self, record: ItemRecord) -> None:
        documents = self._documents_for(record.category)
        merged = [doc for doc in documents if str(doc.get("id")) != record.id]
        merged.append(record.to_document())
        merged.sort(key=lambda doc: doc.get("launchYear") or 0, reverse=True)

        path = self.output_path(record.category)
        payload = json.dumps(merged, indent=2, ensure_ascii=False) + "\n"
        try:
            atomic_write_text(path, payload)
        except OSError as exc:
            raise SinkError(
                message=f"Could not write {path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        self._documents[record.category] = merged
        self._logger.debug("item_written", path=str(path), item_id=record.id, total=len(merged))

    def _documents_for(self, category: str) -> list[dict[str, Any]]:
        """Return the cached array for *category*, reading it on first use.

        A missing file is an empty category.  An existing file that is not
        a JSON array raises :class:`SinkError` so it is never overwritten.
        """
        if category in self._documents:
            return self._documents[category]

        path = self.output_path(category)
        documents: list[dict[str, Any]] = []
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise SinkError(
                    message=f"Existing output {path} is unreadable: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
            if not isinstance(raw, list):
                raise SinkError(
                    message=f"Existing output {path} is not a JSON array",
                    provider_name=self.get_provider_name(),
                )
            documents = [doc for doc in raw if isinstance(doc, dict)]

        self._documents[category] = documents
        return documents
