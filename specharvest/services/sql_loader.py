"""Bulk import of the per-category JSON output into the SQLite item table.

Each output file is loaded in one transaction through
:meth:`SQLiteItemSink.append_many`.  Documents that do not validate as
an :class:`ItemRecord` are counted as failed; the rest of the file still
loads.  A file whose transaction fails counts every document as failed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import ValidationError

from specharvest.models.catalog import ItemRecord, normalize_output_document
from specharvest.providers.sink.sqlite_sink import SQLiteItemSink
from specharvest.utils.errors import SinkError

logger = structlog.get_logger(logger_name=__name__)


@dataclass(frozen=True)
class FileLoadResult:
    file_name: str
    loaded: int
    failed: int
    error: str | None = None


async def load_output_dir(output_dir: str | Path, sink: SQLiteItemSink) -> list[FileLoadResult]:
    """Load every ``*.json`` file of *output_dir* into *sink*.

    Returns
    -------
    list[FileLoadResult]
        One result per file, in file-name order.
    """
    directory = Path(output_dir)
    await sink.initialize()
    results: list[FileLoadResult] = []

    for path in sorted(directory.glob("*.json")):
        result = await _load_file(path, sink)
        results.append(result)
        logger.info(
            "sql_file_loaded",
            file=result.file_name,
            loaded=result.loaded,
            failed=result.failed,
            error=result.error,
        )

    return results


async def _load_file(path: Path, sink: SQLiteItemSink) -> FileLoadResult:
    try:
        documents = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        return FileLoadResult(file_name=path.name, loaded=0, failed=0, error=str(exc))
    if not isinstance(documents, list):
        return FileLoadResult(file_name=path.name, loaded=0, failed=0, error="not a JSON array")

    records: list[ItemRecord] = []
    failed = 0
    for doc in documents:
        if not isinstance(doc, dict) or not doc.get("id"):
            failed += 1
            continue
        try:
            records.append(
                ItemRecord.model_validate(
                    {**normalize_output_document(doc, path.stem), "id": str(doc["id"])}
                )
            )
        except ValidationError:
            failed += 1

    try:
        loaded = await sink.append_many(records)
    except SinkError as exc:
        return FileLoadResult(
            file_name=path.name, loaded=0, failed=failed + len(records), error=exc.message
        )
    return FileLoadResult(file_name=path.name, loaded=loaded, failed=failed)
