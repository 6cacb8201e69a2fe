"""Reconstructs the dedup ledger from the per-category JSON output.

Used when the ledger file is lost or was produced by an older version
that stored fewer fields.  Every document with an ``id`` in every
``*.json`` file of the output directory becomes a ledger entry; documents
without an id and files that are not JSON arrays are counted and skipped.
Documents in the earlier scraper's layout (``brand`` plus a device-kind
``category``) are mapped onto the current one first.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from specharvest.interfaces.ledger_store import ILedgerStore
from specharvest.models.catalog import LedgerEntry, normalize_output_document

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class LedgerRebuildReport:
    """Counts gathered while rebuilding a ledger."""

    files_read: int = 0
    entries: int = 0
    skipped_documents: int = 0
    unreadable_files: list[str] = field(default_factory=list)


def rebuild_ledger(output_dir: str | Path, store: ILedgerStore) -> LedgerRebuildReport:
    """Scan *output_dir* and replace the ledger in *store* with what it finds.

    Files are read in name order; when two files carry the same id the
    later one wins.

    Raises
    ------
    specharvest.utils.errors.LedgerError
        If the rebuilt ledger could not be written.
    """
    directory = Path(output_dir)
    report = LedgerRebuildReport()
    entries: dict[str, LedgerEntry] = {}

    for path in sorted(directory.glob("*.json")):
        try:
            documents = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("rebuild_file_unreadable", path=str(path), error=str(exc))
            report.unreadable_files.append(path.name)
            continue
        if not isinstance(documents, list):
            logger.warning("rebuild_file_unreadable", path=str(path), error="not a JSON array")
            report.unreadable_files.append(path.name)
            continue

        report.files_read += 1
        for doc in documents:
            if not isinstance(doc, dict) or not doc.get("id"):
                report.skipped_documents += 1
                continue
            item_id = str(doc["id"])
            doc = normalize_output_document(doc, path.stem)
            year = doc.get("launchYear")
            entries[item_id] = LedgerEntry(
                id=item_id,
                name=doc.get("name"),
                category=doc["category"],
                launch_year=year if isinstance(year, int) else None,
                scraped_at=doc.get("scrapedAt"),
            )

    store.write_all(entries)
    report.entries = len(entries)
    logger.info(
        "ledger_rebuilt",
        output_dir=str(directory),
        files=report.files_read,
        entries=report.entries,
        skipped=report.skipped_documents,
    )
    return report
