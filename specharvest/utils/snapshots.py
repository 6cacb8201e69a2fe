"""HTML snapshot writer for selector debugging.

Bodies are saved as ``snapshot-<epoch-ms>-<item id|listing>.html``.  The
governed fetch path calls :meth:`HtmlSnapshotWriter.save` only for bodies
that passed block detection and returned an ok status.
"""

from __future__ import annotations

import re
import time
from pathlib import Path

import structlog

from specharvest.utils.logging import get_logger

_ITEM_ID_RE = re.compile(r"-(\d+)\.php$")


class HtmlSnapshotWriter:
    """Writes fetched HTML bodies into *directory*, created on first use."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, url: str, body: str) -> Path | None:
        """Write *body* and return its path, or ``None`` if the write failed.

        A failed write is logged and never interrupts the harvest.
        """
        match = _ITEM_ID_RE.search(url)
        label = match.group(1) if match else "listing"
        path = self._directory / f"snapshot-{int(time.time() * 1000)}-{label}.html"
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        except OSError as exc:
            self._logger.warning("snapshot_write_failed", path=str(path), error=str(exc))
            return None
        self._logger.debug("snapshot_saved", path=str(path))
        return path
