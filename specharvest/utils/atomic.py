"""Crash-safe whole-file replacement."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write_text(path: Path, payload: str) -> None:
    """Replace *path* with *payload* without ever exposing a partial file.

    The payload goes to a temporary file in the same directory, is
    fsynced, then moved into place with ``os.replace``.  On failure the
    temporary file is removed and the original ``OSError`` propagates;
    the previous contents of *path* are untouched.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except OSError:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
