"""
Atomic file-write utilities.

Output is written to a temporary file in the same directory and then moved
into place with ``os.replace()``, so an interrupted write never leaves a
partially written matrix behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Iterable


def _atomic_write(path: str | os.PathLike, write) -> None:
    path = str(path)
    dir_path = os.path.dirname(path) or "."
    tmp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", dir=dir_path, suffix=".tmp", delete=False, encoding="utf-8"
        ) as tmp:
            tmp_path = tmp.name
            write(tmp)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def atomic_write_lines(path: str | os.PathLike, lines: Iterable[str]) -> int:
    """Write one line per item atomically; returns the number of lines.

    Parameters
    ----------
    path:
        Destination file path.
    lines:
        Lines without trailing newlines.
    """
    written = 0

    def write(f) -> None:
        nonlocal written
        for line in lines:
            f.write(line)
            f.write("\n")
            written += 1

    _atomic_write(path, write)
    return written


def atomic_write_json(path: str | os.PathLike, data: Any, *, indent: int = 2) -> None:
    """Write *data* as JSON atomically via temp-file + rename."""
    _atomic_write(path, lambda f: json.dump(data, f, indent=indent))
