"""Shared utilities."""

from cellmatrix.utils.fileio import (
    atomic_write_json,
    atomic_write_lines,
)

__all__ = [
    'atomic_write_json',
    'atomic_write_lines',
]
