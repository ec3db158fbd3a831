"""
Writers for matrices.

Cells can be written in the line form read back by ``load_text``, as a
dense delimited table for downstream tools, or handed to pandas directly.

Engineering Design:
    - Writers are plain ``Cell -> str`` callables so they plug into
      ``Matrix.to_text`` and ``save_as_text`` alike
    - Text output is atomic (temp file + rename)
    - Dense tables go through a pandas pivot; absent cells stay empty

Examples:
    >>> from pathlib import Path
    >>> from cellmatrix.io.writers import save_as_text, save_as_csv
    >>> save_as_text(matrix, Path("out/cells.txt"))
    Wrote 3 cells to out/cells.txt
    >>> save_as_csv(matrix, over(1), Path("out/table.csv"))
    Wrote 2 x 2 table to out/table.csv
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pandas as pd

from cellmatrix.core.cell import Cell
from cellmatrix.core.slice import Slice
from cellmatrix.matrix import Matrix
from cellmatrix.utils.fileio import atomic_write_lines

logger = logging.getLogger(__name__)

__all__ = [
    'cell_to_string',
    'position_to_string',
    'cell_to_key_value',
    'save_as_text',
    'save_as_csv',
    'to_dataframe',
]


def cell_to_string(descriptive: bool = False, separator: str = "|") -> Callable[[Cell], str]:
    """Writer for whole cells (short form, or ``repr`` form when descriptive)."""
    return lambda cell: cell.to_short_string(separator, descriptive)


def position_to_string(descriptive: bool = False, separator: str = "|") -> Callable[[Cell], str]:
    """Writer for the position of a cell only."""
    if descriptive:
        return lambda cell: repr(cell.position)
    return lambda cell: cell.position.to_short_string(separator)


def cell_to_key_value(separator: str = "|") -> Callable[[Cell], tuple[str, str]]:
    """Writer for ``Matrix.to_sequence``: position as key, content as value."""
    return lambda cell: (
        cell.position.to_short_string(separator),
        cell.content.to_short_string(separator),
    )


def _prepare_path(path: Path) -> Path:
    if not isinstance(path, Path):
        path = Path(path)
    if path.parent != Path('.') and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return path


def save_as_text(
    matrix: Matrix,
    path: Path,
    writer: Callable[[Cell], str] | None = None,
) -> Path:
    """
    Write one line per cell.

    Args:
        matrix: Matrix to write
        path: Output file; parent directories are created
        writer: Cell renderer (default ``cell_to_string()``)

    Returns:
        The path written

    Raises:
        TypeError: If matrix is not a Matrix
        OSError: If the file cannot be written
    """
    if not isinstance(matrix, Matrix):
        raise TypeError(f"matrix must be Matrix, got {type(matrix)}")
    path = _prepare_path(path)
    lines = matrix.to_text(writer or cell_to_string()).materialise()

    try:
        n = atomic_write_lines(path, lines)
        print(f"Wrote {n} cells to {path}")
    except Exception as e:
        raise OSError(f"Failed to write cell file {path}: {e}") from e
    return path


def to_dataframe(matrix: Matrix) -> pd.DataFrame:
    """
    Long-format DataFrame: one column per dimension plus type, codec and value.

    Coordinates and values keep their Python scalar form; dates stay
    datetimes.

    Raises:
        ArityError: If the cells have mixed arities
    """
    cells = matrix.materialise()
    if not cells:
        return pd.DataFrame(columns=["type", "codec", "value"])
    arity = matrix.arity()
    records = []
    for cell in cells:
        record = {
            f"dim_{i + 1}": coordinate.value
            for i, coordinate in enumerate(cell.position.coordinates)
        }
        record["type"] = cell.content.type.value
        record["codec"] = cell.content.value.codec.to_short_string()
        record["value"] = cell.content.value.value
        records.append(record)
    columns = [f"dim_{i + 1}" for i in range(arity)] + ["type", "codec", "value"]
    return pd.DataFrame.from_records(records, columns=columns)


def save_as_csv(
    matrix: Matrix,
    slc: Slice,
    path: Path,
    separator: str = ",",
) -> Path:
    """
    Write a 2-D matrix as a dense table.

    Rows are the selected coordinates of ``slc``, columns the remainder
    coordinates. Cells are written with their short value form.

    Args:
        matrix: 2-D matrix
        slc: Slice whose selected dimension becomes the rows
        path: Output file
        separator: Field delimiter

    Raises:
        TypeError: If matrix is not a Matrix
        ValueError: If matrix is empty or not 2-D
        OSError: If the file cannot be written
    """
    if not isinstance(matrix, Matrix):
        raise TypeError(f"matrix must be Matrix, got {type(matrix)}")
    cells = matrix.materialise()
    if not cells:
        raise ValueError("Cannot write empty matrix")
    if matrix.arity() != 2:
        raise ValueError(f"save_as_csv requires a 2-D matrix, got {matrix.arity()}-D")
    path = _prepare_path(path)
    logger.debug(f"Pivoting {len(cells)} cells by {slc!r}")

    long = pd.DataFrame.from_records(
        [
            (
                slc.selected(c.position).to_short_string("|"),
                slc.remainder(c.position).to_short_string("|"),
                c.content.value.to_short_string(),
            )
            for c in cells
        ],
        columns=["row", "column", "value"],
    )
    rows = [p.to_short_string("|") for p in matrix.names(slc)]
    wide = long.pivot(index="row", columns="column", values="value").reindex(rows)
    wide.index.name = None
    wide.columns.name = None

    try:
        wide.to_csv(path, sep=separator)
        print(f"Wrote {wide.shape[0]} x {wide.shape[1]} table to {path}")
    except Exception as e:
        raise OSError(f"Failed to write table file {path}: {e}") from e
    return path
