"""
Squashers: collapse one dimension by reducing the cells that share every
other coordinate.

``Matrix.squash(dim, squasher)`` keys each cell by ``position.remove(dim)``
and folds the cells of each key with ``reduce(dim, left, right)``; the
winner's content is kept at the reduced position. ``reduce`` must be
associative and commutative. ``prepare`` may drop cells beforehand.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from cellmatrix.core.cell import Cell
from cellmatrix.core.encoding import to_value
from cellmatrix.core.transform import Operation

__all__ = ['Squasher', 'PreservingMaxPosition', 'PreservingMinPosition', 'KeepSlice']


class Squasher(Operation):
    """Base class for squashers."""

    def prepare(self, dim: int, cell: Cell, ext: Any = None) -> Cell | None:
        return cell

    @abstractmethod
    def reduce(self, dim: int, left: Cell, right: Cell) -> Cell:
        ...


class PreservingMaxPosition(Squasher):
    """Keep the cell with the largest coordinate at the squashed dimension."""

    def __init__(self) -> None:
        super().__init__(name="PreservingMaxPosition", params={})

    def reduce(self, dim: int, left: Cell, right: Cell) -> Cell:
        if left.position.coordinate(dim).compare(right.position.coordinate(dim)) >= 0:
            return left
        return right


class PreservingMinPosition(Squasher):
    """Keep the cell with the smallest coordinate at the squashed dimension."""

    def __init__(self) -> None:
        super().__init__(name="PreservingMinPosition", params={})

    def reduce(self, dim: int, left: Cell, right: Cell) -> Cell:
        if left.position.coordinate(dim).compare(right.position.coordinate(dim)) <= 0:
            return left
        return right


class KeepSlice(Squasher):
    """Keep only the cells whose coordinate at the squashed dimension equals ``coordinate``."""

    def __init__(self, coordinate: Any) -> None:
        super().__init__(name="KeepSlice", params={"coordinate": coordinate})
        self.coordinate = to_value(coordinate)

    def prepare(self, dim: int, cell: Cell, ext: Any = None) -> Cell | None:
        return cell if cell.position.coordinate(dim) == self.coordinate else None

    def reduce(self, dim: int, left: Cell, right: Cell) -> Cell:
        return left
