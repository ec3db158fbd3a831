"""
Slices: splitting a position into a group key and an intra-group key.

Every grouped matrix operation (summarise, slide, pairwise, names, ...) is
parameterised by a Slice. A slice is a stateless strategy with two policies:

    over(dim):
        selected = the 1-D position holding coordinate ``dim``
        remainder = the position with ``dim`` removed

    along(dim):
        selected = the position with ``dim`` removed
        remainder = the 1-D position holding coordinate ``dim``

``reassemble`` puts the two halves back together, so for every position
``p`` and slice ``s``: ``s.reassemble(s.selected(p), s.remainder(p)) == p``.

Examples:
    >>> from cellmatrix.core.position import Position
    >>> from cellmatrix.core.slice import over, along
    >>> p = Position("a", "b", 3)
    >>> over(2).selected(p), over(2).remainder(p)
    (Position1D('b'), Position2D('a', 3))
    >>> along(2).selected(p), along(2).remainder(p)
    (Position2D('a', 3), Position1D('b'))
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cellmatrix.core.position import Dimension, Position

__all__ = ['SliceMode', 'Slice', 'over', 'along']


class SliceMode(Enum):
    OVER = "over"
    ALONG = "along"


@dataclass(frozen=True)
class Slice:
    """
    Slice policy over one dimension.

    Attributes:
        mode: OVER selects the dimension, ALONG selects everything else
        dimension: 1-based dimension or ``Dimension.LAST``
    """

    mode: SliceMode
    dimension: int

    def __post_init__(self) -> None:
        d = int(self.dimension)
        if d != Dimension.LAST and not 1 <= d <= 9:
            raise ValueError(f"Slice dimension must be 1..9 or LAST, got {self.dimension}")

    def _split(self, position: Position) -> tuple[Position, Position]:
        single = Position(position.coordinate(self.dimension))
        rest = position.remove(self.dimension)
        return single, rest

    def selected(self, position: Position) -> Position:
        single, rest = self._split(position)
        return single if self.mode is SliceMode.OVER else rest

    def remainder(self, position: Position) -> Position:
        single, rest = self._split(position)
        return rest if self.mode is SliceMode.OVER else single

    def split(self, position: Position) -> tuple[Position, Position]:
        """(selected, remainder) in one pass."""
        single, rest = self._split(position)
        if self.mode is SliceMode.OVER:
            return single, rest
        return rest, single

    def reassemble(self, selected: Position, remainder: Position) -> Position:
        """Inverse of ``split``."""
        if self.mode is SliceMode.OVER:
            single, rest = selected, remainder
        else:
            single, rest = remainder, selected
        dim = self.dimension
        if int(dim) == Dimension.LAST:
            return rest.append(single.coordinate(1))
        return rest.insert(dim, single.coordinate(1))

    def __repr__(self) -> str:
        return f"{self.mode.name.title()}({Dimension(int(self.dimension)).label})"


def over(dim: int) -> Slice:
    """Group by dimension ``dim``."""
    return Slice(SliceMode.OVER, dim)


def along(dim: int) -> Slice:
    """Group by every dimension except ``dim``."""
    return Slice(SliceMode.ALONG, dim)
