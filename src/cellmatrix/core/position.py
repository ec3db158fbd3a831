"""
Fixed-arity coordinate tuples that address cells.

A Position is an ordered tuple of 0 to 9 Values. Its arity is fixed when it
is built: every operation that changes the number of coordinates returns a
new Position of the adjacent arity, and nothing mutates in place.

Dimensions:
    Dimensions are 1-based (``Dimension.FIRST`` ... ``Dimension.NINTH``, or
    plain ints 1..9). ``Dimension.LAST`` always refers to the final
    coordinate of the position it is applied to.

Ordering:
    Positions of equal arity compare lexicographically using each
    coordinate's Value ordering. Positions of different arity compare by
    arity first.

Examples:
    >>> from cellmatrix.core.position import Position, Dimension
    >>> p = Position("a", 1)
    >>> p.append("x").to_short_string("|")
    'a|1|x'
    >>> p.remove(Dimension.FIRST)
    Position1D(1)
    >>> Position("a", 1) < Position("a", 2)
    True
"""

from __future__ import annotations

import functools
from enum import IntEnum
from typing import Any, Callable, Iterable, Iterator, Sequence

from cellmatrix.core.encoding import Value, to_value
from cellmatrix.core.errors import ArityError, DimensionError, InvalidPermutationError

__all__ = [
    'MAX_ARITY',
    'Dimension',
    'Position',
    'dimension_label',
    'to_position',
    'to_positions',
]

MAX_ARITY = 9


class Dimension(IntEnum):
    """1-based dimension index; LAST addresses the final coordinate."""

    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5
    SIXTH = 6
    SEVENTH = 7
    EIGHTH = 8
    NINTH = 9
    LAST = -1

    @property
    def label(self) -> str:
        return self.name.title()


def dimension_label(dim: int) -> str:
    """Human readable name of a dimension, e.g. ``"First"``."""
    try:
        return Dimension(int(dim)).label
    except ValueError:
        raise DimensionError(f"Unknown dimension: {dim}") from None


class Position:
    """
    Immutable, hashable coordinate tuple.

    Args:
        *coordinates: Values or Python scalars (converted with ``to_value``)

    Raises:
        ArityError: If more than nine coordinates are given
    """

    __slots__ = ('_coordinates',)

    def __init__(self, *coordinates: Any) -> None:
        coords = tuple(to_value(c) for c in coordinates)
        if len(coords) > MAX_ARITY:
            raise ArityError(f"Position arity {len(coords)} exceeds maximum of {MAX_ARITY}")
        self._coordinates = coords

    @classmethod
    def _from_values(cls, coordinates: Iterable[Value]) -> Position:
        return cls(*coordinates)

    @property
    def coordinates(self) -> tuple[Value, ...]:
        return self._coordinates

    @property
    def arity(self) -> int:
        return len(self._coordinates)

    def __len__(self) -> int:
        return len(self._coordinates)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._coordinates)

    def _index(self, dim: int) -> int:
        d = int(dim)
        if d == Dimension.LAST:
            if not self._coordinates:
                raise DimensionError("Dimension LAST is undefined for a 0-D position")
            return len(self._coordinates) - 1
        if not 1 <= d <= len(self._coordinates):
            raise DimensionError(f"Dimension {d} out of range for {self.arity}-D position")
        return d - 1

    # -------------------------------------------------------------------------
    # Access and update
    # -------------------------------------------------------------------------

    def coordinate(self, dim: int) -> Value:
        """Coordinate at dimension ``dim``."""
        return self._coordinates[self._index(dim)]

    def __getitem__(self, dim: int) -> Value:
        return self.coordinate(dim)

    def update(self, dim: int, value: Any) -> Position:
        """Same arity, coordinate at ``dim`` replaced."""
        idx = self._index(dim)
        coords = list(self._coordinates)
        coords[idx] = to_value(value)
        return self._from_values(coords)

    def permute(self, order: Sequence[int]) -> Position:
        """
        Reorder coordinates; new coordinate ``i`` is the old one at ``order[i]``.

        Raises:
            InvalidPermutationError: Unless ``order`` names every dimension once
        """
        indices = [self._index(d) for d in order]
        if sorted(indices) != list(range(self.arity)):
            raise InvalidPermutationError(
                f"Order {list(order)} is not a permutation of {self.arity} dimensions"
            )
        return self._from_values(self._coordinates[i] for i in indices)

    # -------------------------------------------------------------------------
    # Arity changing operations
    # -------------------------------------------------------------------------

    def prepend(self, value: Any) -> Position:
        return self._from_values((to_value(value),) + self._coordinates)

    def append(self, value: Any) -> Position:
        return self._from_values(self._coordinates + (to_value(value),))

    def insert(self, dim: int, value: Any) -> Position:
        """
        Insert ``value`` so that it ends up at dimension ``dim``.

        The inverse of ``remove``: ``p.remove(d).insert(d, p[d]) == p``.
        ``Dimension.LAST`` appends.
        """
        d = int(dim)
        if d == Dimension.LAST:
            return self.append(value)
        if not 1 <= d <= self.arity + 1:
            raise DimensionError(f"Cannot insert at dimension {d} of {self.arity}-D position")
        coords = list(self._coordinates)
        coords.insert(d - 1, to_value(value))
        return self._from_values(coords)

    def remove(self, dim: int) -> Position:
        idx = self._index(dim)
        return self._from_values(self._coordinates[:idx] + self._coordinates[idx + 1:])

    def melt(self, dim: int, into: int, merge: Callable[[Value, Value], Any]) -> Position:
        """
        Merge dimension ``dim`` into ``into`` and drop ``dim``.

        Args:
            dim: Dimension to remove
            into: Dimension that receives ``merge(into_value, dim_value)``
            merge: Combines the two coordinates

        Raises:
            InvalidPermutationError: If ``dim`` and ``into`` are the same dimension
        """
        didx = self._index(dim)
        iidx = self._index(into)
        if didx == iidx:
            raise InvalidPermutationError(f"Cannot melt dimension {dim} into itself")
        coords = list(self._coordinates)
        coords[iidx] = to_value(merge(coords[iidx], coords[didx]))
        del coords[didx]
        return self._from_values(coords)

    # -------------------------------------------------------------------------
    # Ordering and rendering
    # -------------------------------------------------------------------------

    def compare(self, other: Position) -> int:
        if self.arity != other.arity:
            return (self.arity > other.arity) - (self.arity < other.arity)
        for mine, theirs in zip(self._coordinates, other._coordinates):
            c = mine.compare(theirs)
            if c != 0:
                return c
        return 0

    @staticmethod
    def sort_key(ascending: bool = True) -> Callable[[Position], Any]:
        """Key function for ``sorted`` following the position total order."""
        sign = 1 if ascending else -1
        return functools.cmp_to_key(lambda x, y: sign * x.compare(y))

    def to_short_string(self, separator: str = "|") -> str:
        return separator.join(c.to_short_string() for c in self._coordinates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self._coordinates == other._coordinates

    def __hash__(self) -> int:
        return hash(self._coordinates)

    def __lt__(self, other: Position) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: Position) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: Position) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: Position) -> bool:
        return self.compare(other) >= 0

    def __repr__(self) -> str:
        coords = ", ".join(repr(c.value) for c in self._coordinates)
        return f"Position{self.arity}D({coords})"


def to_position(x: Any) -> Position:
    """
    Convert a scalar, tuple or Position into a Position.

    A tuple becomes a multi-dimensional position; any other scalar a 1-D one.
    """
    if isinstance(x, Position):
        return x
    if isinstance(x, tuple):
        return Position(*x)
    return Position(x)


def to_positions(xs: Iterable[Any]) -> list[Position]:
    """Convert each element with ``to_position``."""
    return [to_position(x) for x in xs]
