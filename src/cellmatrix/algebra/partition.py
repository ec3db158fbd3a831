"""
Partitioners: assign zero or more labels to each cell.

``Matrix.split`` turns a matrix into ``(label, cell)`` pairs wrapped in
``Partitions``. A cell may receive several labels or none.

Hash partitioners hash the short string of one coordinate with CRC32, so the
assignment is reproducible across processes and runs (Python's built-in
``hash`` of strings is salted per process). Thresholds are compared against
``crc32 % base``:

    BinaryHashSplit   h <= ratio -> left, otherwise right
    TernaryHashSplit  h <= lower -> left, h <= upper -> middle, otherwise right
    HashSplit         every label whose range (lower, upper] contains h

Date partitioners read a date coordinate (DateValue, or a string decoded with
``codec``) and use the same inclusive-upper convention.
"""

from __future__ import annotations

import zlib
from abc import abstractmethod
from datetime import date, datetime
from typing import Any, Hashable, Mapping

from cellmatrix.core.cell import Cell
from cellmatrix.core.encoding import DateCodec
from cellmatrix.core.transform import Operation

__all__ = [
    'Partitioner',
    'stable_hash',
    'BinaryHashSplit',
    'TernaryHashSplit',
    'HashSplit',
    'BinaryDateSplit',
    'TernaryDateSplit',
    'DateSplit',
]


def stable_hash(text: str) -> int:
    """Process-independent non-negative hash of ``text``."""
    return zlib.crc32(text.encode("utf-8"))


class Partitioner(Operation):
    """Base class for partitioners."""

    @abstractmethod
    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        ...


class _HashPartitioner(Partitioner):
    def __init__(self, name: str, params: dict[str, Any], dim: int, base: int) -> None:
        if base <= 0:
            raise ValueError(f"base must be positive, got {base}")
        super().__init__(name=name, params={"dim": dim, **params, "base": base})
        self.dim = dim
        self.base = base

    def bucket(self, cell: Cell) -> int:
        return stable_hash(cell.position.coordinate(self.dim).to_short_string()) % self.base


class BinaryHashSplit(_HashPartitioner):
    def __init__(self, dim: int, ratio: int, left: Hashable, right: Hashable, base: int = 100) -> None:
        super().__init__("BinaryHashSplit", {"ratio": ratio, "left": left, "right": right}, dim, base)
        self.ratio = ratio
        self.left = left
        self.right = right

    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        return [self.left if self.bucket(cell) <= self.ratio else self.right]


class TernaryHashSplit(_HashPartitioner):
    def __init__(
        self,
        dim: int,
        lower: int,
        upper: int,
        left: Hashable,
        middle: Hashable,
        right: Hashable,
        base: int = 100,
    ) -> None:
        if lower > upper:
            raise ValueError(f"lower ({lower}) must not exceed upper ({upper})")
        super().__init__(
            "TernaryHashSplit",
            {"lower": lower, "upper": upper, "left": left, "middle": middle, "right": right},
            dim,
            base,
        )
        self.lower = lower
        self.upper = upper
        self.left = left
        self.middle = middle
        self.right = right

    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        h = self.bucket(cell)
        if h <= self.lower:
            return [self.left]
        if h <= self.upper:
            return [self.middle]
        return [self.right]


class HashSplit(_HashPartitioner):
    """
    Labels from a range table.

    Args:
        dim: Dimension whose coordinate is hashed
        ranges: ``{label: (lower, upper)}``; ranges may overlap
        base: Modulus applied to the hash
    """

    def __init__(self, dim: int, ranges: Mapping[Hashable, tuple[int, int]], base: int = 100) -> None:
        super().__init__("HashSplit", {"ranges": dict(ranges)}, dim, base)
        self.ranges = dict(ranges)

    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        h = self.bucket(cell)
        return [label for label, (lower, upper) in self.ranges.items() if lower < h <= upper]


def _as_datetime(d: date | datetime) -> datetime:
    if isinstance(d, datetime):
        return d
    return datetime(d.year, d.month, d.day)


class _DatePartitioner(Partitioner):
    def __init__(self, name: str, params: dict[str, Any], dim: int, codec: DateCodec) -> None:
        super().__init__(name=name, params={"dim": dim, **params})
        self.dim = dim
        self.codec = codec

    def date_of(self, cell: Cell) -> datetime | None:
        value = cell.position.coordinate(self.dim)
        d = value.as_date()
        if d is None and value.as_string() is not None:
            decoded = self.codec.decode(value.as_string())
            d = None if decoded is None else decoded.as_date()
        return d


class BinaryDateSplit(_DatePartitioner):
    def __init__(
        self,
        dim: int,
        date: date | datetime,
        left: Hashable,
        right: Hashable,
        codec: DateCodec | None = None,
    ) -> None:
        super().__init__("BinaryDateSplit", {"date": date, "left": left, "right": right}, dim, codec or DateCodec())
        self.date = _as_datetime(date)
        self.left = left
        self.right = right

    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        d = self.date_of(cell)
        if d is None:
            return []
        return [self.left if d <= self.date else self.right]


class TernaryDateSplit(_DatePartitioner):
    def __init__(
        self,
        dim: int,
        lower: date | datetime,
        upper: date | datetime,
        left: Hashable,
        middle: Hashable,
        right: Hashable,
        codec: DateCodec | None = None,
    ) -> None:
        super().__init__(
            "TernaryDateSplit",
            {"lower": lower, "upper": upper, "left": left, "middle": middle, "right": right},
            dim,
            codec or DateCodec(),
        )
        self.lower = _as_datetime(lower)
        self.upper = _as_datetime(upper)
        if self.lower > self.upper:
            raise ValueError(f"lower ({lower}) must not be after upper ({upper})")
        self.left = left
        self.middle = middle
        self.right = right

    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        d = self.date_of(cell)
        if d is None:
            return []
        if d <= self.lower:
            return [self.left]
        if d <= self.upper:
            return [self.middle]
        return [self.right]


class DateSplit(_DatePartitioner):
    """Every label whose ``(lower, upper]`` date range contains the coordinate."""

    def __init__(
        self,
        dim: int,
        ranges: Mapping[Hashable, tuple[date | datetime, date | datetime]],
        codec: DateCodec | None = None,
    ) -> None:
        super().__init__("DateSplit", {"ranges": dict(ranges)}, dim, codec or DateCodec())
        self.ranges = {
            label: (_as_datetime(lower), _as_datetime(upper))
            for label, (lower, upper) in ranges.items()
        }

    def assign(self, cell: Cell, ext: Any = None) -> list[Hashable]:
        d = self.date_of(cell)
        if d is None:
            return []
        return [label for label, (lower, upper) in self.ranges.items() if lower < d <= upper]
