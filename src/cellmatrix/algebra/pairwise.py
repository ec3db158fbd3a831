"""
Pairwise operators and the comparers that choose which pairs they see.

``Matrix.pairwise`` groups cells by ``slc.selected`` and, inside each group,
pairs cells by their remainder. A Comparer decides which ordered pairs
``(left, right)`` qualify, based on how ``left``'s remainder compares with
``right``'s:

    ALL             every ordered pair, including a cell with itself
    UPPER           left < right
    LOWER           left > right
    UPPER_DIAGONAL  left <= right
    LOWER_DIAGONAL  left >= right
    DIAGONAL        left == right

So a group of n cells yields n*n pairs under ALL and n*(n-1)/2 under UPPER
or LOWER. Each qualifying pair is handed to ``Operator.compute`` exactly once.

Library operators combine numeric contents and place the result at
``selected.append(pattern.format(left_remainder, right_remainder))``.
"""

from __future__ import annotations

from abc import abstractmethod
from enum import Enum
from typing import Any

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, ContinuousSchema, NominalSchema
from cellmatrix.core.encoding import DoubleValue, StringValue
from cellmatrix.core.position import Position
from cellmatrix.core.slice import Slice
from cellmatrix.core.transform import Operation

__all__ = [
    'Comparer',
    'Operator',
    'Plus',
    'Minus',
    'Times',
    'Divide',
    'Concatenate',
]


class Comparer(Enum):
    ALL = "all"
    UPPER = "upper"
    LOWER = "lower"
    UPPER_DIAGONAL = "upper-diagonal"
    LOWER_DIAGONAL = "lower-diagonal"
    DIAGONAL = "diagonal"

    def keep(self, left: Position, right: Position) -> bool:
        """Whether the pair with these remainders qualifies."""
        if self is Comparer.ALL:
            return True
        c = left.compare(right)
        if self is Comparer.UPPER:
            return c < 0
        if self is Comparer.LOWER:
            return c > 0
        if self is Comparer.UPPER_DIAGONAL:
            return c <= 0
        if self is Comparer.LOWER_DIAGONAL:
            return c >= 0
        return c == 0


class Operator(Operation):
    """Base class for pairwise operators."""

    @abstractmethod
    def compute(self, left: Cell, right: Cell, ext: Any = None) -> list[Cell]:
        ...


class _ArithmeticOperator(Operator):
    """
    Numeric binary operator.

    Args:
        slc: Slice used by the pairwise call; derives the output position
        pattern: Format for the new coordinate, given the left and right
            remainders as short strings
        inverse: Swap the operands
    """

    symbol = "?"

    def __init__(self, slc: Slice, pattern: str | None = None, inverse: bool = False) -> None:
        pattern = pattern or "({0}" + self.symbol + "{1})"
        super().__init__(name=type(self).__name__, params={"slc": slc, "pattern": pattern, "inverse": inverse})
        self.slc = slc
        self.pattern = pattern
        self.inverse = inverse

    def locate(self, left: Cell, right: Cell) -> Position:
        coordinate = self.pattern.format(
            self.slc.remainder(left.position).to_short_string("|"),
            self.slc.remainder(right.position).to_short_string("|"),
        )
        return self.slc.selected(left.position).append(coordinate)

    @abstractmethod
    def _apply(self, x: float, y: float) -> float | None:
        ...

    def compute(self, left: Cell, right: Cell, ext: Any = None) -> list[Cell]:
        x, y = left.content.value.as_double(), right.content.value.as_double()
        if x is None or y is None:
            return []
        result = self._apply(y, x) if self.inverse else self._apply(x, y)
        if result is None:
            return []
        return [Cell(self.locate(left, right), Content(ContinuousSchema(), DoubleValue(result)))]


class Plus(_ArithmeticOperator):
    symbol = "+"

    def _apply(self, x: float, y: float) -> float:
        return x + y


class Minus(_ArithmeticOperator):
    symbol = "-"

    def _apply(self, x: float, y: float) -> float:
        return x - y


class Times(_ArithmeticOperator):
    symbol = "*"

    def _apply(self, x: float, y: float) -> float:
        return x * y


class Divide(_ArithmeticOperator):
    """``left / right``; a zero divisor yields no cell."""

    symbol = "/"

    def _apply(self, x: float, y: float) -> float | None:
        return None if y == 0 else x / y


class Concatenate(Operator):
    """Join both contents' strings with ``value_separator`` into a nominal cell."""

    def __init__(self, slc: Slice, pattern: str = "{0}|{1}", value_separator: str = ",") -> None:
        super().__init__(name="Concatenate", params={"slc": slc, "pattern": pattern})
        self.slc = slc
        self.pattern = pattern
        self.value_separator = value_separator

    def compute(self, left: Cell, right: Cell, ext: Any = None) -> list[Cell]:
        coordinate = self.pattern.format(
            self.slc.remainder(left.position).to_short_string("|"),
            self.slc.remainder(right.position).to_short_string("|"),
        )
        value = left.content.value.to_short_string() + self.value_separator + right.content.value.to_short_string()
        position = self.slc.selected(left.position).append(coordinate)
        return [Cell(position, Content(NominalSchema(), StringValue(value)))]
