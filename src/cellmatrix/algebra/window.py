"""
Windows: sequential scans over the ordered cells of a slice group.

``Matrix.slide`` groups cells by ``slc.selected``, sorts each group by
``slc.remainder`` (ties broken by full position order) and feeds the cells
through a window one at a time:

    prepare(cell, ext=None) -> I | None
        Extract what the window needs from a cell. None skips the cell.

    initialise(rem, I) -> (T, [O, ...])
        Start the scan with the first cell of the group.

    update(rem, I, T) -> (T, [O, ...])
        Advance the state with the next cell.

    present(selected, O) -> [Cell, ...]
        Render each output.

States are immutable tuples, so a window object can serve many groups at
once. This is the only inherently sequential operation in the algebra; groups
are still processed independently.

Examples:
    >>> matrix.slide(over(1), Difference())          # 10, 7, 15 -> -3, 8
    >>> matrix.slide(over(1), SimpleMovingAverage(window=3))
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, ContinuousSchema
from cellmatrix.core.encoding import DoubleValue
from cellmatrix.core.position import Position
from cellmatrix.core.transform import Operation

__all__ = [
    'Window',
    'Difference',
    'CumulativeSum',
    'SimpleMovingAverage',
    'CenteredMovingAverage',
    'WeightedMovingAverage',
    'CumulativeMovingAverage',
    'ExponentialMovingAverage',
]


class Window(Operation):
    """Base class for windows."""

    @abstractmethod
    def prepare(self, cell: Cell, ext: Any = None) -> Any | None:
        ...

    @abstractmethod
    def initialise(self, rem: Position, i: Any) -> tuple[Any, list[Any]]:
        ...

    @abstractmethod
    def update(self, rem: Position, i: Any, t: Any) -> tuple[Any, list[Any]]:
        ...

    @abstractmethod
    def present(self, selected: Position, o: Any) -> list[Cell]:
        ...


class _NumericWindow(Window):
    """
    Numeric window whose outputs are ``(rem, value)`` pairs rendered at
    ``selected.append(rem)``.
    """

    def prepare(self, cell: Cell, ext: Any = None) -> float | None:
        return cell.content.value.as_double()

    def present(self, selected: Position, o: tuple[Position, float]) -> list[Cell]:
        rem, x = o
        return [Cell(selected.append(rem.to_short_string("|")), Content(ContinuousSchema(), DoubleValue(x)))]


class Difference(Window):
    """
    Difference from the previous cell.

    The first cell of a group yields nothing; every later cell yields
    ``current - previous`` at ``selected.append(pattern.format(rem, prev_rem))``.
    """

    def __init__(self, pattern: str = "{0}-{1}") -> None:
        super().__init__(name="Difference", params={"pattern": pattern})
        self.pattern = pattern

    def prepare(self, cell: Cell, ext: Any = None) -> float | None:
        return cell.content.value.as_double()

    def initialise(self, rem: Position, i: float) -> tuple[Any, list[Any]]:
        return (i, rem), []

    def update(self, rem: Position, i: float, t: tuple[float, Position]) -> tuple[Any, list[Any]]:
        last, prev_rem = t
        return (i, rem), [(i - last, rem, prev_rem)]

    def present(self, selected: Position, o: tuple[float, Position, Position]) -> list[Cell]:
        delta, rem, prev_rem = o
        coordinate = self.pattern.format(rem.to_short_string("|"), prev_rem.to_short_string("|"))
        return [Cell(selected.append(coordinate), Content(ContinuousSchema(), DoubleValue(delta)))]


class CumulativeSum(_NumericWindow):
    def __init__(self) -> None:
        super().__init__(name="CumulativeSum", params={})

    def initialise(self, rem: Position, i: float) -> tuple[Any, list[Any]]:
        return i, [(rem, i)]

    def update(self, rem: Position, i: float, t: float) -> tuple[Any, list[Any]]:
        total = t + i
        return total, [(rem, total)]


class _BoundedMovingAverage(_NumericWindow):
    """
    Moving average over the last ``window`` values.

    With ``all`` the leading cells that do not yet fill a window are
    averaged over what is available; otherwise they yield nothing.
    """

    def __init__(self, name: str, window: int, all: bool) -> None:
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        super().__init__(name=name, params={"window": window, "all": all})
        self.window = window
        self.all = all

    @abstractmethod
    def _average(self, values: tuple[float, ...]) -> float:
        ...

    def _emit(self, rem: Position, values: tuple[float, ...]) -> list[Any]:
        if len(values) == self.window or self.all:
            return [(rem, self._average(values))]
        return []

    def initialise(self, rem: Position, i: float) -> tuple[Any, list[Any]]:
        values = (i,)
        return values, self._emit(rem, values)

    def update(self, rem: Position, i: float, t: tuple[float, ...]) -> tuple[Any, list[Any]]:
        values = (t + (i,))[-self.window:]
        return values, self._emit(rem, values)


class SimpleMovingAverage(_BoundedMovingAverage):
    def __init__(self, window: int = 3, all: bool = False) -> None:
        super().__init__("SimpleMovingAverage", window, all)

    def _average(self, values: tuple[float, ...]) -> float:
        return sum(values) / len(values)


class WeightedMovingAverage(_BoundedMovingAverage):
    """Linearly weighted: the most recent value has weight ``len(values)``."""

    def __init__(self, window: int = 3, all: bool = False) -> None:
        super().__init__("WeightedMovingAverage", window, all)

    def _average(self, values: tuple[float, ...]) -> float:
        weights = range(1, len(values) + 1)
        return sum(w * x for w, x in zip(weights, values)) / sum(weights)


class CenteredMovingAverage(_NumericWindow):
    """
    Average of the ``width`` values on either side of a cell and the cell itself.

    Cells closer than ``width`` to either end of the group yield nothing.
    """

    def __init__(self, width: int = 1) -> None:
        if width <= 0:
            raise ValueError(f"width must be positive, got {width}")
        super().__init__(name="CenteredMovingAverage", params={"width": width})
        self.width = width

    def _emit(self, items: tuple[tuple[Position, float], ...]) -> list[Any]:
        if len(items) < 2 * self.width + 1:
            return []
        centre_rem = items[self.width][0]
        return [(centre_rem, sum(x for _, x in items) / len(items))]

    def initialise(self, rem: Position, i: float) -> tuple[Any, list[Any]]:
        items = ((rem, i),)
        return items, self._emit(items)

    def update(self, rem: Position, i: float, t: tuple) -> tuple[Any, list[Any]]:
        items = (t + ((rem, i),))[-(2 * self.width + 1):]
        return items, self._emit(items)


class CumulativeMovingAverage(_NumericWindow):
    """Mean of every value seen so far in the group."""

    def __init__(self) -> None:
        super().__init__(name="CumulativeMovingAverage", params={})

    def initialise(self, rem: Position, i: float) -> tuple[Any, list[Any]]:
        return (1, i), [(rem, i)]

    def update(self, rem: Position, i: float, t: tuple[int, float]) -> tuple[Any, list[Any]]:
        n, mean = t
        n += 1
        mean += (i - mean) / n
        return (n, mean), [(rem, mean)]


class ExponentialMovingAverage(_NumericWindow):
    """``ema = alpha * x + (1 - alpha) * ema``, seeded with the first value."""

    def __init__(self, alpha: float) -> None:
        if not 0 < alpha <= 1:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        super().__init__(name="ExponentialMovingAverage", params={"alpha": alpha})
        self.alpha = alpha

    def initialise(self, rem: Position, i: float) -> tuple[Any, list[Any]]:
        return i, [(rem, i)]

    def update(self, rem: Position, i: float, t: float) -> tuple[Any, list[Any]]:
        ema = self.alpha * i + (1.0 - self.alpha) * t
        return ema, [(rem, ema)]
