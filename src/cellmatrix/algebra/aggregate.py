"""
Aggregators: associative reductions over the cells of a slice group.

``Matrix.summarise`` groups cells by ``slc.selected(position)`` and drives
each aggregator through three steps:

    prepare(cell, ext=None) -> T | None
        Lift one cell into the intermediate state. None means the cell does
        not contribute (for example non-numeric content for ``Mean``).

    reduce(T, T) -> T
        Combine two intermediate states. Must be associative and commutative
        so the runtime may reduce in any order and grouping.

    present(selected, T, ext=None) -> list[Cell]
        Turn the final state into output cells. The output position is the
        selected position, with ``coordinate`` appended when the aggregator
        was given one (``Mean(coordinate="mean")``).

Moments are merged with the pairwise update formulas for central moments, so
mean, standard deviation, skewness and kurtosis are exact under any reduction
order (up to floating point rounding).

Examples:
    >>> from cellmatrix.algebra.aggregate import Count, Mean, Moments
    >>> from cellmatrix.core.slice import over
    >>> stats = matrix.summarise(over(2), [Count("count"), Mean("mean")])
    >>> moments = matrix.summarise(over(2), Moments(mean="mean", sd="sd"))
"""

from __future__ import annotations

import math
from abc import abstractmethod
from typing import Any

from scipy import stats as sp_stats

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, ContinuousSchema, DiscreteSchema
from cellmatrix.core.encoding import DoubleValue, LongValue
from cellmatrix.core.position import Position
from cellmatrix.core.transform import Operation

__all__ = [
    'Aggregator',
    'Count',
    'Sum',
    'Mean',
    'Min',
    'Max',
    'MaxAbs',
    'Moments',
    'Entropy',
    'Histogram',
]


def _numeric(cell: Cell) -> float | None:
    x = cell.content.value.as_double()
    if x is None or math.isnan(x):
        return None
    return x


def _double(position: Position, x: float) -> Cell:
    return Cell(position, Content(ContinuousSchema(), DoubleValue(x)))


class Aggregator(Operation):
    """
    Base class for aggregators.

    Args:
        name: Operation name for logging
        params: Operation parameters for logging
        coordinate: Optional coordinate appended to the output position
    """

    def __init__(self, name: str, params: dict[str, Any], coordinate: str | None = None) -> None:
        super().__init__(name=name, params=params)
        self.coordinate = coordinate

    def locate(self, selected: Position) -> Position:
        return selected if self.coordinate is None else selected.append(self.coordinate)

    @abstractmethod
    def prepare(self, cell: Cell, ext: Any = None) -> Any | None:
        ...

    @abstractmethod
    def reduce(self, left: Any, right: Any) -> Any:
        ...

    @abstractmethod
    def present(self, selected: Position, t: Any, ext: Any = None) -> list[Cell]:
        ...


class Count(Aggregator):
    """Number of cells in the group."""

    def __init__(self, coordinate: str | None = None) -> None:
        super().__init__("Count", {}, coordinate)

    def prepare(self, cell: Cell, ext: Any = None) -> int:
        return 1

    def reduce(self, left: int, right: int) -> int:
        return left + right

    def present(self, selected: Position, t: int, ext: Any = None) -> list[Cell]:
        return [Cell(self.locate(selected), Content(DiscreteSchema(), LongValue(t)))]


class _NumericAggregator(Aggregator):
    def prepare(self, cell: Cell, ext: Any = None) -> float | None:
        return _numeric(cell)

    def present(self, selected: Position, t: float, ext: Any = None) -> list[Cell]:
        return [_double(self.locate(selected), t)]


class Sum(_NumericAggregator):
    """Sum of numeric contents."""

    def __init__(self, coordinate: str | None = None) -> None:
        super().__init__("Sum", {}, coordinate)

    def reduce(self, left: float, right: float) -> float:
        return left + right


class Min(_NumericAggregator):
    def __init__(self, coordinate: str | None = None) -> None:
        super().__init__("Min", {}, coordinate)

    def reduce(self, left: float, right: float) -> float:
        return min(left, right)


class Max(_NumericAggregator):
    def __init__(self, coordinate: str | None = None) -> None:
        super().__init__("Max", {}, coordinate)

    def reduce(self, left: float, right: float) -> float:
        return max(left, right)


class MaxAbs(_NumericAggregator):
    """Largest absolute value."""

    def __init__(self, coordinate: str | None = None) -> None:
        super().__init__("MaxAbs", {}, coordinate)

    def prepare(self, cell: Cell, ext: Any = None) -> float | None:
        x = _numeric(cell)
        return None if x is None else abs(x)

    def reduce(self, left: float, right: float) -> float:
        return max(left, right)


class Mean(Aggregator):
    """Arithmetic mean of numeric contents."""

    def __init__(self, coordinate: str | None = None) -> None:
        super().__init__("Mean", {}, coordinate)

    def prepare(self, cell: Cell, ext: Any = None) -> tuple[int, float] | None:
        x = _numeric(cell)
        return None if x is None else (1, x)

    def reduce(self, left: tuple[int, float], right: tuple[int, float]) -> tuple[int, float]:
        return left[0] + right[0], left[1] + right[1]

    def present(self, selected: Position, t: tuple[int, float], ext: Any = None) -> list[Cell]:
        n, total = t
        return [_double(self.locate(selected), total / n)]


class Moments(Aggregator):
    """
    Mean, standard deviation, skewness and (excess) kurtosis.

    Each statistic is emitted only when a coordinate is given for it, at
    ``selected.append(<coordinate>)``. Skewness and kurtosis are the biased
    sample estimators (as ``scipy.stats.skew``/``kurtosis`` with defaults);
    ``ddof`` controls the standard deviation denominator.

    Args:
        mean: Coordinate for the mean
        sd: Coordinate for the standard deviation
        skewness: Coordinate for the skewness
        kurtosis: Coordinate for the excess kurtosis
        ddof: Delta degrees of freedom for the standard deviation

    Raises:
        ValueError: If no statistic is requested
    """

    def __init__(
        self,
        mean: str | None = None,
        sd: str | None = None,
        skewness: str | None = None,
        kurtosis: str | None = None,
        ddof: int = 0,
    ) -> None:
        if mean is None and sd is None and skewness is None and kurtosis is None:
            raise ValueError("Moments requires at least one statistic coordinate")
        super().__init__(
            "Moments",
            {"mean": mean, "sd": sd, "skewness": skewness, "kurtosis": kurtosis, "ddof": ddof},
        )
        self.names = {"mean": mean, "sd": sd, "skewness": skewness, "kurtosis": kurtosis}
        self.ddof = ddof

    def prepare(self, cell: Cell, ext: Any = None) -> tuple | None:
        x = _numeric(cell)
        return None if x is None else (1, x, 0.0, 0.0, 0.0)

    def reduce(self, left: tuple, right: tuple) -> tuple:
        na, ma, m2a, m3a, m4a = left
        nb, mb, m2b, m3b, m4b = right
        n = na + nb
        delta = mb - ma
        d2 = delta * delta
        mean = ma + delta * nb / n
        m2 = m2a + m2b + d2 * na * nb / n
        m3 = (
            m3a + m3b
            + d2 * delta * na * nb * (na - nb) / (n * n)
            + 3.0 * delta * (na * m2b - nb * m2a) / n
        )
        m4 = (
            m4a + m4b
            + d2 * d2 * na * nb * (na * na - na * nb + nb * nb) / (n ** 3)
            + 6.0 * d2 * (na * na * m2b + nb * nb * m2a) / (n * n)
            + 4.0 * delta * (na * m3b - nb * m3a) / n
        )
        return n, mean, m2, m3, m4

    def present(self, selected: Position, t: tuple, ext: Any = None) -> list[Cell]:
        n, mean, m2, m3, m4 = t
        values = {
            "mean": mean,
            "sd": math.sqrt(m2 / (n - self.ddof)) if n > self.ddof else math.nan,
            "skewness": math.sqrt(n) * m3 / m2 ** 1.5 if m2 > 0 else math.nan,
            "kurtosis": n * m4 / (m2 * m2) - 3.0 if m2 > 0 else math.nan,
        }
        return [
            _double(selected.append(coordinate), values[stat])
            for stat, coordinate in self.names.items()
            if coordinate is not None
        ]


class _FrequencyAggregator(Aggregator):
    def prepare(self, cell: Cell, ext: Any = None) -> dict[str, int]:
        return {cell.content.value.to_short_string(): 1}

    def reduce(self, left: dict[str, int], right: dict[str, int]) -> dict[str, int]:
        merged = dict(left)
        for key, count in right.items():
            merged[key] = merged.get(key, 0) + count
        return merged


class Entropy(_FrequencyAggregator):
    """
    Shannon entropy of the distribution of content values in the group.

    Args:
        coordinate: Optional coordinate appended to the output position
        base: Logarithm base (2 gives bits)
    """

    def __init__(self, coordinate: str | None = None, base: float = 2.0) -> None:
        super().__init__("Entropy", {"base": base}, coordinate)
        self.base = base

    def present(self, selected: Position, t: dict[str, int], ext: Any = None) -> list[Cell]:
        h = float(sp_stats.entropy(list(t.values()), base=self.base))
        return [_double(self.locate(selected), h)]


class Histogram(_FrequencyAggregator):
    """
    Frequency of every distinct content value.

    Emits one discrete count per value at
    ``selected.append(pattern.format(value))``.
    """

    def __init__(self, pattern: str = "{}") -> None:
        super().__init__("Histogram", {"pattern": pattern})
        self.pattern = pattern

    def present(self, selected: Position, t: dict[str, int], ext: Any = None) -> list[Cell]:
        return [
            Cell(selected.append(self.pattern.format(key)), Content(DiscreteSchema(), LongValue(count)))
            for key, count in sorted(t.items())
        ]
