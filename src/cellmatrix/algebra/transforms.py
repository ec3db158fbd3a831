"""
Library transformers.

Most transformers keep the cell's position and replace its content; use
``and_then_relocate`` with a locator from ``cellmatrix.algebra.locate`` to
rename or extend the position. Non-numeric contents yield no output for the
numeric transformers.

Statistics-driven transformers (Normalise, Standardise, Fraction, Cut) read
their parameters from the broadcast ``ext`` value through an extractor. The
usual ``ext`` is the compacted result of a summarise::

    stats = matrix.summarise(over(2), [Mean("mean"), Moments(sd="sd")])
    ext = stats.compact(over(1))      # {Position1D(col): {Position1D("mean"): Content, ...}}
    z = matrix.transform(
        Standardise(extract_with_dimension_and_key(2, "mean"),
                    extract_with_dimension_and_key(2, "sd")),
        ext=ext,
    )
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable

import numpy as np

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, ContinuousSchema, DiscreteSchema, OrdinalSchema, Type
from cellmatrix.core.encoding import DoubleValue, LongValue, StringValue
from cellmatrix.core.position import Position
from cellmatrix.core.transform import Transformer

logger = logging.getLogger(__name__)

__all__ = [
    'Extractor',
    'extract_with_dimension',
    'extract_with_dimension_and_key',
    'extract_with_key',
    'Indicator',
    'Binarise',
    'Normalise',
    'Standardise',
    'Clamp',
    'Fraction',
    'Power',
    'SquareRoot',
    'Log',
    'Cut',
]

Extractor = Callable[[Cell, Any], Any]


def _unwrap(found: Any) -> Any:
    if isinstance(found, Content):
        return found.value.as_double()
    return found


def extract_with_dimension(dim: int) -> Extractor:
    """Look up ``ext[Position(cell[dim])]``."""

    def extract(cell: Cell, ext: Any) -> Any:
        if ext is None:
            return None
        return _unwrap(ext.get(Position(cell.position.coordinate(dim))))

    return extract


def extract_with_dimension_and_key(dim: int, key: Any) -> Extractor:
    """Look up ``ext[Position(cell[dim])][Position(key)]``."""
    key_position = Position(key)

    def extract(cell: Cell, ext: Any) -> Any:
        if ext is None:
            return None
        inner = ext.get(Position(cell.position.coordinate(dim)))
        if inner is None:
            return None
        return _unwrap(inner.get(key_position))

    return extract


def extract_with_key(key: Any) -> Extractor:
    """Look up ``ext[Position(key)]`` regardless of the cell."""
    key_position = Position(key)

    def extract(cell: Cell, ext: Any) -> Any:
        if ext is None:
            return None
        return _unwrap(ext.get(key_position))

    return extract


def _numeric(cell: Cell) -> float | None:
    return cell.content.value.as_double()


def _double(cell: Cell, x: float) -> list[Cell]:
    return [Cell(cell.position, Content(ContinuousSchema(), DoubleValue(x)))]


class Indicator(Transformer):
    """Replace every content with the discrete value 1."""

    def __init__(self) -> None:
        super().__init__(name="Indicator", params={})

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        return [Cell(cell.position, Content(DiscreteSchema(), LongValue(1)))]


class Binarise(Transformer):
    """
    One-hot encode categorical contents.

    Coordinate ``dim`` becomes ``pattern.format(coordinate, value)`` and the
    content becomes 1; numeric contents are left out.
    """

    def __init__(self, dim: int, pattern: str = "{0}={1}") -> None:
        super().__init__(name="Binarise", params={"dim": dim, "pattern": pattern})
        self.dim = dim
        self.pattern = pattern

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        if not cell.content.type.is_specialisation_of(Type.CATEGORICAL):
            return []
        coordinate = cell.position.coordinate(self.dim).to_short_string()
        label = self.pattern.format(coordinate, cell.content.value.to_short_string())
        return [Cell(cell.position.update(self.dim, label), Content(DiscreteSchema(), LongValue(1)))]


class Normalise(Transformer):
    """Divide by a per-cell statistic, typically the max absolute value."""

    def __init__(self, extractor: Extractor) -> None:
        super().__init__(name="Normalise", params={})
        self.extractor = extractor

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x, scale = _numeric(cell), self.extractor(cell, ext)
        if x is None or scale is None or scale == 0:
            return []
        return _double(cell, x / scale)


class Standardise(Transformer):
    """
    Z-score: ``(x - mean) / sd``.

    Cells whose standard deviation is below ``threshold`` standardise to 0.
    """

    def __init__(self, mean: Extractor, sd: Extractor, threshold: float = 1e-4) -> None:
        super().__init__(name="Standardise", params={"threshold": threshold})
        self.mean = mean
        self.sd = sd
        self.threshold = threshold

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x, mean, sd = _numeric(cell), self.mean(cell, ext), self.sd(cell, ext)
        if x is None or mean is None or sd is None:
            return []
        return _double(cell, 0.0 if abs(sd) < self.threshold else (x - mean) / sd)


class Clamp(Transformer):
    """Limit numeric contents to ``[lower, upper]``."""

    def __init__(self, lower: float | None = None, upper: float | None = None) -> None:
        if lower is not None and upper is not None and lower > upper:
            raise ValueError(f"lower ({lower}) must not exceed upper ({upper})")
        super().__init__(name="Clamp", params={"lower": lower, "upper": upper})
        self.lower = lower
        self.upper = upper

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x = _numeric(cell)
        if x is None:
            return []
        if self.lower is not None:
            x = max(x, self.lower)
        if self.upper is not None:
            x = min(x, self.upper)
        return _double(cell, x)


class Fraction(Transformer):
    """``x / total``, or ``1 - x / total`` when ``inverse``."""

    def __init__(self, extractor: Extractor, inverse: bool = False) -> None:
        super().__init__(name="Fraction", params={"inverse": inverse})
        self.extractor = extractor
        self.inverse = inverse

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x, total = _numeric(cell), self.extractor(cell, ext)
        if x is None or not total:
            return []
        fraction = x / total
        return _double(cell, 1.0 - fraction if self.inverse else fraction)


class Power(Transformer):
    def __init__(self, exponent: float) -> None:
        super().__init__(name="Power", params={"exponent": exponent})
        self.exponent = exponent

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x = _numeric(cell)
        if x is None:
            return []
        try:
            return _double(cell, math.pow(x, self.exponent))
        except (ValueError, OverflowError):
            logger.debug(f"Power({self.exponent}) undefined for {x} at {cell.position!r}")
            return []


class SquareRoot(Transformer):
    """Square root of non-negative numeric contents."""

    def __init__(self) -> None:
        super().__init__(name="SquareRoot", params={})

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x = _numeric(cell)
        if x is None or x < 0:
            return []
        return _double(cell, math.sqrt(x))


class Log(Transformer):
    """``log(x + pseudocount)`` in the given base; non-positive arguments are dropped."""

    def __init__(self, base: float = math.e, pseudocount: float = 0.0) -> None:
        super().__init__(name="Log", params={"base": base, "pseudocount": pseudocount})
        self.base = base
        self.pseudocount = pseudocount

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x = _numeric(cell)
        if x is None or x + self.pseudocount <= 0:
            return []
        return _double(cell, math.log(x + self.pseudocount) / math.log(self.base))


class Cut(Transformer):
    """
    Discretise numeric contents into ``(lower, upper]`` bins.

    The extractor yields the sorted bin edges for a cell (see
    ``cellmatrix.algebra.cut_rules``). Values outside the outer edges are
    dropped. The output is an ordinal string such as ``"(0.0,2.5]"`` whose
    schema domain lists every bin in order.
    """

    def __init__(self, extractor: Extractor) -> None:
        super().__init__(name="Cut", params={})
        self.extractor = extractor

    @staticmethod
    def labels(edges: list[float]) -> list[str]:
        return [f"({lo},{hi}]" for lo, hi in zip(edges[:-1], edges[1:])]

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        x, edges = _numeric(cell), self.extractor(cell, ext)
        if x is None or not edges or len(edges) < 2:
            return []
        idx = int(np.searchsorted(edges, x, side="left"))
        if idx == 0 or idx == len(edges):
            return []
        labels = self.labels(list(edges))
        return [Cell(cell.position, Content(OrdinalSchema(labels), StringValue(labels[idx - 1])))]
