"""
Bin-edge rules for ``Cut``.

Every rule takes the compacted summary statistics of a matrix,
``{Position1D(col): {Position1D(stat): Content}}``, and returns
``{Position1D(col): [edge, ...]}`` ready to be broadcast as the ``ext`` of a
``Cut(extract_with_dimension(dim))`` transform.

Equal-width rules extend the lowest edge by 0.1% of the range, as
``pandas.cut`` does, so that the minimum falls inside the first
``(lower, upper]`` bin.

Examples:
    >>> stats = matrix.summarise(over(2), [Count("count"), Min("min"), Max("max")])
    >>> edges = sturges_formula(stats.compact(over(1)), "count", "min", "max")
    >>> binned = matrix.transform(Cut(extract_with_dimension(2)), ext=edges)
"""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping

import numpy as np

from cellmatrix.core.content import Content
from cellmatrix.core.position import Position, to_position

__all__ = [
    'fixed',
    'square_root_choice',
    'sturges_formula',
    'rice_rule',
    'doanes_formula',
    'scotts_normal_reference_rule',
    'breaks',
]

Stats = Mapping[Position, Mapping[Position, Content]]


def _stat(stats: Mapping[Position, Content], key: Any) -> float | None:
    content = stats.get(Position(key))
    return None if content is None else content.value.as_double()


def _equal_width(lower: float, upper: float, k: int) -> list[float]:
    k = max(int(k), 1)
    edges = np.linspace(lower, upper, k + 1)
    edges[0] -= (upper - lower) * 0.001 if upper > lower else 0.001
    return [float(e) for e in edges]


def _rule(
    ext: Stats,
    min_key: Any,
    max_key: Any,
    bins: Callable[[Mapping[Position, Content]], float | None],
) -> dict[Position, list[float]]:
    result = {}
    for position, stats in ext.items():
        lower, upper, k = _stat(stats, min_key), _stat(stats, max_key), bins(stats)
        if lower is None or upper is None or k is None:
            continue
        result[position] = _equal_width(lower, upper, math.ceil(k))
    return result


def fixed(ext: Stats, min_key: Any, max_key: Any, k: int) -> dict[Position, list[float]]:
    """``k`` equal-width bins."""
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}")
    return _rule(ext, min_key, max_key, lambda stats: k)


def _with_count(formula: Callable[[float], float], count_key: Any):
    def bins(stats):
        n = _stat(stats, count_key)
        return None if n is None or n <= 0 else formula(n)
    return bins


def square_root_choice(ext: Stats, count_key: Any, min_key: Any, max_key: Any) -> dict[Position, list[float]]:
    """``ceil(sqrt(n))`` bins."""
    return _rule(ext, min_key, max_key, _with_count(math.sqrt, count_key))


def sturges_formula(ext: Stats, count_key: Any, min_key: Any, max_key: Any) -> dict[Position, list[float]]:
    """``ceil(log2(n)) + 1`` bins."""
    return _rule(ext, min_key, max_key, _with_count(lambda n: math.ceil(math.log2(n)) + 1, count_key))


def rice_rule(ext: Stats, count_key: Any, min_key: Any, max_key: Any) -> dict[Position, list[float]]:
    """``ceil(2 * n^(1/3))`` bins."""
    return _rule(ext, min_key, max_key, _with_count(lambda n: 2.0 * n ** (1.0 / 3.0), count_key))


def doanes_formula(
    ext: Stats,
    count_key: Any,
    min_key: Any,
    max_key: Any,
    skewness_key: Any,
) -> dict[Position, list[float]]:
    """Sturges corrected for skewness: ``1 + log2(n) + log2(1 + |g1| / sigma_g1)``."""

    def bins(stats):
        n, g1 = _stat(stats, count_key), _stat(stats, skewness_key)
        if n is None or g1 is None or n <= 2 or math.isnan(g1):
            return None
        sigma = math.sqrt(6.0 * (n - 2) / ((n + 1) * (n + 3)))
        return 1.0 + math.log2(n) + math.log2(1.0 + abs(g1) / sigma)

    return _rule(ext, min_key, max_key, bins)


def scotts_normal_reference_rule(
    ext: Stats,
    count_key: Any,
    min_key: Any,
    max_key: Any,
    sd_key: Any,
) -> dict[Position, list[float]]:
    """Bin width ``3.5 * sd / n^(1/3)``."""

    def bins(stats):
        n, sd = _stat(stats, count_key), _stat(stats, sd_key)
        lower, upper = _stat(stats, min_key), _stat(stats, max_key)
        if None in (n, sd, lower, upper) or n <= 0 or not sd > 0:
            return None
        width = 3.5 * sd / n ** (1.0 / 3.0)
        return max((upper - lower) / width, 1.0)

    return _rule(ext, min_key, max_key, bins)


def breaks(ranges: Mapping[Any, list[float]]) -> dict[Position, list[float]]:
    """User supplied edges, keyed by coordinate."""
    return {to_position(key): sorted(float(e) for e in edges) for key, edges in ranges.items()}
