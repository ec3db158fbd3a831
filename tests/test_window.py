"""
Tests for windows and Matrix.slide.
"""

import pytest

from cellmatrix.algebra.window import (
    CenteredMovingAverage,
    CumulativeMovingAverage,
    CumulativeSum,
    Difference,
    ExponentialMovingAverage,
    SimpleMovingAverage,
    WeightedMovingAverage,
)
from cellmatrix.core.position import Position
from cellmatrix.core.slice import along, over
from cellmatrix.matrix import Matrix

from conftest import cell, values_by_position


class TestDifference:
    """Scan order and output placement of Difference."""

    def test_ascending(self, series):
        result = values_by_position(series.slide(over(1), Difference()))
        assert result == {
            Position("x", "2-1"): -3.0,
            Position("x", "3-2"): 8.0,
            Position("y", "2-1"): 1.0,
        }

    def test_descending(self, series):
        result = values_by_position(series.slide(over(1), Difference(), ascending=False))
        assert result[Position("x", "2-3")] == -8.0
        assert result[Position("x", "1-2")] == 3.0
        assert len(result) == 3

    def test_single_cell_group_yields_nothing(self):
        m = Matrix([cell("z", 1, 5.0)])
        assert m.slide(over(1), Difference()).count() == 0

    def test_non_numeric_cells_are_skipped(self):
        m = Matrix([cell("x", 1, 10.0), cell("x", 2, "n/a"), cell("x", 3, 15.0)])
        assert values_by_position(m.slide(over(1), Difference())) == {Position("x", "3-1"): 5.0}

    def test_along_groups_by_the_other_dimensions(self, series):
        result = values_by_position(series.slide(along(1), Difference("{0}->{1}")))
        assert result == {
            Position(1, "y->x"): -9.0,
            Position(2, "y->x"): -5.0,
        }


class TestAccumulatingWindows:
    def test_cumulative_sum(self, series):
        result = values_by_position(series.slide(over(1), CumulativeSum()))
        assert result[Position("x", "1")] == 10.0
        assert result[Position("x", "2")] == 17.0
        assert result[Position("x", "3")] == 32.0
        assert result[Position("y", "2")] == 3.0

    def test_cumulative_moving_average(self, series):
        result = values_by_position(series.slide(over(1), CumulativeMovingAverage()))
        assert result[Position("x", "2")] == pytest.approx(8.5)
        assert result[Position("x", "3")] == pytest.approx(32.0 / 3)

    def test_exponential_moving_average(self, series):
        result = values_by_position(series.slide(over(1), ExponentialMovingAverage(0.5)))
        assert result[Position("x", "1")] == 10.0
        assert result[Position("x", "2")] == pytest.approx(8.5)
        assert result[Position("x", "3")] == pytest.approx(11.75)

    def test_invalid_alpha(self):
        with pytest.raises(ValueError):
            ExponentialMovingAverage(0.0)


class TestMovingAverages:
    def test_simple(self, series):
        result = values_by_position(series.slide(over(1), SimpleMovingAverage(window=2)))
        assert result == {
            Position("x", "2"): pytest.approx(8.5),
            Position("x", "3"): pytest.approx(11.0),
            Position("y", "2"): pytest.approx(1.5),
        }

    def test_simple_all_includes_leading_cells(self, series):
        result = values_by_position(series.slide(over(1), SimpleMovingAverage(window=2, all=True)))
        assert result[Position("x", "1")] == 10.0
        assert len(result) == 5

    def test_weighted(self, series):
        result = values_by_position(series.slide(over(1), WeightedMovingAverage(window=2)))
        assert result[Position("x", "2")] == pytest.approx(8.0)
        assert result[Position("x", "3")] == pytest.approx(37.0 / 3)

    def test_centered(self, series):
        result = values_by_position(series.slide(over(1), CenteredMovingAverage(width=1)))
        assert result == {Position("x", "2"): pytest.approx(32.0 / 3)}

    def test_several_windows_scan_independently(self, series):
        result = series.slide(over(1), [CumulativeSum(), Difference()])
        assert result.count() == 5 + 3

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            SimpleMovingAverage(window=0)
        with pytest.raises(ValueError):
            CenteredMovingAverage(width=0)
