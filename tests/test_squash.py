"""
Tests for squashers and Matrix.squash.
"""

import pytest

from cellmatrix.algebra.squash import KeepSlice, PreservingMaxPosition, PreservingMinPosition
from cellmatrix.core.position import Dimension, Position
from cellmatrix.matrix import Matrix

from conftest import cell, values_by_position


@pytest.fixture
def daily():
    """Two keys observed on several days."""
    return Matrix([
        cell("x", "fid:A", 1, 10.0),
        cell("x", "fid:A", 3, 30.0),
        cell("x", "fid:A", 2, 20.0),
        cell("y", "fid:A", 2, 5.0),
    ])


class TestSquashers:
    def test_preserving_max_position(self, daily):
        result = values_by_position(daily.squash(3, PreservingMaxPosition()))
        assert result == {Position("x", "fid:A"): 30.0, Position("y", "fid:A"): 5.0}

    def test_preserving_min_position(self, daily):
        result = values_by_position(daily.squash(3, PreservingMinPosition()))
        assert result == {Position("x", "fid:A"): 10.0, Position("y", "fid:A"): 5.0}

    def test_keep_slice(self, daily):
        result = values_by_position(daily.squash(3, KeepSlice(2)))
        assert result == {Position("x", "fid:A"): 20.0, Position("y", "fid:A"): 5.0}

    def test_keep_slice_without_match_drops_group(self, daily):
        result = values_by_position(daily.squash(3, KeepSlice(3)))
        assert result == {Position("x", "fid:A"): 30.0}

    def test_last_dimension(self, daily):
        result = daily.squash(Dimension.LAST, PreservingMaxPosition())
        assert all(c.position.arity == 2 for c in result.materialise())


class TestSquashProperties:
    def test_one_cell_per_group_keeps_contents(self, daily):
        """Squashing again after a squash only drops the coordinate."""
        squashed = daily.squash(3, PreservingMaxPosition())
        again = squashed.squash(2, PreservingMinPosition())
        assert values_by_position(again) == {Position("x"): 30.0, Position("y"): 5.0}

    def test_one_reduced_position_per_group(self, sparse_3d):
        result = sparse_3d.squash(3, PreservingMaxPosition())
        expected = {c.position.remove(3) for c in sparse_3d.materialise()}
        assert {c.position for c in result.materialise()} == expected
        assert result.count() == len(expected)

    def test_input_is_unchanged(self, daily):
        daily.squash(3, PreservingMaxPosition())
        assert daily.count() == 4
