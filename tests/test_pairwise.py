"""
Tests for pairwise operators and comparers.
"""

import pytest

from cellmatrix.algebra.pairwise import Comparer, Concatenate, Divide, Minus, Plus, Times
from cellmatrix.core.content import Type
from cellmatrix.core.position import Position
from cellmatrix.core.slice import along, over
from cellmatrix.matrix import Matrix

from conftest import cell, values_by_position


@pytest.fixture
def group():
    """One group "g" with four cells a=1, b=2, c=4, d=8."""
    return Matrix([
        cell("g", "a", 1.0),
        cell("g", "b", 2.0),
        cell("g", "c", 4.0),
        cell("g", "d", 8.0),
    ])


class TestComparer:
    @pytest.mark.parametrize("comparer,expected", [
        (Comparer.ALL, 16),
        (Comparer.UPPER, 6),
        (Comparer.LOWER, 6),
        (Comparer.UPPER_DIAGONAL, 10),
        (Comparer.LOWER_DIAGONAL, 10),
        (Comparer.DIAGONAL, 4),
    ])
    def test_pair_counts(self, group, comparer, expected):
        assert group.pairwise(over(1), comparer, Plus(over(1))).count() == expected

    def test_keep(self):
        a, b = Position("a"), Position("b")
        assert Comparer.UPPER.keep(a, b)
        assert not Comparer.UPPER.keep(b, a)
        assert Comparer.LOWER.keep(b, a)
        assert Comparer.DIAGONAL.keep(a, a)
        assert not Comparer.DIAGONAL.keep(a, b)


class TestOperators:
    def test_minus_default_pattern(self, group):
        result = values_by_position(group.pairwise(over(1), Comparer.UPPER, Minus(over(1))))
        assert result[Position("g", "(a-b)")] == -1.0
        assert result[Position("g", "(c-d)")] == -4.0
        assert len(result) == 6

    def test_inverse_swaps_operands(self, group):
        result = values_by_position(group.pairwise(over(1), Comparer.UPPER, Minus(over(1), inverse=True)))
        assert result[Position("g", "(a-b)")] == 1.0

    def test_custom_pattern(self, group):
        result = values_by_position(group.pairwise(over(1), Comparer.UPPER, Times(over(1), pattern="{0}x{1}")))
        assert result[Position("g", "bxd")] == 16.0

    def test_divide_by_zero_is_dropped(self):
        m = Matrix([cell("g", "a", 3.0), cell("g", "b", 0.0)])
        result = values_by_position(m.pairwise(over(1), Comparer.ALL, Divide(over(1))))
        assert Position("g", "(a/b)") not in result
        assert result[Position("g", "(b/a)")] == 0.0
        assert result[Position("g", "(a/a)")] == 1.0
        assert Position("g", "(b/b)") not in result

    def test_non_numeric_contents_are_skipped(self):
        m = Matrix([cell("g", "a", 3.0), cell("g", "b", "text")])
        assert m.pairwise(over(1), Comparer.UPPER, Plus(over(1))).count() == 0

    def test_several_operators(self, group):
        result = group.pairwise(over(1), Comparer.UPPER, [Plus(over(1)), Minus(over(1))])
        assert result.count() == 12

    def test_concatenate(self):
        m = Matrix([cell("g", "a", "x"), cell("g", "b", "y")])
        result = m.pairwise(over(1), Comparer.UPPER, Concatenate(over(1))).materialise()
        assert len(result) == 1
        assert result[0].position == Position("g", "a|b")
        assert result[0].content.type is Type.NOMINAL
        assert result[0].content.value.value == "x,y"

    def test_groups_do_not_mix(self):
        m = Matrix([cell("g", "a", 1.0), cell("h", "b", 2.0)])
        assert m.pairwise(over(1), Comparer.ALL, Plus(over(1))).count() == 2

    def test_along_pairs_across_first_dimension(self):
        m = Matrix([cell("a", "t", 1.0), cell("b", "t", 3.0)])
        result = values_by_position(m.pairwise(along(1), Comparer.UPPER, Plus(along(1))))
        assert result == {Position("t", "(a+b)"): 4.0}


class TestPairwiseBetween:
    def test_pairs_left_with_right(self):
        left = Matrix([cell("g", "a", 10.0), cell("h", "a", 1.0)])
        right = Matrix([cell("g", "b", 4.0)])
        result = values_by_position(left.pairwise_between(over(1), Comparer.ALL, right, Minus(over(1))))
        assert result == {Position("g", "(a-b)"): 6.0}
