"""
Tests for positions, dimensions and their structural operations.
"""

import pytest

from cellmatrix.core.encoding import LongValue, StringValue, concatenate
from cellmatrix.core.errors import ArityError, DimensionError, InvalidPermutationError, StructuralError
from cellmatrix.core.position import MAX_ARITY, Dimension, Position, dimension_label, to_position, to_positions


class TestConstruction:
    def test_arity(self):
        assert Position().arity == 0
        assert Position("a", 1).arity == 2
        assert len(Position(*range(MAX_ARITY))) == MAX_ARITY

    def test_arity_overflow(self):
        with pytest.raises(ArityError):
            Position(*range(MAX_ARITY + 1))
        with pytest.raises(ArityError):
            Position(*range(MAX_ARITY)).append("x")

    def test_coordinates_are_values(self):
        p = Position("a", 1)
        assert p.coordinates == (StringValue("a"), LongValue(1))
        assert p[Dimension.SECOND] == LongValue(1)
        assert p[Dimension.LAST] == LongValue(1)

    def test_to_position(self):
        assert to_position(("a", 1)) == Position("a", 1)
        assert to_position("a") == Position("a")
        p = Position("x")
        assert to_position(p) is p
        assert to_positions(["a", ("b", 2)]) == [Position("a"), Position("b", 2)]

    def test_repr(self):
        assert repr(Position("a", 1)) == "Position2D('a', 1)"

    def test_structural_errors_are_value_errors(self):
        assert issubclass(ArityError, StructuralError)
        assert issubclass(StructuralError, ValueError)
        assert issubclass(DimensionError, IndexError)


class TestAccessAndUpdate:
    def test_out_of_range_dimension(self):
        with pytest.raises(DimensionError):
            Position("a").coordinate(2)
        with pytest.raises(DimensionError):
            Position().coordinate(Dimension.LAST)

    def test_update(self):
        assert Position("a", 1).update(2, 5) == Position("a", 5)

    def test_permute(self):
        p = Position("a", "b", "c")
        assert p.permute([3, 1, 2]) == Position("c", "a", "b")
        assert p.permute([Dimension.LAST, 2, 1]) == Position("c", "b", "a")

    def test_invalid_permutation(self):
        with pytest.raises(InvalidPermutationError):
            Position("a", "b").permute([1, 1])
        with pytest.raises(InvalidPermutationError):
            Position("a", "b", "c").permute([1, 2])


class TestArityChanges:
    def test_prepend_append(self):
        p = Position("a")
        assert p.prepend(0) == Position(0, "a")
        assert p.append(0) == Position("a", 0)

    def test_insert(self):
        p = Position("a", "c")
        assert p.insert(2, "b") == Position("a", "b", "c")
        assert p.insert(3, "d") == Position("a", "c", "d")
        assert p.insert(Dimension.LAST, "z") == Position("a", "c", "z")
        with pytest.raises(DimensionError):
            p.insert(5, "x")

    @pytest.mark.parametrize("dim", [1, 2, 3])
    def test_remove_insert_round_trip(self, dim):
        p = Position("a", 2, "c")
        assert p.remove(dim).insert(dim, p[dim]) == p

    def test_melt(self):
        p = Position("a", "b", "c")
        assert p.melt(1, 3, concatenate(".")) == Position("b", "c.a")
        assert p.melt(3, 1, concatenate(":")) == Position("a:c", "b")

    def test_melt_into_itself(self):
        with pytest.raises(InvalidPermutationError):
            Position("a", "b").melt(2, Dimension.LAST, concatenate())


class TestOrdering:
    def test_lexicographic(self):
        assert Position("a", 1) < Position("a", 2)
        assert Position("a", 9) < Position("b", 0)
        assert Position("a", 1) == Position("a", 1)

    def test_arity_first(self):
        assert Position("z") < Position("a", "a")
        assert Position("a", "a").compare(Position("z")) > 0

    def test_total_order_properties(self):
        ps = [Position("b", 1), Position("a", 2), Position("a", 1), Position("b", 0)]
        ordered = sorted(ps, key=Position.sort_key())
        assert ordered == [Position("a", 1), Position("a", 2), Position("b", 0), Position("b", 1)]
        for x in ps:
            assert x.compare(x) == 0
            for y in ps:
                assert x.compare(y) == -y.compare(x)

    def test_descending_sort_key(self):
        ps = [Position(1), Position(3), Position(2)]
        assert sorted(ps, key=Position.sort_key(ascending=False)) == [Position(3), Position(2), Position(1)]

    def test_hashable(self):
        assert len({Position("a", 1), Position("a", 1), Position("a", 2)}) == 2

    def test_short_string(self):
        assert Position("a", 1, 2.5).to_short_string() == "a|1|2.5"
        assert Position("a", 1).to_short_string(",") == "a,1"


class TestDimension:
    def test_labels(self):
        assert Dimension.FIRST.label == "First"
        assert dimension_label(3) == "Third"

    def test_unknown_label(self):
        with pytest.raises(DimensionError):
            dimension_label(12)

    @pytest.mark.parametrize("value", ["x", 3, 2.5])
    def test_append_remove_last_round_trip(self, value):
        p = Position("a", 1)
        assert p.append(value).remove(Dimension.LAST) == p
