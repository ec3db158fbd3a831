"""
Tests for the collection runtime and the execution tuner.
"""

import pytest

from cellmatrix.runtime.collection import Collection, LocalCollection
from cellmatrix.runtime.tuner import DEFAULT_TUNER, Strategy, Tuner


class TestTuner:
    def test_default(self):
        assert DEFAULT_TUNER.strategy is Strategy.DEFAULT
        assert not DEFAULT_TUNER.is_parallel

    def test_parallel(self):
        tuner = Tuner.parallel(n_jobs=2)
        assert tuner.is_parallel
        assert tuner.prefer == "threads"

    def test_single_job_is_sequential(self):
        assert not Tuner(Strategy.PARALLEL, n_jobs=1).is_parallel

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            Tuner(n_jobs=0)
        with pytest.raises(ValueError):
            Tuner(reducers=0)


class TestLocalCollection:
    """Bulk operations on the in-memory runtime."""

    def test_is_a_collection(self):
        assert isinstance(LocalCollection(), Collection)

    def test_map_filter_flat_map(self):
        c = LocalCollection([1, 2, 3])
        assert c.map(lambda x: x * 2).materialise() == [2, 4, 6]
        assert c.filter(lambda x: x % 2).materialise() == [1, 3]
        assert c.flat_map(lambda x: [x] * x).materialise() == [1, 2, 2, 3, 3, 3]

    def test_union_and_distinct(self):
        c = LocalCollection([1, 2]).union(LocalCollection([2, 3]))
        assert c.materialise() == [1, 2, 2, 3]
        assert c.distinct().materialise() == [1, 2, 3]

    def test_group_by_key_keeps_first_seen_order(self):
        c = LocalCollection([("b", 1), ("a", 2), ("b", 3)])
        assert c.group_by_key().materialise() == [("b", [1, 3]), ("a", [2])]

    def test_reduce_by_key(self):
        c = LocalCollection([("a", 1), ("b", 2), ("a", 3)])
        assert c.reduce_by_key(lambda x, y: x + y).materialise() == [("a", 4), ("b", 2)]

    def test_joins(self):
        left = LocalCollection([("a", 1), ("b", 2)])
        right = LocalCollection([("a", "x"), ("a", "y"), ("c", "z")])
        assert left.join(right).materialise() == [("a", (1, "x")), ("a", (1, "y"))]
        assert left.left_join(right).materialise() == [
            ("a", (1, "x")), ("a", (1, "y")), ("b", (2, None))
        ]

    def test_cartesian(self):
        c = LocalCollection([1, 2]).cartesian(LocalCollection(["a", "b"]))
        assert c.materialise() == [(1, "a"), (1, "b"), (2, "a"), (2, "b")]

    def test_sort_within(self):
        c = LocalCollection([("k", [3, 1, 2])])
        assert c.sort_within(key=lambda x: x).materialise() == [("k", [1, 2, 3])]
        assert c.sort_within(key=lambda x: x, reverse=True).materialise() == [("k", [3, 2, 1])]

    def test_helpers(self):
        c = LocalCollection([("a", 1), ("b", 2)])
        assert c.keys().materialise() == ["a", "b"]
        assert c.values().materialise() == [1, 2]
        assert c.map_values(lambda v: v + 1).materialise() == [("a", 2), ("b", 3)]
        assert c.count() == 2
        assert c.broadcast({"x": 1}) == {"x": 1}


class TestParallelExecution:
    """Results under the joblib strategy match the sequential ones."""

    def test_map_parallel(self):
        c = LocalCollection(range(20))
        tuner = Tuner.parallel(n_jobs=2)
        assert c.map(lambda x: x * x, tuner).materialise() == [x * x for x in range(20)]

    def test_reduce_by_key_parallel(self):
        c = LocalCollection([(i % 3, i) for i in range(30)])
        sequential = c.reduce_by_key(lambda x, y: x + y).materialise()
        parallel = c.reduce_by_key(lambda x, y: x + y, Tuner.parallel(n_jobs=2)).materialise()
        assert parallel == sequential
