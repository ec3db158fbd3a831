"""
Collection runtime interface and its in-memory implementation.

The matrix algebra is written against ``Collection``: a small set of bulk
operations (map, flat_map, group_by_key, reduce_by_key, join, sort_within,
materialise) that a distributed engine can provide. ``LocalCollection`` keeps
the elements in a tuple and runs per-element and per-group work either
sequentially or through ``joblib.Parallel``, depending on the Tuner passed to
each call.

Keyed operations work on ``(key, value)`` pairs. Keys must be hashable.
Grouping keeps keys in first-seen order so that results are deterministic
for a given input order.

Examples:
    >>> from cellmatrix.runtime.collection import LocalCollection
    >>> pairs = LocalCollection([("a", 1), ("b", 2), ("a", 3)])
    >>> pairs.reduce_by_key(lambda x, y: x + y).materialise()
    [('a', 4), ('b', 2)]
"""

from __future__ import annotations

import functools
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Hashable, Iterable, TypeVar

from joblib import Parallel, delayed

from cellmatrix.runtime.tuner import DEFAULT_TUNER, Tuner

logger = logging.getLogger(__name__)

__all__ = ['Collection', 'LocalCollection']

T = TypeVar('T')
U = TypeVar('U')


class Collection(ABC, Generic[T]):
    """Bulk operations the matrix algebra needs from a runtime."""

    @abstractmethod
    def map(self, f: Callable[[T], U], tuner: Tuner | None = None) -> Collection[U]:
        ...

    @abstractmethod
    def flat_map(self, f: Callable[[T], Iterable[U]], tuner: Tuner | None = None) -> Collection[U]:
        ...

    @abstractmethod
    def filter(self, predicate: Callable[[T], bool]) -> Collection[T]:
        ...

    @abstractmethod
    def union(self, other: Collection[T]) -> Collection[T]:
        ...

    @abstractmethod
    def distinct(self) -> Collection[T]:
        ...

    @abstractmethod
    def group_by_key(self, tuner: Tuner | None = None) -> Collection[tuple[Hashable, list]]:
        """``(k, v)`` pairs to ``(k, [v, ...])``, one per distinct key."""

    @abstractmethod
    def reduce_by_key(self, f: Callable[[Any, Any], Any], tuner: Tuner | None = None) -> Collection:
        """Fold the values of each key with an associative, commutative ``f``."""

    @abstractmethod
    def join(self, other: Collection, tuner: Tuner | None = None) -> Collection:
        """Inner join of ``(k, v)`` and ``(k, w)`` into ``(k, (v, w))``."""

    @abstractmethod
    def left_join(self, other: Collection, tuner: Tuner | None = None) -> Collection:
        """Like ``join`` but keeps unmatched left pairs as ``(k, (v, None))``."""

    @abstractmethod
    def cartesian(self, other: Collection[U]) -> Collection[tuple[T, U]]:
        ...

    @abstractmethod
    def sort_within(self, key: Callable[[Any], Any], reverse: bool = False) -> Collection:
        """Sort the value list of every ``(k, [v, ...])`` group."""

    @abstractmethod
    def materialise(self) -> list[T]:
        ...

    def count(self) -> int:
        return len(self.materialise())

    def broadcast(self, value: Any) -> Any:
        """Make ``value`` available read-only to every worker."""
        return value

    def map_values(self, f: Callable[[Any], Any], tuner: Tuner | None = None) -> Collection:
        return self.map(lambda kv: (kv[0], f(kv[1])), tuner)

    def keys(self) -> Collection:
        return self.map(lambda kv: kv[0])

    def values(self) -> Collection:
        return self.map(lambda kv: kv[1])


class LocalCollection(Collection[T]):
    """
    In-memory collection backed by a tuple.

    Args:
        elements: Initial elements; consumed once
    """

    def __init__(self, elements: Iterable[T] = ()) -> None:
        self._elements: tuple[T, ...] = tuple(elements)

    def _run(self, f: Callable[[Any], Any], items: Iterable[Any], tuner: Tuner | None) -> list[Any]:
        tuner = tuner or DEFAULT_TUNER
        if tuner.is_parallel:
            items = list(items)
            logger.debug(
                f"Dispatching {len(items)} tasks to joblib "
                f"(n_jobs={tuner.n_jobs}, prefer={tuner.prefer})"
            )
            return Parallel(n_jobs=tuner.n_jobs, prefer=tuner.prefer)(
                delayed(f)(item) for item in items
            )
        return [f(item) for item in items]

    def map(self, f: Callable[[T], U], tuner: Tuner | None = None) -> LocalCollection[U]:
        return LocalCollection(self._run(f, self._elements, tuner))

    def flat_map(self, f: Callable[[T], Iterable[U]], tuner: Tuner | None = None) -> LocalCollection[U]:
        nested = self._run(lambda x: list(f(x)), self._elements, tuner)
        return LocalCollection(x for chunk in nested for x in chunk)

    def filter(self, predicate: Callable[[T], bool]) -> LocalCollection[T]:
        return LocalCollection(x for x in self._elements if predicate(x))

    def union(self, other: Collection[T]) -> LocalCollection[T]:
        return LocalCollection(self._elements + tuple(other.materialise()))

    def distinct(self) -> LocalCollection[T]:
        return LocalCollection(dict.fromkeys(self._elements))

    def _groups(self) -> dict[Hashable, list]:
        groups: dict[Hashable, list] = {}
        for k, v in self._elements:
            groups.setdefault(k, []).append(v)
        return groups

    def group_by_key(self, tuner: Tuner | None = None) -> LocalCollection:
        return LocalCollection(self._groups().items())

    def reduce_by_key(self, f: Callable[[Any, Any], Any], tuner: Tuner | None = None) -> LocalCollection:
        groups = list(self._groups().items())
        reduced = self._run(lambda kv: (kv[0], functools.reduce(f, kv[1])), groups, tuner)
        return LocalCollection(reduced)

    def join(self, other: Collection, tuner: Tuner | None = None) -> LocalCollection:
        right = LocalCollection(other.materialise())._groups()
        return LocalCollection(
            (k, (v, w)) for k, v in self._elements for w in right.get(k, ())
        )

    def left_join(self, other: Collection, tuner: Tuner | None = None) -> LocalCollection:
        right = LocalCollection(other.materialise())._groups()
        joined = []
        for k, v in self._elements:
            matches = right.get(k)
            if matches:
                joined.extend((k, (v, w)) for w in matches)
            else:
                joined.append((k, (v, None)))
        return LocalCollection(joined)

    def cartesian(self, other: Collection[U]) -> LocalCollection[tuple[T, U]]:
        right = other.materialise()
        return LocalCollection((x, y) for x in self._elements for y in right)

    def sort_within(self, key: Callable[[Any], Any], reverse: bool = False) -> LocalCollection:
        return LocalCollection(
            (k, sorted(vs, key=key, reverse=reverse)) for k, vs in self._elements
        )

    def materialise(self) -> list[T]:
        return list(self._elements)

    def count(self) -> int:
        return len(self._elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self):
        return iter(self._elements)

    def __repr__(self) -> str:
        return f"LocalCollection(n={len(self._elements)})"
