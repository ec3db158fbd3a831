"""
Sparse labeled matrices and the algebra over them.

A Matrix is an immutable wrapper around a collection of Cells. Every
operation returns a new Matrix (or a collection of positions/contents) and
leaves its input untouched. Operations are written against the
``Collection`` runtime interface, so the same algebra runs on the in-memory
``LocalCollection`` or on any other runtime that implements it.

Grouped operations take a Slice:

    summarise   group by selected, reduce with aggregators
    slide       group by selected, scan in remainder order with windows
    pairwise    group by selected, compare cells pairwise by remainder
    names/types group by selected, report keys or variable types

Other operations address dimensions directly: squash and melt collapse one,
reshape promotes one coordinate into a new dimension, permute reorders them.

Engineering Design:
    - Immutable: operations return new instances
    - Runtime-agnostic: only Collection operations touch the data
    - Explicit: broadcast values (``ext``) and execution hints (``tuner``)
      are optional arguments, never ambient state
    - Content failures are local: a cell whose content an operation cannot
      interpret contributes no output, the rest of the matrix is unaffected

Examples:
    >>> from cellmatrix import Matrix, Position, over, along
    >>> from cellmatrix.algebra import Count, Mean
    >>> m = Matrix.from_values({
    ...     ("iid:0064402", "fid:A"): 3.14,
    ...     ("iid:0064402", "fid:B"): 6.28,
    ...     ("iid:0066848", "fid:A"): 9.42,
    ... })
    >>> m.names(over(2))
    [Position1D('fid:A'), Position1D('fid:B')]
    >>> m.summarise(over(2), Count()).compact()[Position("fid:A")].value
    LongValue(value=2)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Iterable, Mapping, Sequence, TypeVar

from cellmatrix.algebra.aggregate import Aggregator
from cellmatrix.algebra.pairwise import Comparer, Operator
from cellmatrix.algebra.partition import Partitioner
from cellmatrix.algebra.squash import Squasher
from cellmatrix.algebra.window import Window
from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, DiscreteSchema, NominalSchema, Type, to_content
from cellmatrix.core.encoding import LongValue, StringValue, Value, concatenate
from cellmatrix.core.errors import ArityError, ContentInterpretationError
from cellmatrix.core.position import Position, dimension_label, to_position, to_positions
from cellmatrix.core.slice import Slice
from cellmatrix.core.transform import Transformer
from cellmatrix.runtime.collection import Collection, LocalCollection
from cellmatrix.runtime.tuner import Tuner

logger = logging.getLogger(__name__)

__all__ = ['Matrix', 'Partitions']

T = TypeVar('T')


def _as_list(ops: T | Sequence[T]) -> list[T]:
    if isinstance(ops, (list, tuple)):
        return list(ops)
    return [ops]


def _safely(f: Callable[..., Iterable[Cell]], *args: Any) -> list[Cell]:
    """Run an operation on one input; content failures yield no cells."""
    try:
        return list(f(*args))
    except ContentInterpretationError as e:
        logger.debug(f"Skipping input: {e}")
        return []


def _attempt(f: Callable[..., T], *args: Any) -> T | None:
    """Call ``f`` on one input; None when its content cannot be interpreted."""
    try:
        return f(*args)
    except ContentInterpretationError as e:
        logger.debug(f"Skipping input: {e}")
        return None


def _group_order(slc: Slice) -> Callable[[Cell], Any]:
    """Sort key ordering a group's cells by remainder, then full position."""
    rem_key = Position.sort_key()
    pos_key = Position.sort_key()
    return lambda cell: (rem_key(slc.remainder(cell.position)), pos_key(cell.position))


class Matrix:
    """
    Immutable sparse matrix of cells.

    Args:
        data: A Collection of cells, or any iterable of cells (wrapped in a
            LocalCollection)

    Raises:
        TypeError: If ``data`` is neither a Collection nor an iterable
    """

    def __init__(self, data: Collection[Cell] | Iterable[Cell] = ()) -> None:
        if isinstance(data, Collection):
            self._data = data
        else:
            try:
                self._data = LocalCollection(data)
            except TypeError as e:
                raise TypeError(f"data must be a Collection or iterable of Cells, got {type(data)}") from e

    @classmethod
    def from_values(cls, values: Mapping[Any, Any]) -> Matrix:
        """
        Build a matrix from ``{coordinates: value}``.

        Keys are converted with ``to_position`` and values with
        ``to_content``.
        """
        return cls(Cell(to_position(k), to_content(v)) for k, v in values.items())

    def _wrap(self, data: Collection[Cell]) -> Matrix:
        return Matrix(data)

    @property
    def data(self) -> Collection[Cell]:
        """Underlying cell collection."""
        return self._data

    def materialise(self) -> list[Cell]:
        """All cells as a local list."""
        return self._data.materialise()

    def count(self) -> int:
        return self._data.count()

    def __len__(self) -> int:
        return self._data.count()

    def __iter__(self):
        return iter(self._data.materialise())

    def __repr__(self) -> str:
        return f"Matrix({self._data!r})"

    def arity(self) -> int:
        """
        Common arity of the cells (0 for an empty matrix).

        Raises:
            ArityError: If cells of different arity are mixed
        """
        arities = set(self._data.map(lambda c: c.position.arity).distinct().materialise())
        if len(arities) > 1:
            raise ArityError(f"Matrix mixes positions of arity {sorted(arities)}")
        return arities.pop() if arities else 0

    # =========================================================================
    # Inspection
    # =========================================================================

    def names(self, slc: Slice) -> list[Position]:
        """Distinct selected positions, sorted."""
        names = self._data.map(lambda c: slc.selected(c.position)).distinct().materialise()
        return sorted(names, key=Position.sort_key())

    def domain(self) -> Collection[Position]:
        """Cartesian product of every dimension's distinct coordinates."""
        arity = self.arity()
        if arity == 0:
            return LocalCollection([Position()] if self.count() else [])
        result: Collection[Position] = LocalCollection([Position()])
        for dim in range(1, arity + 1):
            coordinates = self._data.map(lambda c, d=dim: c.position.coordinate(d)).distinct()
            result = result.cartesian(coordinates).map(lambda pc: pc[0].append(pc[1]))
        return result

    def shape(self) -> Matrix:
        """Number of distinct coordinates per dimension, keyed by dimension name."""
        arity = self.arity()
        cells = [
            Cell(Position(dimension_label(dim)), Content(DiscreteSchema(), LongValue(self._distinct_count(dim))))
            for dim in range(1, arity + 1)
        ]
        return Matrix(cells)

    def _distinct_count(self, dim: int) -> int:
        return self._data.map(lambda c: c.position.coordinate(dim)).distinct().count()

    def size(self, dim: int, distinct: bool = False) -> Matrix:
        """
        Size of one dimension.

        Args:
            dim: Dimension to measure
            distinct: Coordinates along ``dim`` are known to be distinct, so
                the cell count can be used directly
        """
        n = self.count() if distinct else self._distinct_count(dim)
        return Matrix([Cell(Position(dimension_label(dim)), Content(DiscreteSchema(), LongValue(n)))])

    def types(self, slc: Slice, specific: bool = False, tuner: Tuner | None = None) -> Matrix:
        """
        Variable type of every selected position.

        The types of a group are joined (e.g. continuous + discrete gives
        numerical). Without ``specific`` the result is generalised one level.
        """

        def present(kv: tuple[Position, Type]) -> Cell:
            position, t = kv
            t = t if specific else t.general
            return Cell(position, Content(NominalSchema(), StringValue(t.value)))

        return self._wrap(
            self._data.map(lambda c: (slc.selected(c.position), c.content.type))
            .reduce_by_key(Type.join, tuner)
            .map(present)
        )

    def unique(self, slc: Slice | None = None) -> Collection:
        """
        Distinct contents, or distinct ``(selected, content)`` pairs with a slice.
        """
        if slc is None:
            return self._data.map(lambda c: c.content).distinct()
        return self.unique_by_position(slc)

    def unique_by_position(self, slc: Slice) -> Collection[tuple[Position, Content]]:
        return self._data.map(lambda c: (slc.selected(c.position), c.content)).distinct()

    def compact(self, slc: Slice | None = None) -> dict:
        """
        Collect the matrix into local dictionaries.

        Returns:
            ``{position: content}`` without a slice; with a slice
            ``{selected: {remainder: content}}``, or ``{selected: content}``
            when the remainder is 0-D
        """
        cells = self._data.materialise()
        if slc is None:
            return {c.position: c.content for c in cells}
        result: dict[Position, Any] = {}
        for c in cells:
            selected, remainder = slc.split(c.position)
            if remainder.arity == 0:
                result[selected] = c.content
            else:
                result.setdefault(selected, {})[remainder] = c.content
        return result

    # =========================================================================
    # Queries and selection
    # =========================================================================

    def which(self, predicate: Callable[[Cell], bool]) -> Collection[Position]:
        """Positions of the cells that satisfy ``predicate``."""
        return self._data.filter(predicate).map(lambda c: c.position)

    def which_by_position(
        self,
        slc: Slice,
        predicates: Sequence[tuple[Iterable[Any], Callable[[Cell], bool]]],
    ) -> Collection[Position]:
        """
        Positions matching per-slice predicates.

        Args:
            slc: Slice whose selected position picks the predicate
            predicates: ``(positions, predicate)`` pairs; a cell matches when
                its selected position is in ``positions`` and ``predicate``
                holds
        """
        table = [(frozenset(to_positions(ps)), p) for ps, p in predicates]

        def matches(cell: Cell) -> bool:
            selected = slc.selected(cell.position)
            return any(selected in keys and predicate(cell) for keys, predicate in table)

        return self._data.filter(matches).map(lambda c: c.position)

    def get(self, positions: Iterable[Any]) -> Matrix:
        """Cells at the given positions."""
        keys = frozenset(to_positions(positions))
        return self._wrap(self._data.filter(lambda c: c.position in keys))

    def slice(self, slc: Slice, positions: Iterable[Any], keep: bool = True) -> Matrix:
        """Keep (or remove) the cells whose selected position is in ``positions``."""
        keys = frozenset(to_positions(positions))
        return self._wrap(self._data.filter(lambda c: (slc.selected(c.position) in keys) == keep))

    def subset(self, sampler: Callable[[Cell], bool]) -> Matrix:
        """Cells accepted by ``sampler``."""
        return self._wrap(self._data.filter(sampler))

    # =========================================================================
    # Structural updates
    # =========================================================================

    def set(self, cells: Matrix | Cell | Iterable[Cell]) -> Matrix:
        """Insert cells, replacing any existing cell at the same position."""
        if isinstance(cells, Cell):
            cells = [cells]
        incoming = cells.data if isinstance(cells, Matrix) else LocalCollection(cells)
        tagged = self._data.map(lambda c: (c.position, (0, c))).union(
            incoming.map(lambda c: (c.position, (1, c)))
        )
        return self._wrap(
            tagged.reduce_by_key(lambda a, b: a if a[0] >= b[0] else b).map(lambda kv: kv[1][1])
        )

    def change(
        self,
        slc: Slice,
        positions: Iterable[Any],
        parser: Callable[[str], Content | None],
    ) -> Matrix:
        """
        Re-interpret the content of the selected positions.

        Each affected value is rendered to text and parsed again, typically
        with ``content_parser(codec, schema)``. Cells that fail to parse are
        dropped.
        """
        keys = frozenset(to_positions(positions))

        def change_one(cell: Cell) -> list[Cell]:
            if slc.selected(cell.position) not in keys:
                return [cell]
            content = parser(cell.content.value.to_short_string())
            return [] if content is None else [Cell(cell.position, content)]

        return self._wrap(self._data.flat_map(change_one))

    def relocate(self, locate: Callable[[Cell, Any], Position | None], ext: Any = None) -> Matrix:
        """Move every cell to ``locate(cell, ext)``; None drops the cell."""

        def move(cell: Cell) -> list[Cell]:
            position = _attempt(locate, cell, ext)
            return [] if position is None else [cell.relocate(position)]

        return self._wrap(self._data.flat_map(move))

    def permute(self, *order: int) -> Matrix:
        """Reorder dimensions of every position."""
        return self._wrap(self._data.map(lambda c: c.relocate(c.position.permute(order))))

    def melt(
        self,
        dim: int,
        into: int,
        merge: Callable[[Value, Value], Any] | None = None,
    ) -> Matrix:
        """Merge dimension ``dim`` into ``into``; coordinates are joined with ``"."`` by default."""
        merge = merge or concatenate(".")
        return self._wrap(self._data.map(lambda c: c.relocate(c.position.melt(dim, into, merge))))

    def to_vector(self, separator: str = "|") -> Matrix:
        """Flatten every position to a single string coordinate."""
        return self._wrap(
            self._data.map(lambda c: c.relocate(Position(c.position.to_short_string(separator))))
        )

    def join(self, slc: Slice, other: Matrix) -> Matrix:
        """Cells of both matrices whose selected position occurs in both."""
        mine = self._data.map(lambda c: (slc.selected(c.position), c))
        theirs = other.data.map(lambda c: (slc.selected(c.position), c))
        common = (
            mine.keys().distinct().map(lambda k: (k, None))
            .join(theirs.keys().distinct().map(lambda k: (k, None)))
            .map(lambda kv: (kv[0], None))
        )
        left = mine.join(common).map(lambda kv: kv[1][0])
        right = theirs.join(common).map(lambda kv: kv[1][0])
        return self._wrap(left.union(right))

    # =========================================================================
    # Algebra
    # =========================================================================

    def summarise(
        self,
        slc: Slice,
        aggregators: Aggregator | Sequence[Aggregator],
        ext: Any = None,
        tuner: Tuner | None = None,
    ) -> Matrix:
        """
        Aggregate every slice group.

        All aggregators are reduced together, one intermediate slot each. A
        slot that never received a prepared value emits nothing.

        Args:
            slc: Slice whose selected position is the group key
            aggregators: One or more aggregators
            ext: Optional broadcast value passed to prepare and present
            tuner: Optional execution hints
        """
        aggregators = _as_list(aggregators)
        ext = self._data.broadcast(ext)
        logger.debug(f"summarise {slc!r} with {aggregators}")

        def prepare(cell: Cell) -> tuple[Position, tuple]:
            return slc.selected(cell.position), tuple(_attempt(a.prepare, cell, ext) for a in aggregators)

        def reduce(left: tuple, right: tuple) -> tuple:
            return tuple(
                r if lt is None else lt if r is None else a.reduce(lt, r)
                for a, lt, r in zip(aggregators, left, right)
            )

        def present(kv: tuple[Position, tuple]) -> list[Cell]:
            selected, states = kv
            cells: list[Cell] = []
            for a, t in zip(aggregators, states):
                if t is not None:
                    cells.extend(_safely(a.present, selected, t, ext))
            return cells

        return self._wrap(self._data.map(prepare).reduce_by_key(reduce, tuner).flat_map(present, tuner))

    def transform(
        self,
        transformers: Transformer | Sequence[Transformer],
        ext: Any = None,
        tuner: Tuner | None = None,
    ) -> Matrix:
        """Apply every transformer to every cell and collect all outputs."""
        transformers = _as_list(transformers)
        ext = self._data.broadcast(ext)
        logger.debug(f"transform with {transformers}")

        def apply(cell: Cell) -> list[Cell]:
            return [out for t in transformers for out in _safely(t.present, cell, ext)]

        return self._wrap(self._data.flat_map(apply, tuner))

    def slide(
        self,
        slc: Slice,
        windows: Window | Sequence[Window],
        ascending: bool = True,
        ext: Any = None,
        tuner: Tuner | None = None,
    ) -> Matrix:
        """
        Scan every slice group in remainder order.

        Args:
            slc: Slice whose selected position is the group key
            windows: One or more windows, each scanning independently
            ascending: Scan order of the remainders
            ext: Optional broadcast value passed to prepare
            tuner: Optional execution hints
        """
        windows = _as_list(windows)
        ext = self._data.broadcast(ext)
        logger.debug(f"slide {slc!r} with {windows} (ascending={ascending})")

        def scan(kv: tuple[Position, list[Cell]]) -> list[Cell]:
            selected, cells = kv
            outputs: list[Cell] = []
            for window in windows:
                state: Any = None
                started = False
                for cell in cells:
                    i = _attempt(window.prepare, cell, ext)
                    if i is None:
                        continue
                    rem = slc.remainder(cell.position)
                    if started:
                        step = _attempt(window.update, rem, i, state)
                    else:
                        step = _attempt(window.initialise, rem, i)
                    # a failed step leaves the scan state as it was
                    if step is None:
                        continue
                    state, emitted = step
                    started = True
                    for o in emitted:
                        outputs.extend(_safely(window.present, selected, o))
            return outputs

        grouped = (
            self._data.map(lambda c: (slc.selected(c.position), c))
            .group_by_key(tuner)
            .sort_within(_group_order(slc), reverse=not ascending)
        )
        return self._wrap(grouped.flat_map(scan, tuner))

    def pairwise(
        self,
        slc: Slice,
        comparer: Comparer,
        operators: Operator | Sequence[Operator],
        ext: Any = None,
        tuner: Tuner | None = None,
    ) -> Matrix:
        """
        Apply operators to qualifying pairs of cells within each slice group.

        Pairs are formed between cells that share a selected position and
        are filtered by ``comparer`` on their remainders.
        """
        operators = _as_list(operators)
        ext = self._data.broadcast(ext)
        logger.debug(f"pairwise {slc!r} {comparer.name} with {operators}")

        def pairs(kv: tuple[Position, list[Cell]]) -> list[Cell]:
            _, cells = kv
            return self._compute_pairs(slc, comparer, operators, cells, cells, ext)

        grouped = (
            self._data.map(lambda c: (slc.selected(c.position), c))
            .group_by_key(tuner)
            .sort_within(_group_order(slc))
        )
        return self._wrap(grouped.flat_map(pairs, tuner))

    def pairwise_between(
        self,
        slc: Slice,
        comparer: Comparer,
        other: Matrix,
        operators: Operator | Sequence[Operator],
        ext: Any = None,
        tuner: Tuner | None = None,
    ) -> Matrix:
        """
        Like ``pairwise`` with left cells from this matrix and right cells
        from ``other``; only selected positions present in both are paired.
        """
        operators = _as_list(operators)
        ext = self._data.broadcast(ext)

        def group(m: Matrix) -> Collection:
            return (
                m.data.map(lambda c: (slc.selected(c.position), c))
                .group_by_key(tuner)
                .sort_within(_group_order(slc))
            )

        def pairs(kv: tuple[Position, tuple[list[Cell], list[Cell]]]) -> list[Cell]:
            _, (lefts, rights) = kv
            return self._compute_pairs(slc, comparer, operators, lefts, rights, ext)

        return self._wrap(group(self).join(group(other), tuner).flat_map(pairs, tuner))

    @staticmethod
    def _compute_pairs(
        slc: Slice,
        comparer: Comparer,
        operators: list[Operator],
        lefts: list[Cell],
        rights: list[Cell],
        ext: Any,
    ) -> list[Cell]:
        result: list[Cell] = []
        right_rems = [(slc.remainder(r.position), r) for r in rights]
        for left in lefts:
            left_rem = slc.remainder(left.position)
            for right_rem, right in right_rems:
                if comparer.keep(left_rem, right_rem):
                    for op in operators:
                        result.extend(_safely(op.compute, left, right, ext))
        return result

    def squash(self, dim: int, squasher: Squasher, ext: Any = None, tuner: Tuner | None = None) -> Matrix:
        """
        Remove dimension ``dim``, resolving collisions with ``squasher``.

        Every reduced position keeps exactly one content: the one carried by
        the cell the squasher's reduction selects.
        """
        ext = self._data.broadcast(ext)
        logger.debug(f"squash dimension {dim} with {squasher!r}")

        def prepare(cell: Cell) -> list[tuple[Position, Cell]]:
            kept = _attempt(squasher.prepare, dim, cell, ext)
            return [] if kept is None else [(kept.position.remove(dim), kept)]

        return self._wrap(
            self._data.flat_map(prepare)
            .reduce_by_key(lambda left, right: squasher.reduce(dim, left, right), tuner)
            .map(lambda kv: Cell(kv[0], kv[1].content))
        )

    def split(
        self,
        partitioners: Partitioner | Sequence[Partitioner],
        ext: Any = None,
        tuner: Tuner | None = None,
    ) -> Partitions:
        """Label every cell; a cell appears once per label it receives."""
        partitioners = _as_list(partitioners)
        ext = self._data.broadcast(ext)

        def assign(cell: Cell) -> list[tuple[Hashable, Cell]]:
            return [(label, cell) for p in partitioners for label in _attempt(p.assign, cell, ext) or []]

        return Partitions(self._data.flat_map(assign, tuner))

    def reshape(
        self,
        dim: int,
        coordinate: Any,
        locate: Callable[[Cell, str | None], Position | None],
        tuner: Tuner | None = None,
    ) -> Matrix:
        """
        Promote the cells at ``coordinate`` of ``dim`` into a coordinate of the others.

        The cells whose ``dim`` coordinate equals ``coordinate`` are removed;
        their content strings are keyed by the rest of their position. Every
        other cell is matched on its own position without ``dim`` and moved to
        ``locate(cell, value)``, where ``value`` is the matched string or None.
        """
        key = to_position(coordinate).coordinate(1)

        def is_key(cell: Cell) -> bool:
            return cell.position.coordinate(dim) == key

        keys = self._data.filter(is_key).map(
            lambda c: (c.position.remove(dim), c.content.value.to_short_string())
        )
        others = self._data.filter(lambda c: not is_key(c)).map(lambda c: (c.position.remove(dim), c))

        def move(kv: tuple[Position, tuple[Cell, str | None]]) -> list[Cell]:
            _, (cell, value) = kv
            position = _attempt(locate, cell, value)
            return [] if position is None else [cell.relocate(position)]

        return self._wrap(others.left_join(keys, tuner).flat_map(move, tuner))

    def fill_homogeneous(
        self,
        content: Any,
        domain: Collection[Position] | Iterable[Any] | None = None,
        tuner: Tuner | None = None,
    ) -> Matrix:
        """
        Give every domain position without a cell the same content.

        Args:
            content: Fill content (or a scalar converted with ``to_content``)
            domain: Positions to fill; defaults to ``self.domain()``
            tuner: Optional execution hints
        """
        content = to_content(content)
        if domain is None:
            domain = self.domain()
        elif not isinstance(domain, Collection):
            domain = LocalCollection(to_positions(domain))
        missing = (
            domain.map(lambda p: (p, None))
            .left_join(self._data.map(lambda c: (c.position, c)), tuner)
            .filter(lambda kv: kv[1][1] is None)
            .map(lambda kv: Cell(kv[0], content))
        )
        return self._wrap(self._data.union(missing))

    def fill_heterogeneous(self, slc: Slice, values: Matrix, tuner: Tuner | None = None) -> Matrix:
        """
        Fill missing positions with a per-group content.

        ``values`` holds one cell per selected position. Domain positions are
        inner-joined with it on their selected position: existing cells keep
        their content, missing ones take their group's value, and positions
        whose group has no value are not part of the result.
        """
        dense = (
            self.domain()
            .map(lambda p: (slc.selected(p), p))
            .join(values.data.map(lambda c: (c.position, c.content)), tuner)
            .map(lambda kv: (kv[1][0], Cell(kv[1][0], kv[1][1])))
        )
        return self._wrap(
            dense.left_join(self._data.map(lambda c: (c.position, c)), tuner)
            .map(lambda kv: kv[1][1] if kv[1][1] is not None else kv[1][0])
        )

    # =========================================================================
    # Output
    # =========================================================================

    def to_text(self, writer: Callable[[Cell], str] | None = None) -> Collection[str]:
        """Render every cell with ``writer`` (default: short string form)."""
        writer = writer or (lambda c: c.to_short_string("|"))
        return self._data.map(writer)

    def to_sequence(self, writer: Callable[[Cell], tuple[str, str]] | None = None) -> Collection[tuple[str, str]]:
        """Render every cell as a ``(key, value)`` pair (default: position, content)."""
        writer = writer or (lambda c: (c.position.to_short_string("|"), c.content.to_short_string("|")))
        return self._data.map(writer)


class Partitions:
    """
    Labeled partitions of a matrix: a collection of ``(label, cell)`` pairs.
    """

    def __init__(self, data: Collection[tuple[Hashable, Cell]]) -> None:
        self._data = data

    @property
    def data(self) -> Collection[tuple[Hashable, Cell]]:
        return self._data

    def ids(self) -> list[Hashable]:
        """Distinct labels in first-seen order."""
        return self._data.keys().distinct().materialise()

    def get(self, label: Hashable) -> Matrix:
        return Matrix(self._data.filter(lambda kv: kv[0] == label).values())

    def add(self, label: Hashable, matrix: Matrix) -> Partitions:
        return Partitions(self._data.union(matrix.data.map(lambda c: (label, c))))

    def remove(self, label: Hashable) -> Partitions:
        return Partitions(self._data.filter(lambda kv: kv[0] != label))

    def merge(self, labels: Iterable[Hashable]) -> Matrix:
        """Union of the cells of several partitions."""
        wanted = frozenset(labels)
        return Matrix(self._data.filter(lambda kv: kv[0] in wanted).values())

    def for_each(self, labels: Iterable[Hashable], fn: Callable[[Hashable, Matrix], Matrix]) -> Matrix:
        """Apply ``fn`` to each listed partition and union the results."""
        result: Collection[Cell] = LocalCollection()
        for label in labels:
            logger.debug(f"Processing partition {label!r}")
            result = result.union(fn(label, self.get(label)).data)
        return Matrix(result)
