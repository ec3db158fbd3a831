"""
Base classes for operation objects and the Transformer contract.

Every operation applied by a Matrix (aggregators, transformers, windows,
pairwise operators, partitioners, squashers) is an ``Operation``: a small
object holding its parameters, with a readable ``repr`` for logging
pipelines. Operations are pure: they never modify the cells they receive and
hold no mutable state between calls, so they are safe to share across
parallel workers.

Transformer contract:
    ``present(cell, ext=None)`` maps one cell to zero or more cells. ``ext``
    is an optional read-only value broadcast to every call (for example
    per-column statistics computed by an earlier summarise). A transformer
    that cannot interpret a cell's content returns no cells, or raises
    ContentInterpretationError which the matrix treats the same way.

Engineering Design:
    Pure Functions:
        - No side effects (cells are immutable)
        - Deterministic (same cell + ext + params gives the same output)
        - Composable (``and_then``, ``and_then_relocate``)

Examples:
    >>> from cellmatrix.core.transform import Transformer
    >>>
    >>> class Negate(Transformer):
    ...     def __init__(self):
    ...         super().__init__(name="Negate", params={})
    ...
    ...     def present(self, cell, ext=None):
    ...         x = cell.content.value.as_double()
    ...         if x is None:
    ...             return []
    ...         return [Cell(cell.position, Content(ContinuousSchema(), DoubleValue(-x)))]
    >>>
    >>> negated = matrix.transform(Negate())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from cellmatrix.core.cell import Cell
    from cellmatrix.core.position import Position

__all__ = ['Operation', 'Transformer', 'ChainedTransformer', 'RelocatedTransformer']


class Operation(ABC):
    """
    Named, parameterised operation object.

    Attributes:
        name: Human-readable operation name (e.g., "Mean")
        params: Parameters used for this operation, rendered by ``repr``
    """

    def __init__(self, name: str, params: dict[str, Any]) -> None:
        self.name = name
        self.params = params

    def __repr__(self) -> str:
        """
        String representation for logging and debugging.

        Returns:
            String like "Power(exponent=2)"
        """
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.name}({params_str})"


class Transformer(Operation):
    """
    Cell-wise transformation: one cell in, zero or more cells out.

    The output position has at least the input's arity: library transformers
    either keep the position or append a coordinate.
    """

    @abstractmethod
    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        """
        Transform one cell.

        Args:
            cell: Input cell
            ext: Optional broadcast value

        Returns:
            Output cells (empty when the content cannot be interpreted)
        """

    def and_then(self, other: Transformer) -> Transformer:
        """Feed every output cell of this transformer into ``other``."""
        return ChainedTransformer(self, other)

    def and_then_relocate(
        self,
        locate: Callable[[Cell, Cell], Position | None],
    ) -> Transformer:
        """
        Rewrite output positions with ``locate(input_cell, output_cell)``.

        Outputs for which ``locate`` returns None are dropped.
        """
        return RelocatedTransformer(self, locate)


class ChainedTransformer(Transformer):
    def __init__(self, first: Transformer, second: Transformer) -> None:
        super().__init__(name=f"{first!r} -> {second!r}", params={})
        self.first = first
        self.second = second

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        return [
            out
            for mid in self.first.present(cell, ext)
            for out in self.second.present(mid, ext)
        ]

    def __repr__(self) -> str:
        return self.name


class RelocatedTransformer(Transformer):
    def __init__(self, inner: Transformer, locate: Callable[[Cell, Cell], Position | None]) -> None:
        super().__init__(name=f"{inner!r}.and_then_relocate", params={})
        self.inner = inner
        self.locate = locate

    def present(self, cell: Cell, ext: Any = None) -> list[Cell]:
        result = []
        for out in self.inner.present(cell, ext):
            position = self.locate(cell, out)
            if position is not None:
                result.append(out.relocate(position))
        return result

    def __repr__(self) -> str:
        return self.name
