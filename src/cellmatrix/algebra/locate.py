"""
Locator factories: small functions that derive a new position for a cell.

Three shapes of locator are used by the matrix algebra:

    (input_cell, output_cell) -> Position | None
        ``Transformer.and_then_relocate``: ``rename_dimension``,
        ``rename_dimension_with_content``, ``append_to_output``.

    (cell, ext) -> Position | None
        ``Matrix.relocate``: ``append_content_string``,
        ``prepend_content_string``.

    (cell, value_or_None) -> Position | None
        ``Matrix.reshape``: ``reshape_append``.

Returning None drops the cell.
"""

from __future__ import annotations

from typing import Any, Callable

from cellmatrix.core.cell import Cell
from cellmatrix.core.position import Position

__all__ = [
    'rename_dimension',
    'rename_dimension_with_content',
    'append_to_output',
    'append_content_string',
    'prepend_content_string',
    'reshape_append',
]


def rename_dimension(dim: int, pattern: str = "{}") -> Callable[[Cell, Cell], Position]:
    """
    Rewrite coordinate ``dim`` of the output as ``pattern.format(coordinate)``.

    Examples:
        >>> Indicator().and_then_relocate(rename_dimension(2, "{}.ind"))
    """

    def locate(cell: Cell, out: Cell) -> Position:
        coordinate = out.position.coordinate(dim).to_short_string()
        return out.position.update(dim, pattern.format(coordinate))

    return locate


def rename_dimension_with_content(
    dim: int,
    pattern: str = "{0}={1}",
) -> Callable[[Cell, Cell], Position]:
    """Rewrite coordinate ``dim`` using both the coordinate and the input content."""

    def locate(cell: Cell, out: Cell) -> Position:
        coordinate = out.position.coordinate(dim).to_short_string()
        value = cell.content.value.to_short_string()
        return out.position.update(dim, pattern.format(coordinate, value))

    return locate


def append_to_output(value: Any) -> Callable[[Cell, Cell], Position]:
    """Append a fixed coordinate to every output position."""

    def locate(cell: Cell, out: Cell) -> Position:
        return out.position.append(value)

    return locate


def append_content_string() -> Callable[[Cell, Any], Position]:
    """Append the cell's value, as a string coordinate."""

    def locate(cell: Cell, ext: Any = None) -> Position:
        return cell.position.append(cell.content.value.to_short_string())

    return locate


def prepend_content_string() -> Callable[[Cell, Any], Position]:
    """Prepend the cell's value, as a string coordinate."""

    def locate(cell: Cell, ext: Any = None) -> Position:
        return cell.position.prepend(cell.content.value.to_short_string())

    return locate


def reshape_append(missing: str | None = None) -> Callable[[Cell, str | None], Position | None]:
    """
    Append the promoted value during ``Matrix.reshape``.

    Args:
        missing: Coordinate used when the cell has no promoted value; when
            None such cells are dropped
    """

    def locate(cell: Cell, value: str | None) -> Position | None:
        if value is None:
            return None if missing is None else cell.position.append(missing)
        return cell.position.append(value)

    return locate
