"""
Cells: the atomic unit of a matrix.

A Cell binds a Position to a Content. Matrices hold at most one cell per
position; operations that could produce collisions resolve them through an
explicit reducer (see ``Matrix.squash``).
"""

from __future__ import annotations

from dataclasses import dataclass

from cellmatrix.core.content import Content
from cellmatrix.core.position import Position

__all__ = ['Cell']


@dataclass(frozen=True)
class Cell:
    """(Position, Content) pair."""

    position: Position
    content: Content

    def relocate(self, position: Position) -> Cell:
        """Same content at another position."""
        return Cell(position, self.content)

    def to_short_string(self, separator: str = "|", descriptive: bool = False) -> str:
        """
        Render as ``<coordinates>|<type>|<codec>|<value>``.

        With ``descriptive`` the verbose ``repr`` forms of position and content
        are used instead and ``separator`` is ignored.
        """
        if descriptive:
            return f"Cell({self.position!r},{self.content})"
        if self.position.arity == 0:
            return self.content.to_short_string(separator)
        return separator.join([
            self.position.to_short_string(separator),
            self.content.to_short_string(separator),
        ])
