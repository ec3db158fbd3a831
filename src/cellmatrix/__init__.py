"""
cellmatrix - Sparse labeled matrices and the algebra over them

Cells are (Position, Content) pairs: a tuple of typed coordinates and a
schema-classified value. A Matrix is an immutable collection of cells with
operations to slice, aggregate, transform, slide windows, compare pairwise,
squash, partition, reshape and fill, all written against a pluggable
collection runtime.
"""

__version__ = "0.1.0"

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, Type, to_content
from cellmatrix.core.encoding import to_value
from cellmatrix.core.position import Dimension, Position, to_position, to_positions
from cellmatrix.core.slice import Slice, along, over
from cellmatrix.matrix import Matrix, Partitions
from cellmatrix.runtime.collection import Collection, LocalCollection
from cellmatrix.runtime.tuner import Strategy, Tuner

__all__ = [
    "Cell",
    "Content",
    "Type",
    "to_content",
    "to_value",
    "Dimension",
    "Position",
    "to_position",
    "to_positions",
    "Slice",
    "along",
    "over",
    "Matrix",
    "Partitions",
    "Collection",
    "LocalCollection",
    "Strategy",
    "Tuner",
]
