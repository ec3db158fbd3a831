"""
Error taxonomy for the cell-matrix data model.

Four families of failure are distinguished, and each is handled at a
different place:

    StructuralError:
        Programming errors in how positions and slices are addressed
        (arity overflow, out-of-range dimension, malformed permutation).
        Always raised, never caught by the core.

    ContentInterpretationError:
        A cell's content cannot be interpreted by an operation (for example a
        string where a number is required). The matrix catches it per cell and
        that cell contributes no output.

    ParseError / ValidationError:
        Raw input that cannot be decoded, or decodes but fails its schema.
        Loaders route these into a side stream of error messages instead of
        raising.

    IncomparableValuesError:
        Two values of different variants were compared.
"""

from __future__ import annotations

__all__ = [
    'StructuralError',
    'ArityError',
    'DimensionError',
    'InvalidPermutationError',
    'ContentInterpretationError',
    'ParseError',
    'ValidationError',
    'IncomparableValuesError',
]


class StructuralError(ValueError):
    """Invalid addressing of a position or slice."""


class ArityError(StructuralError):
    """A position would exceed the supported arity, or has the wrong arity."""


class DimensionError(StructuralError, IndexError):
    """A dimension index outside the position's arity."""


class InvalidPermutationError(StructuralError):
    """A permutation or melt that does not name each dimension exactly once."""


class ContentInterpretationError(ValueError):
    """Cell content cannot be interpreted by an operation."""


class ParseError(ValueError):
    """A raw record could not be decoded into a cell."""

    def __init__(self, message: str, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line


class ValidationError(ParseError):
    """A decoded value does not satisfy its schema."""


class IncomparableValuesError(TypeError):
    """Values of different variants have no common ordering."""
