"""Core data model: values, content, positions, cells, slices and operation bases."""

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import (
    Content,
    ContinuousSchema,
    DateSchema,
    DiscreteSchema,
    NominalSchema,
    OrdinalSchema,
    Schema,
    StructuredSchema,
    Type,
    content_parser,
    to_content,
)
from cellmatrix.core.encoding import (
    Codec,
    DateCodec,
    DateValue,
    DoubleCodec,
    DoubleValue,
    LongCodec,
    LongValue,
    StringCodec,
    StringValue,
    StructuredCodec,
    StructuredValue,
    Value,
    concatenate,
    to_value,
)
from cellmatrix.core.errors import (
    ArityError,
    ContentInterpretationError,
    DimensionError,
    IncomparableValuesError,
    InvalidPermutationError,
    ParseError,
    StructuralError,
    ValidationError,
)
from cellmatrix.core.position import Dimension, Position, to_position, to_positions
from cellmatrix.core.slice import Slice, SliceMode, along, over
from cellmatrix.core.transform import Operation, Transformer

__all__ = [
    'Cell',
    'Content',
    'ContinuousSchema',
    'DateSchema',
    'DiscreteSchema',
    'NominalSchema',
    'OrdinalSchema',
    'Schema',
    'StructuredSchema',
    'Type',
    'content_parser',
    'to_content',
    'Codec',
    'DateCodec',
    'DateValue',
    'DoubleCodec',
    'DoubleValue',
    'LongCodec',
    'LongValue',
    'StringCodec',
    'StringValue',
    'StructuredCodec',
    'StructuredValue',
    'Value',
    'concatenate',
    'to_value',
    'ArityError',
    'ContentInterpretationError',
    'DimensionError',
    'IncomparableValuesError',
    'InvalidPermutationError',
    'ParseError',
    'StructuralError',
    'ValidationError',
    'Dimension',
    'Position',
    'to_position',
    'to_positions',
    'Slice',
    'SliceMode',
    'along',
    'over',
    'Operation',
    'Transformer',
]
