"""Operation contracts and library operations for the matrix algebra."""

from cellmatrix.algebra.aggregate import (
    Aggregator,
    Count,
    Entropy,
    Histogram,
    Max,
    MaxAbs,
    Mean,
    Min,
    Moments,
    Sum,
)
from cellmatrix.algebra.pairwise import Comparer, Concatenate, Divide, Minus, Operator, Plus, Times
from cellmatrix.algebra.partition import (
    BinaryDateSplit,
    BinaryHashSplit,
    DateSplit,
    HashSplit,
    Partitioner,
    TernaryDateSplit,
    TernaryHashSplit,
)
from cellmatrix.algebra.squash import KeepSlice, PreservingMaxPosition, PreservingMinPosition, Squasher
from cellmatrix.algebra.transforms import (
    Binarise,
    Clamp,
    Cut,
    Fraction,
    Indicator,
    Log,
    Normalise,
    Power,
    SquareRoot,
    Standardise,
    extract_with_dimension,
    extract_with_dimension_and_key,
    extract_with_key,
)
from cellmatrix.algebra.window import (
    CenteredMovingAverage,
    CumulativeMovingAverage,
    CumulativeSum,
    Difference,
    ExponentialMovingAverage,
    SimpleMovingAverage,
    WeightedMovingAverage,
    Window,
)

__all__ = [
    'Aggregator', 'Count', 'Entropy', 'Histogram', 'Max', 'MaxAbs', 'Mean', 'Min', 'Moments', 'Sum',
    'Comparer', 'Concatenate', 'Divide', 'Minus', 'Operator', 'Plus', 'Times',
    'BinaryDateSplit', 'BinaryHashSplit', 'DateSplit', 'HashSplit', 'Partitioner',
    'TernaryDateSplit', 'TernaryHashSplit',
    'KeepSlice', 'PreservingMaxPosition', 'PreservingMinPosition', 'Squasher',
    'Binarise', 'Clamp', 'Cut', 'Fraction', 'Indicator', 'Log', 'Normalise', 'Power',
    'SquareRoot', 'Standardise',
    'extract_with_dimension', 'extract_with_dimension_and_key', 'extract_with_key',
    'CenteredMovingAverage', 'CumulativeMovingAverage', 'CumulativeSum', 'Difference',
    'ExponentialMovingAverage', 'SimpleMovingAverage', 'WeightedMovingAverage', 'Window',
]
