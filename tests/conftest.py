"""
Pytest configuration and shared fixtures.

This module provides test data generators and shared fixtures for all test suites.
"""

import numpy as np
import pytest

from cellmatrix.core.cell import Cell
from cellmatrix.core.content import Content, ContinuousSchema, DiscreteSchema, NominalSchema
from cellmatrix.core.encoding import DoubleValue, LongValue, StringValue
from cellmatrix.core.position import Position
from cellmatrix.matrix import Matrix


def generate_sparse_matrix(
    n_instances: int,
    n_features: int,
    n_days: int,
    density: float = 0.3,
    seed: int = 42
) -> Matrix:
    """
    Generate a sparse 3-D matrix of continuous measurements.

    Args:
        n_instances: Number of distinct first coordinates ("iid:000")
        n_features: Number of distinct second coordinates ("fid:A", ...)
        n_days: Number of distinct third coordinates (day 0, 1, ...)
        density: Probability that a position holds a cell
        seed: Random seed for reproducibility

    Returns:
        Matrix with one continuous cell per occupied position

    Design:
        - Every instance gets at least one cell so the first dimension is
          fully represented
        - Values are normally distributed around a per-feature mean
    """
    rng = np.random.default_rng(seed)
    feature_means = rng.uniform(0, 100, size=n_features)
    occupied = rng.random((n_instances, n_features, n_days)) < density
    occupied[:, 0, 0] = True
    values = rng.normal(feature_means[None, :, None], 5.0, size=occupied.shape)

    cells = [
        Cell(
            Position(f"iid:{i:03d}", f"fid:{chr(ord('A') + j)}", int(k)),
            Content(ContinuousSchema(), DoubleValue(float(values[i, j, k]))),
        )
        for i, j, k in zip(*np.nonzero(occupied))
    ]
    return Matrix(cells)


def cell(*args):
    """Shorthand for a cell: coordinates followed by a Python scalar value."""
    *coordinates, value = args
    if isinstance(value, int):
        content = Content(DiscreteSchema(), LongValue(value))
    elif isinstance(value, float):
        content = Content(ContinuousSchema(), DoubleValue(value))
    else:
        content = Content(NominalSchema(), StringValue(value))
    return Cell(Position(*coordinates), content)


@pytest.fixture
def sparse_3d():
    """Synthetic sparse 3-D matrix (10 instances x 4 features x 5 days)."""
    return generate_sparse_matrix(10, 4, 5)


@pytest.fixture
def measurements():
    """
    Small 2-D matrix of instance x feature measurements.

        iid:0064402  fid:A 3.14  fid:B 6.28  fid:C "H"
        iid:0066848  fid:A 9.42  fid:B 12.56
        iid:0216406  fid:A 15.7  fid:C "L"
    """
    return Matrix([
        cell("iid:0064402", "fid:A", 3.14),
        cell("iid:0064402", "fid:B", 6.28),
        cell("iid:0064402", "fid:C", "H"),
        cell("iid:0066848", "fid:A", 9.42),
        cell("iid:0066848", "fid:B", 12.56),
        cell("iid:0216406", "fid:A", 15.7),
        cell("iid:0216406", "fid:C", "L"),
    ])


@pytest.fixture
def series():
    """Per-key time series used by window tests: x = 10, 7, 15 and y = 1, 2."""
    return Matrix([
        cell("x", 1, 10.0),
        cell("x", 2, 7.0),
        cell("x", 3, 15.0),
        cell("y", 1, 1.0),
        cell("y", 2, 2.0),
    ])


def values_by_position(matrix):
    """{position: python value} of a matrix, for compact assertions."""
    return {c.position: c.content.value.value for c in matrix.materialise()}
