"""Shared argparse type validators for CLI parameter bounds checking.

These validators produce clear error messages when users pass invalid
values (e.g., ``--dimensions 12``, ``--n-jobs 0``). They are intended to
be used as the ``type=`` argument in ``add_argument()``.
"""

from __future__ import annotations

import argparse

from cellmatrix.core.position import MAX_ARITY


def _positive_int(value: str) -> int:
    """argparse type for positive integers (> 0)."""
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return ivalue


def _arity(value: str) -> int:
    """argparse type for a number of dimensions in [1, 9]."""
    ivalue = int(value)
    if not 1 <= ivalue <= MAX_ARITY:
        raise argparse.ArgumentTypeError(
            f"{value} is not a valid number of dimensions (must be in [1, {MAX_ARITY}])"
        )
    return ivalue


def _dimension(value: str) -> int:
    """argparse type for a dimension index in [1, 9], or -1 for the last."""
    ivalue = int(value)
    if ivalue != -1 and not 1 <= ivalue <= MAX_ARITY:
        raise argparse.ArgumentTypeError(
            f"{value} is not a valid dimension (must be in [1, {MAX_ARITY}] or -1)"
        )
    return ivalue


def _n_jobs(value: str) -> int:
    """argparse type for joblib worker counts (non-zero)."""
    ivalue = int(value)
    if ivalue == 0:
        raise argparse.ArgumentTypeError("n-jobs must be non-zero (-1 uses all cores)")
    return ivalue
