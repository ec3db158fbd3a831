"""
Execution hints passed explicitly to matrix operations.

A Tuner never changes the result of an operation, only how the runtime
computes it. Leaving it out means "runtime decides".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ['Strategy', 'Tuner', 'DEFAULT_TUNER']


class Strategy(Enum):
    DEFAULT = "default"
    IN_MEMORY = "in-memory"
    PARALLEL = "parallel"


@dataclass(frozen=True)
class Tuner:
    """
    Execution strategy for one operation.

    Attributes:
        strategy: How the runtime should schedule per-element and per-group work
        n_jobs: Worker count for PARALLEL (joblib semantics, -1 = all cores)
        prefer: joblib backend preference, "threads" or "processes"
        reducers: Opaque partition count hint for distributed runtimes
    """

    strategy: Strategy = Strategy.DEFAULT
    n_jobs: int = -1
    prefer: str = "threads"
    reducers: int | None = None

    def __post_init__(self) -> None:
        if self.n_jobs == 0:
            raise ValueError("n_jobs must be non-zero")
        if self.prefer not in ("threads", "processes"):
            raise ValueError(f"prefer must be 'threads' or 'processes', got {self.prefer!r}")
        if self.reducers is not None and self.reducers <= 0:
            raise ValueError(f"reducers must be positive, got {self.reducers}")

    @property
    def is_parallel(self) -> bool:
        return self.strategy is Strategy.PARALLEL and self.n_jobs != 1

    @classmethod
    def parallel(cls, n_jobs: int = -1, prefer: str = "threads") -> Tuner:
        return cls(Strategy.PARALLEL, n_jobs=n_jobs, prefer=prefer)


DEFAULT_TUNER = Tuner()
