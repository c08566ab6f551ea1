"""
Steady-state detection.
"""
import enum
from dataclasses import dataclass

import numpy as np


def is_stable(current: np.ndarray, next_grid: np.ndarray, threshold: float) -> bool:
    """
    True when no cell changed by more than threshold between the two fields.

    Must be called on fully merged fields, so that every worker reaches the
    same answer without further communication.
    """
    return not bool(np.any(np.abs(current - next_grid) > threshold))


class Status(enum.Enum):
    CONVERGED = "converged"
    MAX_STEPS_EXCEEDED = "max_steps_exceeded"


@dataclass(frozen=True)
class ConvergenceResult:
    """Outcome of a run: converged after `steps` steps, or stopped at the cap"""
    status: Status
    steps: int

    @classmethod
    def converged_at(cls, steps: int) -> "ConvergenceResult":
        return cls(Status.CONVERGED, steps)

    @classmethod
    def exceeded(cls, steps: int) -> "ConvergenceResult":
        return cls(Status.MAX_STEPS_EXCEEDED, steps)

    @property
    def converged(self) -> bool:
        return self.status is Status.CONVERGED
