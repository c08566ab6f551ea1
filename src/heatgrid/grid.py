"""
Replicated temperature field owned by a single worker.
"""
from dataclasses import dataclass, field
from typing import List

import numpy as np

from heatgrid.boundary import Heater, apply_walls
from heatgrid.config import AMBIENT, COLD


@dataclass
class GridState:
    """
    Current and next temperature fields plus heater metadata.

    Every worker holds a full-size copy of both fields; only the computation
    is split between workers. Replicas are kept identical by the collective
    merge performed every step.
    """
    size: int
    current: np.ndarray
    next: np.ndarray
    heaters: List[Heater] = field(default_factory=list)
    step: int = 0

    @classmethod
    def create(cls, size: int, ambient: float = AMBIENT, wall: float = COLD) -> "GridState":
        """Room at ambient temperature enclosed by cold walls"""
        if size < 3:
            raise ValueError(f"grid size must be at least 3, got {size}")

        current = np.full((size, size), ambient, dtype=np.float64)
        next_grid = np.full((size, size), ambient, dtype=np.float64)
        apply_walls(current, wall)
        apply_walls(next_grid, wall)

        return cls(size=size, current=current, next=next_grid)

    def promote(self) -> None:
        """Make the merged next field the current one and advance the step"""
        np.copyto(self.current, self.next)
        self.step += 1
