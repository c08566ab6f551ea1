"""
Fixed walls and persistent heater sources.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np

from heatgrid.config import COLD, HOT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Heater:
    """Square hot region, given by its top-left cell and side length"""
    row: int
    col: int
    size: int

    @property
    def footprint(self) -> Tuple[slice, slice]:
        return (slice(self.row, self.row + self.size),
                slice(self.col, self.col + self.size))

    @property
    def cells(self) -> int:
        return self.size * self.size


def apply_walls(grid: np.ndarray, value: float = COLD) -> None:
    """Set the four edge rows/columns to the wall temperature (in place)."""
    grid[0, :] = value   # top
    grid[-1, :] = value  # bottom
    grid[:, 0] = value   # left
    grid[:, -1] = value  # right


def place_heaters(grid: np.ndarray, heater_count: int, heater_size: int,
                  rng: np.random.Generator, value: float = HOT) -> List[Heater]:
    """
    Drop heaters at random positions inside the walls and heat them.

    Top-left corners are drawn from [1, N - heater_size - 1] on both axes so
    the whole footprint stays inside the walls. Heaters may overlap.

    Args:
        grid: Field to heat (modified in place)
        heater_count: Number of heaters to place
        heater_size: Side length of every heater
        rng: Random generator; workers must share its seed to agree on placement

    Returns:
        Placed heaters, in drawing order
    """
    n = grid.shape[0]
    if heater_count < 0:
        raise ValueError(f"heater count cannot be negative, got {heater_count}")
    if heater_count == 0:
        return []
    if not 1 <= heater_size <= n - 2:
        raise ValueError(f"heater size {heater_size} does not fit inside a {n}x{n} grid")

    heaters = []
    for _ in range(heater_count):
        row = int(rng.integers(1, n - heater_size))
        col = int(rng.integers(1, n - heater_size))
        heater = Heater(row=row, col=col, size=heater_size)
        grid[heater.footprint] = value
        heaters.append(heater)
        logger.debug("Heater placed at (%d, %d), size %d", row, col, heater_size)

    return heaters


def reapply_heaters(grid: np.ndarray, heaters: Iterable[Heater], value: float = HOT) -> None:
    """Force every heater footprint back to the hot value (in place)."""
    for heater in heaters:
        grid[heater.footprint] = value
