"""
Per-step consumers of the current field and the text dump.

Only the coordinator worker is handed a sink; the other workers never see one.
"""
import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO

import numpy as np


class GridSink(ABC):
    """Consumer of the current field, called once per step"""

    @abstractmethod
    def show(self, grid: np.ndarray, step: int) -> None:
        ...

    def finish(self) -> None:
        """Called once after the run has ended"""


def format_grid(grid: np.ndarray, headers: bool = False, precision: int = 1) -> str:
    """Text dump of a grid, optionally with row/column indices"""
    lines = []
    if headers:
        lines.append("   " + "".join(f"{j:<4d}" for j in range(grid.shape[1])))
    for i, row in enumerate(grid):
        values = "".join(f"{value:.{precision}f} " for value in row)
        lines.append(f"{i:<4d}{values}" if headers else values.rstrip())
    return "\n".join(lines)


class TextDump(GridSink):
    """Print the grid every `every` steps (debugging aid)"""
    def __init__(self, every: int = 1, headers: bool = False, precision: int = 1,
                 stream: Optional[TextIO] = None):
        if every < 1:
            raise ValueError(f"dump interval must be at least 1, got {every}")
        self.every = every
        self.headers = headers
        self.precision = precision
        self.stream = stream if stream else sys.stdout
        self._last = None

    def show(self, grid: np.ndarray, step: int) -> None:
        self._last = (grid, step)
        if step % self.every == 0:
            self._dump(grid, step)

    def finish(self) -> None:
        if self._last is not None and self._last[1] % self.every != 0:
            self._dump(*self._last)

    def _dump(self, grid: np.ndarray, step: int) -> None:
        print(f"STEP {step}", file=self.stream)
        print(format_grid(grid, headers=self.headers, precision=self.precision), file=self.stream)
