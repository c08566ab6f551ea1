"""
Collective operations between workers.

A Collector is the only channel through which workers talk to each other:
a barrier, the merge of every worker's band of the next field into all
replicas, and a broadcast used once at startup. Workers in one process use
ThreadCollector; MPI ranks use heatgrid.mpi_comm.MpiCollector.
"""
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

import numpy as np

from heatgrid.partition import RowRange


class Collector(ABC):
    """Collective operations seen from one worker"""

    rank: int
    size: int

    @abstractmethod
    def barrier(self) -> None:
        """Block until every worker has reached the barrier"""

    @abstractmethod
    def synchronize_and_merge(self, next_grid: np.ndarray, band: RowRange) -> None:
        """
        Contribute this worker's band of next_grid and receive everyone else's.

        Collective: returns only after all workers have contributed. Afterwards
        every worker's next_grid is identical on all interior rows, each row
        holding the values computed by the worker that owns it.
        """

    @abstractmethod
    def broadcast(self, obj: Any, root: int = 0) -> Any:
        """Return root's obj on every worker"""


class ThreadGroup:
    """
    Shared state for a fixed set of worker threads in one process.

    Each worker keeps its private GridState; the group only holds the
    exchange board where bands are deposited during a merge.
    """
    def __init__(self, size: int, timeout: Optional[float] = None):
        if size < 1:
            raise ValueError(f"worker count must be at least 1, got {size}")
        self.size = size
        self._barrier = threading.Barrier(size, timeout=timeout)
        self._board: List[Optional[Tuple[RowRange, np.ndarray]]] = [None] * size
        self._mailbox: Any = None

    def collector(self, rank: int) -> "ThreadCollector":
        if not 0 <= rank < self.size:
            raise ValueError(f"rank {rank} out of range for {self.size} workers")
        return ThreadCollector(self, rank)

    def abort(self) -> None:
        """Break the barrier so that waiting workers raise instead of hanging"""
        self._barrier.abort()


class ThreadCollector(Collector):
    def __init__(self, group: ThreadGroup, rank: int):
        self.group = group
        self.rank = rank
        self.size = group.size

    def barrier(self) -> None:
        self.group._barrier.wait()

    def synchronize_and_merge(self, next_grid: np.ndarray, band: RowRange) -> None:
        board = self.group._board
        board[self.rank] = (band, next_grid[band.rows].copy())
        self.barrier()

        for rank, entry in enumerate(board):
            if rank == self.rank:
                continue
            other, rows = entry
            next_grid[other.rows] = rows

        # Nobody deposits again until everyone has read the board
        self.barrier()

    def broadcast(self, obj: Any, root: int = 0) -> Any:
        if self.rank == root:
            self.group._mailbox = obj
        self.barrier()
        value = self.group._mailbox
        self.barrier()
        return value
