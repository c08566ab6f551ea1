"""
MPI transport for the collective operations (mpi4py).
"""
from typing import Any, Dict, List, Tuple

import numpy as np
from mpi4py import MPI

from heatgrid.comm import Collector
from heatgrid.partition import RowRange, all_interior_ranges


class MpiCollector(Collector):
    """
    Collector backed by an MPI communicator.

    The merge is a single in-place Allgatherv over the interior rows, with
    per-rank counts taken from the row partition, so uneven bands are
    exchanged exactly.
    """
    def __init__(self, comm=None):
        self.comm = comm if comm else MPI.COMM_WORLD
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()
        self._layouts: Dict[int, Tuple[List[RowRange], List[int], List[int]]] = {}

    def _layout(self, grid_size: int) -> Tuple[List[RowRange], List[int], List[int]]:
        if grid_size not in self._layouts:
            ranges = all_interior_ranges(grid_size, self.size)
            counts = [len(band) * grid_size for band in ranges]
            displs = [(band.start - 1) * grid_size for band in ranges]
            self._layouts[grid_size] = (ranges, counts, displs)
        return self._layouts[grid_size]

    def barrier(self) -> None:
        self.comm.Barrier()

    def synchronize_and_merge(self, next_grid: np.ndarray, band: RowRange) -> None:
        n = next_grid.shape[0]
        ranges, counts, displs = self._layout(n)
        if ranges[self.rank] != band:
            raise ValueError(f"rank {self.rank} owns {ranges[self.rank]}, not {band}")
        if next_grid.dtype != np.float64 or not next_grid.flags.c_contiguous:
            raise ValueError("next grid must be a C-contiguous float64 array")

        # Rows 1..n-2 of a C-ordered array form one contiguous buffer
        interior = next_grid[1:-1]
        self.comm.Allgatherv(MPI.IN_PLACE, [interior, counts, displs, MPI.DOUBLE])

    def broadcast(self, obj: Any, root: int = 0) -> Any:
        return self.comm.bcast(obj, root=root)
