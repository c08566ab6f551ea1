"""
Row-band domain decomposition.
"""
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class RowRange:
    """Half-open band of grid rows [start, stop)"""
    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start

    @property
    def rows(self) -> slice:
        return slice(self.start, self.stop)


def compute_range(grid_size: int, worker_count: int, worker_index: int) -> RowRange:
    """
    Split grid_size rows into contiguous bands, one per worker.

    The first (grid_size % worker_count) workers get one extra row.
    """
    if worker_count < 1:
        raise ValueError(f"worker count must be at least 1, got {worker_count}")
    if not 0 <= worker_index < worker_count:
        raise ValueError(f"worker index {worker_index} out of range for {worker_count} workers")

    chunk_size = grid_size // worker_count
    remainder = grid_size % worker_count

    if worker_index < remainder:
        start = worker_index * (chunk_size + 1)
        return RowRange(start, start + chunk_size + 1)

    start = worker_index * chunk_size + remainder
    return RowRange(start, start + chunk_size)


def interior_range(grid_size: int, worker_count: int, worker_index: int) -> RowRange:
    """
    Band of interior rows computed by a worker.

    Rows 0 and grid_size - 1 are walls and belong to nobody, so the
    grid_size - 2 interior rows are split and shifted down by one.
    """
    if grid_size < 3:
        raise ValueError(f"grid size must be at least 3, got {grid_size}")
    interior = grid_size - 2
    if worker_count > interior:
        raise ValueError(
            f"{worker_count} workers for {interior} interior rows would leave a worker without rows"
        )

    band = compute_range(interior, worker_count, worker_index)
    return RowRange(band.start + 1, band.stop + 1)


def all_interior_ranges(grid_size: int, worker_count: int) -> List[RowRange]:
    """Every worker's interior band, in rank order"""
    return [interior_range(grid_size, worker_count, index) for index in range(worker_count)]
