import threading

import numpy as np
import pytest

from heatgrid.comm import ThreadGroup
from heatgrid.partition import interior_range


@pytest.mark.parametrize("workers", [1, 2, 3, 5])
def test_merge_gives_every_worker_the_same_grid(run_workers, workers):
    n = 13

    def target(collector):
        band = interior_range(n, collector.size, collector.rank)
        grid = np.full((n, n), -float(collector.rank))
        grid[band.rows] = collector.rank + 1
        collector.synchronize_and_merge(grid, band)
        return grid

    grids = run_workers(workers, target)

    for grid in grids[1:]:
        np.testing.assert_array_equal(grid[1:-1], grids[0][1:-1])
    for rank in range(workers):
        band = interior_range(n, workers, rank)
        assert np.all(grids[0][band.rows] == rank + 1)


def test_merge_keeps_owner_values_over_halo_copies(run_workers):
    n = 9

    def target(collector):
        band = interior_range(n, collector.size, collector.rank)
        grid = np.zeros((n, n))
        grid[band.rows] = 10 + collector.rank
        # stale copy of the previous worker's last row
        if band.start > 1:
            grid[band.start - 1] = -1.0
        collector.synchronize_and_merge(grid, band)
        return grid

    grids = run_workers(2, target)

    first = interior_range(n, 2, 0)
    for grid in grids:
        assert np.all(grid[first.stop - 1] == 10)


def test_repeated_merges_do_not_mix_steps(run_workers):
    n = 10

    def target(collector):
        band = interior_range(n, collector.size, collector.rank)
        grid = np.zeros((n, n))
        seen = []
        for step in range(20):
            grid[band.rows] = step
            collector.synchronize_and_merge(grid, band)
            seen.append(np.unique(grid[1:-1]).tolist())
        return seen

    for seen in run_workers(4, target):
        assert seen == [[float(step)] for step in range(20)]


def test_broadcast_uses_root_value(run_workers):
    values = run_workers(3, lambda collector: collector.broadcast(collector.rank * 10 + 1, root=0))
    assert values == [1, 1, 1]


def test_abort_breaks_barrier():
    group = ThreadGroup(2)
    group.abort()
    with pytest.raises(threading.BrokenBarrierError):
        group.collector(0).barrier()


def test_invalid_group():
    with pytest.raises(ValueError):
        ThreadGroup(0)
    with pytest.raises(ValueError):
        ThreadGroup(2).collector(2)
