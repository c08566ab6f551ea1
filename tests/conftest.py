import threading

import matplotlib
import pytest

matplotlib.use("Agg")

from heatgrid.comm import ThreadGroup
from heatgrid.config import SimulationConfig


def _run_workers(size, target, timeout=10.0):
    """Call target(collector) on `size` threads sharing one ThreadGroup"""
    group = ThreadGroup(size, timeout=timeout)
    results = [None] * size
    errors = []

    def work(rank):
        try:
            results[rank] = target(group.collector(rank))
        except Exception as e:
            errors.append(e)
            group.abort()

    threads = [threading.Thread(target=work, args=(rank,)) for rank in range(size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    if errors:
        raise errors[0]
    return results


@pytest.fixture
def run_workers():
    return _run_workers


@pytest.fixture
def small_config():
    return SimulationConfig(
        threshold=1e-3,
        grid_size=16,
        heater_count=2,
        heater_size=4,
        max_steps=5000,
        seed=7,
    )
