"""
Lock-step distributed heat diffusion solver.

Each worker owns a private GridState covering the whole room and computes
only its own band of interior rows. Every step runs the same phases on all
workers:

    barrier -> show -> compute band -> merge -> barrier
            -> walls + heaters -> barrier -> stability check -> promote

No worker enters a phase before all workers have finished the previous one.
"""
import logging
import threading
import time
from typing import List, Optional

import numpy as np

from heatgrid.boundary import apply_walls, place_heaters, reapply_heaters
from heatgrid.comm import Collector, ThreadGroup
from heatgrid.config import COORDINATOR_RANK, SimulationConfig
from heatgrid.convergence import ConvergenceResult, is_stable
from heatgrid.grid import GridState
from heatgrid.partition import interior_range
from heatgrid.sink import GridSink
from heatgrid.stencil import compute_band

logger = logging.getLogger(__name__)


class HeatSolver:
    """
    One worker of the simulation.

    Args:
        config: Run parameters, identical on every worker
        collector: Collective operations shared with the other workers
        sink: Rendering sink; only the coordinator worker is given one
    """
    def __init__(self, config: SimulationConfig, collector: Collector,
                 sink: Optional[GridSink] = None):
        self.config = config.validate()
        self.collector = collector
        self.sink = sink
        self.band = interior_range(config.grid_size, collector.size, collector.rank)
        self.reports_progress = collector.rank == COORDINATOR_RANK
        self.result: Optional[ConvergenceResult] = None
        self.elapsed = 0.0

        self.state = GridState.create(config.grid_size)

        # Every worker proposes a seed, the coordinator's wins
        seed = config.seed
        if seed is None:
            seed = np.random.SeedSequence().entropy
        self.seed = collector.broadcast(seed, root=COORDINATOR_RANK)

        rng = np.random.default_rng(self.seed)
        self.state.heaters = place_heaters(
            self.state.current, config.heater_count, config.heater_size, rng
        )
        reapply_heaters(self.state.next, self.state.heaters)

        logger.debug("Worker %d/%d owns rows [%d, %d)",
                     collector.rank, collector.size, self.band.start, self.band.stop)

    def step(self) -> bool:
        """Advance one synchronized step; True once the field is stable"""
        state = self.state

        self.collector.barrier()
        if self.sink is not None:
            self.sink.show(state.current, state.step)

        compute_band(state.current, state.next, self.band, k=self.config.k)
        self.collector.synchronize_and_merge(state.next, self.band)
        self.collector.barrier()

        apply_walls(state.next)
        reapply_heaters(state.next, state.heaters)
        self.collector.barrier()

        stable = is_stable(state.current, state.next, self.config.threshold)
        state.promote()
        return stable

    def run(self) -> ConvergenceResult:
        """Step until stable or until config.max_steps steps have run"""
        start_time = time.perf_counter()

        result = None
        while self.state.step < self.config.max_steps:
            if self.step():
                result = ConvergenceResult.converged_at(self.state.step)
                break
            if self.reports_progress and self.state.step % self.config.progress_every == 0:
                logger.info("Step %d / %d", self.state.step, self.config.max_steps)
        if result is None:
            result = ConvergenceResult.exceeded(self.state.step)
        logger.debug("Worker %d finished: %s after %d steps",
                     self.collector.rank, result.status.value, result.steps)

        if self.sink is not None:
            self.sink.show(self.state.current, self.state.step)

        self.elapsed = time.perf_counter() - start_time
        self.result = result
        return result


def run_threaded(config: SimulationConfig, workers: int,
                 sink: Optional[GridSink] = None,
                 timeout: Optional[float] = None) -> List[HeatSolver]:
    """
    Run the simulation with `workers` threads in this process.

    Worker 0 runs in the calling thread and is the only one given the sink,
    so a GUI sink stays on the main thread. The first worker failure is
    re-raised here after the barrier has been broken for the others.

    Returns:
        Every worker's solver, in rank order
    """
    group = ThreadGroup(workers, timeout=timeout)
    solvers: List[Optional[HeatSolver]] = [None] * workers
    errors: List[BaseException] = []

    def work(rank: int, worker_sink: Optional[GridSink]) -> None:
        try:
            solver = HeatSolver(config, group.collector(rank), worker_sink)
            solver.run()
            solvers[rank] = solver
        except Exception as exc:
            errors.append(exc)
            group.abort()

    threads = [
        threading.Thread(target=work, args=(rank, None), name=f"heatgrid-worker-{rank}", daemon=True)
        for rank in range(1, workers)
    ]
    for t in threads:
        t.start()
    work(COORDINATOR_RANK, sink)
    for t in threads:
        t.join()

    if errors:
        # Workers that only saw the broken barrier are not the cause
        primary = [e for e in errors if not isinstance(e, threading.BrokenBarrierError)]
        raise (primary or errors)[0]

    return solvers


def print_summary(config: SimulationConfig, result: ConvergenceResult,
                  elapsed: float, workers: int) -> None:
    """Run summary, printed by the coordinator"""
    status = "converged" if result.converged else "max steps reached"
    time_per_step = elapsed * 1000 / result.steps if result.steps else 0.0

    print("=" * 50)
    print("Heat Transfer Summary")
    print("=" * 50)
    print(f"Grid size: {config.grid_size} x {config.grid_size}")
    print(f"Workers: {workers}")
    print(f"Heaters: {config.heater_count} x {config.heater_size}")
    print(f"Threshold: {config.threshold:g}")
    print(f"Steps: {result.steps} ({status})")
    print(f"Total time: {elapsed:.3f} seconds")
    print(f"Time per step: {time_per_step:.3f} ms")
    print("=" * 50)
