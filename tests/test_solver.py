import dataclasses
import io
import logging

import numpy as np
import pytest

from heatgrid.config import COLD, HOT
from heatgrid.sink import GridSink, TextDump
from heatgrid.solver import HeatSolver, print_summary, run_threaded


class RecordingSink(GridSink):
    def __init__(self):
        self.steps = []
        self.finished = False

    def show(self, grid, step):
        self.steps.append(step)

    def finish(self):
        self.finished = True


class FailingSink(GridSink):
    def show(self, grid, step):
        raise RuntimeError("display lost")


def test_single_worker_converges(small_config):
    (solver,) = run_threaded(small_config, 1)

    assert solver.result.converged
    assert solver.result.steps == solver.state.step
    assert 0 < solver.result.steps < small_config.max_steps


def test_workers_keep_identical_replicas(small_config):
    solvers = run_threaded(small_config, 3, timeout=30)

    reference = solvers[0].state
    for solver in solvers[1:]:
        assert solver.result == solvers[0].result
        assert solver.state.heaters == reference.heaters
        np.testing.assert_array_equal(solver.state.current, reference.current)
        np.testing.assert_array_equal(solver.state.next, reference.next)


@pytest.mark.parametrize("workers", [2, 4, 7])
def test_partitioned_run_matches_single_worker(small_config, workers):
    (single,) = run_threaded(small_config, 1)
    many = run_threaded(small_config, workers, timeout=30)[0]

    assert many.result == single.result
    np.testing.assert_array_equal(many.state.current, single.state.current)


def test_walls_and_heaters_hold_after_run(small_config):
    (solver,) = run_threaded(small_config, 2, timeout=30)[:1]
    grid = solver.state.current

    assert np.all(grid[0, :] == COLD) and np.all(grid[-1, :] == COLD)
    assert np.all(grid[:, 0] == COLD) and np.all(grid[:, -1] == COLD)
    assert len(solver.state.heaters) == 2
    for heater in solver.state.heaters:
        assert np.all(grid[heater.footprint] == HOT)


def test_tighter_threshold_never_converges_sooner(small_config):
    steps = []
    for threshold in (1e-2, 1e-3, 1e-4):
        config = dataclasses.replace(small_config, threshold=threshold)
        (solver,) = run_threaded(config, 2, timeout=30)[:1]
        assert solver.result.converged
        steps.append(solver.result.steps)

    assert steps == sorted(steps)
    assert steps[0] < steps[-1]


def test_step_cap(small_config):
    config = dataclasses.replace(small_config, threshold=1e-12, max_steps=3)
    solvers = run_threaded(config, 2, timeout=30)

    for solver in solvers:
        assert not solver.result.converged
        assert solver.result.steps == 3
        assert solver.state.step == 3


def test_workers_agree_on_random_heaters(small_config):
    config = dataclasses.replace(small_config, seed=None, max_steps=1)
    solvers = run_threaded(config, 3, timeout=30)

    assert len({solver.seed for solver in solvers}) == 1
    assert solvers[1].state.heaters == solvers[0].state.heaters == solvers[2].state.heaters


def test_only_coordinator_gets_the_sink(small_config):
    config = dataclasses.replace(small_config, max_steps=5, threshold=1e-12)
    sink = RecordingSink()

    solvers = run_threaded(config, 3, sink=sink, timeout=30)

    assert solvers[0].sink is sink
    assert all(solver.sink is None for solver in solvers[1:])
    # one frame per step plus the final field
    assert sink.steps == [0, 1, 2, 3, 4, 5]


def test_text_dump_sink(small_config):
    config = dataclasses.replace(small_config, max_steps=4, threshold=1e-12)
    out = io.StringIO()
    sink = TextDump(every=3, stream=out)

    run_threaded(config, 2, sink=sink, timeout=30)
    sink.finish()

    text = out.getvalue()
    assert "STEP 0" in text and "STEP 3" in text and "STEP 4" in text
    assert "STEP 1" not in text
    assert "1.0" in text


def test_worker_failure_is_raised(small_config):
    with pytest.raises(RuntimeError, match="display lost"):
        run_threaded(small_config, 3, sink=FailingSink(), timeout=30)


def test_too_many_workers(small_config):
    config = dataclasses.replace(small_config, grid_size=5, heater_size=2)
    with pytest.raises(ValueError):
        run_threaded(config, 4, timeout=30)


def test_step_by_step(run_workers, small_config):
    config = dataclasses.replace(small_config, threshold=1e-12)

    def target(collector):
        solver = HeatSolver(config, collector)
        before = solver.state.current.copy()
        stable = solver.step()
        return stable, before, solver.state

    results = run_workers(2, target)
    for stable, before, state in results:
        assert not stable
        assert state.step == 1
        assert not np.array_equal(before, state.current)
    np.testing.assert_array_equal(results[0][2].current, results[1][2].current)


def test_summary(capsys, small_config):
    (solver,) = run_threaded(small_config, 1)
    print_summary(small_config, solver.result, solver.elapsed, 1)

    out = capsys.readouterr().out
    assert "Grid size: 16 x 16" in out
    assert f"Steps: {solver.result.steps} (converged)" in out


def test_coordinator_logs_progress(caplog, small_config):
    config = dataclasses.replace(small_config, threshold=1e-12, max_steps=6, progress_every=2)

    with caplog.at_level(logging.INFO, logger="heatgrid"):
        run_threaded(config, 3, timeout=30)

    progress = [r.getMessage() for r in caplog.records if r.getMessage().startswith("Step ")]
    assert progress == ["Step 2 / 6", "Step 4 / 6", "Step 6 / 6"]
