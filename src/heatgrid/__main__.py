#!/usr/bin/env python3
"""
2D heat transfer to steady state.

Example usage:
    # 4 MPI ranks, stop when no cell changes by more than 0.001
    mpirun -n 4 python -m heatgrid 0.001

    # 4 threads in one process, no window
    python -m heatgrid 0.001 --backend threads --workers 4 --no-display
"""
import argparse
import logging
import sys
from typing import List, Optional

from heatgrid import config as defaults
from heatgrid.config import COORDINATOR_RANK, ConfigError, SimulationConfig, parse_threshold
from heatgrid.logging_config import setup_logging
from heatgrid.sink import GridSink, TextDump
from heatgrid.solver import HeatSolver, print_summary, run_threaded

logger = logging.getLogger("heatgrid")


def threshold_type(text: str) -> float:
    try:
        return parse_threshold(text)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='2D heat transfer to steady state')
    parser.add_argument('threshold', type=threshold_type,
                        help='Convergence threshold (positive real)')
    parser.add_argument('--size', type=int, default=defaults.GRID_SIZE, help='Grid size (square)')
    parser.add_argument('--heaters', type=int, default=defaults.HEATER_COUNT, help='Number of heaters')
    parser.add_argument('--heater-size', type=int, default=defaults.HEATER_SIZE, help='Heater side length')
    parser.add_argument('--max-steps', type=int, default=defaults.MAX_ITERATIONS,
                        help='Stop after this many steps if not converged')
    parser.add_argument('--seed', type=int, default=None, help='Seed for heater placement')
    parser.add_argument('--backend', choices=['mpi', 'threads'], default='mpi',
                        help='Worker transport')
    parser.add_argument('--workers', type=int, default=4, help='Worker threads (threads backend)')
    parser.add_argument('--no-display', action='store_true', help='Do not open a window')
    parser.add_argument('--dump-every', type=int, default=0,
                        help='Print the grid as text every N steps instead of drawing it')
    parser.add_argument('--dump-headers', action='store_true', help='Row/column indices in text dumps')
    parser.add_argument('--progress-every', type=int, default=defaults.PROGRESS_EVERY,
                        help='Log progress every N steps')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level')
    parser.add_argument('--log-file', default=None, help='Also write the log to this file')

    args = parser.parse_args(argv)

    args.config = SimulationConfig(
        threshold=args.threshold,
        grid_size=args.size,
        heater_count=args.heaters,
        heater_size=args.heater_size,
        max_steps=args.max_steps,
        seed=args.seed,
        progress_every=args.progress_every,
    )
    try:
        args.config.validate()
    except ConfigError as e:
        parser.error(str(e))
    if args.workers < 1:
        parser.error('--workers must be at least 1')
    if args.backend == 'threads' and args.workers > args.size - 2:
        parser.error(f'--workers {args.workers} leaves a worker without rows '
                     f'in a grid with {args.size - 2} interior rows')
    if args.dump_every < 0:
        parser.error('--dump-every cannot be negative')

    return args


def report(result) -> None:
    if result.converged:
        logger.info("Steady state reached after %d steps", result.steps)
    else:
        logger.warning("No steady state after %d steps", result.steps)


def make_sink(args: argparse.Namespace) -> Optional[GridSink]:
    if args.dump_every:
        return TextDump(every=args.dump_every, headers=args.dump_headers)
    if args.no_display:
        return None

    from heatgrid.display import GridDisplay
    return GridDisplay()


def run_mpi(args: argparse.Namespace) -> int:
    from heatgrid.mpi_comm import MpiCollector

    collector = MpiCollector()
    coordinator = collector.rank == COORDINATOR_RANK

    level = getattr(logging, args.log_level)
    if coordinator:
        setup_logging(level, args.log_file)
    else:
        setup_logging(max(level, logging.WARNING))

    sink = make_sink(args) if coordinator else None
    solver = HeatSolver(args.config, collector, sink)
    result = solver.run()

    if coordinator:
        report(result)
        print_summary(args.config, result, solver.elapsed, collector.size)
    if sink is not None:
        sink.finish()
    return 0


def run_threads(args: argparse.Namespace) -> int:
    setup_logging(getattr(logging, args.log_level), args.log_file)

    sink = make_sink(args)
    solvers = run_threaded(args.config, args.workers, sink)
    coordinator = solvers[COORDINATOR_RANK]

    report(coordinator.result)
    print_summary(args.config, coordinator.result, coordinator.elapsed, args.workers)
    if sink is not None:
        sink.finish()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main function - parse arguments and run the simulation"""
    args = parse_args(argv)
    if args.backend == 'threads':
        return run_threads(args)
    return run_mpi(args)


if __name__ == "__main__":
    sys.exit(main())
