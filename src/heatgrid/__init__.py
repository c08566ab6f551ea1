"""
Steady-state 2D heat diffusion computed by workers that each own a band of rows.
"""
from heatgrid.boundary import Heater, apply_walls, place_heaters, reapply_heaters
from heatgrid.comm import Collector, ThreadCollector, ThreadGroup
from heatgrid.config import ConfigError, SimulationConfig, parse_threshold
from heatgrid.convergence import ConvergenceResult, Status, is_stable
from heatgrid.grid import GridState
from heatgrid.partition import RowRange, all_interior_ranges, compute_range, interior_range
from heatgrid.solver import HeatSolver, run_threaded
from heatgrid.stencil import compute_band

__version__ = "0.1.0"

__all__ = [
    "Collector",
    "ConfigError",
    "ConvergenceResult",
    "GridState",
    "HeatSolver",
    "Heater",
    "RowRange",
    "SimulationConfig",
    "Status",
    "ThreadCollector",
    "ThreadGroup",
    "all_interior_ranges",
    "apply_walls",
    "compute_band",
    "compute_range",
    "interior_range",
    "is_stable",
    "parse_threshold",
    "place_heaters",
    "reapply_heaters",
    "run_threaded",
]
