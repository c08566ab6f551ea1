"""
Explicit 5-point stencil update for one worker's band of rows.

Forward Euler discretization of the 2D diffusion equation:

    next[i,j] = cur[i,j] + K * (cur[i+1,j] + cur[i-1,j] + cur[i,j+1] + cur[i,j-1] - 4*cur[i,j])

The scheme is only stable for K <= 0.25.
"""
import numpy as np

from heatgrid.config import K, K_MAX
from heatgrid.partition import RowRange


def compute_band(current: np.ndarray, next_grid: np.ndarray, band: RowRange,
                 k: float = K, halo: bool = True) -> None:
    """
    Apply the stencil to the interior cells of a band of rows.

    Reads only from `current` and writes only to `next_grid`. Values are not
    clamped, transient overshoot is kept as computed.

    Args:
        current: Field at the current step
        next_grid: Field receiving the update (modified in place)
        band: Rows owned by this worker
        k: Diffusion coefficient
        halo: Also recompute the row just above the band when it is interior
    """
    if k > K_MAX:
        raise ValueError(f"k = {k} exceeds the stability limit {K_MAX}")

    n = current.shape[0]
    if band.start < 1 or band.stop > n - 1 or len(band) < 1:
        raise ValueError(f"rows [{band.start}, {band.stop}) are not interior rows of a {n}x{n} grid")

    lo = max(band.start - 1, 1) if halo else band.start
    hi = band.stop

    center = current[lo:hi, 1:-1]
    south = current[lo + 1:hi + 1, 1:-1]
    north = current[lo - 1:hi - 1, 1:-1]
    east = current[lo:hi, 2:]
    west = current[lo:hi, :-2]

    next_grid[lo:hi, 1:-1] = center + k * (south + north + east + west - 4 * center)
