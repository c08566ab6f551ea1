"""
Simulation parameters and startup validation.
"""
import math
from dataclasses import dataclass
from typing import Optional

# Temperatures
COLD = 0.0
AMBIENT = 0.5
HOT = 1.0

# Diffusion coefficient of the explicit update (stable for K <= 0.25)
K = 0.25
K_MAX = 0.25

# Default room
GRID_SIZE = 300
HEATER_COUNT = 2
HEATER_SIZE = 50
MAX_ITERATIONS = 10000
PROGRESS_EVERY = 100

# Worker that owns the display
COORDINATOR_RANK = 0


class ConfigError(ValueError):
    """Invalid startup configuration."""


def parse_threshold(text: Optional[str]) -> float:
    """Parse the convergence threshold, which must be a positive real."""
    if text is None or not str(text).strip():
        raise ConfigError("a convergence threshold is required")
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise ConfigError(f"threshold {text!r} is not a number") from None
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigError(f"threshold must be a positive real number, got {text!r}")
    return value


@dataclass
class SimulationConfig:
    """Parameters shared by every worker of a run"""
    threshold: float
    grid_size: int = GRID_SIZE
    heater_count: int = HEATER_COUNT
    heater_size: int = HEATER_SIZE
    max_steps: int = MAX_ITERATIONS
    seed: Optional[int] = None
    k: float = K
    progress_every: int = PROGRESS_EVERY

    def validate(self) -> "SimulationConfig":
        if not math.isfinite(self.threshold) or self.threshold <= 0.0:
            raise ConfigError(f"threshold must be positive, got {self.threshold}")
        if self.grid_size < 3:
            raise ConfigError(f"grid size must be at least 3, got {self.grid_size}")
        if self.heater_count < 0:
            raise ConfigError(f"heater count cannot be negative, got {self.heater_count}")
        if self.heater_count and not 1 <= self.heater_size <= self.grid_size - 2:
            raise ConfigError(
                f"heater size {self.heater_size} does not fit inside a "
                f"{self.grid_size}x{self.grid_size} room"
            )
        if self.max_steps < 1:
            raise ConfigError(f"max steps must be at least 1, got {self.max_steps}")
        if self.progress_every < 1:
            raise ConfigError(f"progress interval must be at least 1, got {self.progress_every}")
        if not 0.0 < self.k <= K_MAX:
            raise ConfigError(f"k must be in (0, {K_MAX}], got {self.k}")
        return self
