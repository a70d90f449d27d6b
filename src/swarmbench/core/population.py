"""
Population controller: how bodies are born and how fast the swarm grows.

Spawn policy: bodies appear in a thick disk around the origin with a roughly
tangential velocity, so the swarm starts out swirling instead of collapsing
straight in.

Ramp rule, evaluated once per sampling interval:

    fps > high_fps  → add high_amount     (headroom: ramp hard)
    fps < low_fps   → add low_amount      (danger zone: keep pushing, slowly)
    otherwise       → add default_amount

There is no ramp-down. The benchmark looks for the breaking point, so the
population only ever grows within a run.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from swarmbench.core.bodies import BodyStore

logger = logging.getLogger(__name__)


@dataclass
class SpawnConfig:
    """Distribution parameters for newly spawned bodies."""

    disk_radius: float = 400.0     # r ~ U[0, disk_radius)
    disk_height: float = 200.0     # y ~ U[-h/2, h/2)
    orbital_speed: float = 3.0     # Tangential speed in the x/z plane
    vertical_speed: float = 2.0    # vy ~ U[-s/2, s/2)
    mass_range: tuple[float, float] = (1.0, 4.0)
    size_range: tuple[float, float] = (2.0, 6.0)

    def __post_init__(self):
        if self.mass_range[0] <= 0 or self.size_range[0] <= 0:
            raise ValueError("Spawned mass and size must be strictly positive")


@dataclass
class RampConfig:
    """Three-bucket ramp thresholds (strict comparisons)."""

    high_fps: float = 45.0
    low_fps: float = 15.0
    high_amount: int = 1000
    low_amount: int = 100
    default_amount: int = 400


def spawn_bodies(
    count: int,
    rng: np.random.Generator,
    config: SpawnConfig | None = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Draw `count` bodies from the spawn distribution.

    Returns:
        (positions [k, 3], velocities [k, 3], masses [k], sizes [k])
    """
    if config is None:
        config = SpawnConfig()

    angle = rng.random(count) * 2.0 * np.pi
    radius = rng.random(count) * config.disk_radius

    positions = np.column_stack([
        np.cos(angle) * radius,
        (rng.random(count) - 0.5) * config.disk_height,
        np.sin(angle) * radius,
    ])
    velocities = np.column_stack([
        np.sin(angle) * config.orbital_speed,
        (rng.random(count) - 0.5) * config.vertical_speed,
        -np.cos(angle) * config.orbital_speed,
    ])
    masses = rng.uniform(config.mass_range[0], config.mass_range[1], count)
    sizes = rng.uniform(config.size_range[0], config.size_range[1], count)
    return positions, velocities, masses, sizes


class PopulationController:
    """
    Grows a BodyStore according to the spawn policy and ramp rule.

    Args:
        store: Store to grow
        rng: Random source (seed it for reproducible tests; default unseeded)
        spawn: Spawn distribution
        ramp: Ramp thresholds and amounts
    """

    def __init__(
        self,
        store: "BodyStore",
        rng: np.random.Generator | None = None,
        spawn: SpawnConfig | None = None,
        ramp: RampConfig | None = None,
    ):
        self.store = store
        self.rng = rng if rng is not None else np.random.default_rng()
        self.spawn = spawn if spawn is not None else SpawnConfig()
        self.ramp_config = ramp if ramp is not None else RampConfig()

    @property
    def population(self) -> int:
        return len(self.store)

    def add_bodies(self, count: int, spawn: SpawnConfig | None = None) -> int:
        """
        Append `count` freshly spawned bodies.

        Returns:
            Population after the append
        """
        if count < 0:
            raise ValueError(f"Cannot add a negative number of bodies: {count}")
        if count == 0:
            return len(self.store)
        batch = spawn_bodies(count, self.rng, spawn if spawn is not None else self.spawn)
        return self.store.add(*batch)

    def ramp_decision(self, measured_fps: float) -> int:
        """Bodies to add for the next interval given the measured fps."""
        cfg = self.ramp_config
        if measured_fps > cfg.high_fps:
            return cfg.high_amount
        if measured_fps < cfg.low_fps:
            return cfg.low_amount
        return cfg.default_amount

    def ramp(self, measured_fps: float) -> int:
        """Apply the ramp decision. Returns the number of bodies added."""
        amount = self.ramp_decision(measured_fps)
        population = self.add_bodies(amount)
        logger.debug("Ramp at %.1f fps: +%d bodies (population %d)", measured_fps, amount, population)
        return amount
