"""
Integrator: advances the swarm by one time step.

The force law is stylized, not physical. Per pair (i, j):

    d      = p_j - p_i
    distSq = |d|² + softening²              (never below softening²)
    F      = G·m_i·m_j / distSq
    stress = sin(dx·0.01)·cos(dy·0.01) + tan(dz·0.001)
    f      = (d / |d|_soft)·F + stress·k     (k added to every axis)

f is applied to i and -f to j, so every pair contributes zero net momentum.
The stress term exists to burn transcendental-function cycles per
interaction; it is the "stress" in stress benchmark.

Above `stride_threshold` bodies the inner loop visits only every s-th
partner (s = ceil(n / stride_target_divisor)), which keeps per-frame work
roughly bounded as the population keeps growing.

Bodies are processed in index order and each body is integrated right after
its own row of interactions, so rows for later bodies see the already
advanced positions of earlier ones. The interactions of a single row only
read positions, so each row is evaluated as one vectorized pass.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from swarmbench.core.bodies import BodyStore


@dataclass
class IntegratorConfig:
    """Force-law and boundary constants for the integrator."""

    gravitational_constant: float = 0.5
    center_pull: float = 0.00001         # Velocity pull toward the origin per step
    softening_squared: float = 100.0     # Added to distSq; prevents singular forces
    stress_coefficient: float = 1e-5     # Scale of the transcendental stress term
    boundary_distance: float = 4000.0    # Soft bound per axis
    boundary_restitution: float = -0.8   # Velocity factor when out of bounds
    stride_threshold: int = 8000         # Above this population, sparsify
    stride_target_divisor: int = 4000    # stride = ceil(n / divisor)

    def __post_init__(self):
        if self.softening_squared <= 0:
            raise ValueError("softening_squared must be positive")
        if self.stride_target_divisor <= 0:
            raise ValueError("stride_target_divisor must be positive")


def compute_stride(
    n: int,
    threshold: int = 8000,
    target_divisor: int = 4000,
) -> int:
    """Inner-loop stride for a population of n bodies."""
    if n <= threshold:
        return 1
    return math.ceil(n / target_divisor)


def count_interactions(n: int, stride: int) -> int:
    """
    Number of pairs visited by one step: Σ_i |range(i+1, n, stride)|.

    This is what Integrator.step returns; it is NOT n(n-1)/2 once stride > 1.
    """
    if n < 2:
        return 0
    remaining = np.arange(n - 1, 0, -1, dtype=np.int64)
    return int(((remaining + stride - 1) // stride).sum())


def pair_forces(
    delta: np.ndarray,
    mass_i: float,
    masses_j: np.ndarray,
    config: IntegratorConfig,
) -> np.ndarray:
    """
    Force on body i from each partner j (the partner receives the negative).

    Args:
        delta: Displacements p_j - p_i, shape [k, 3]
        mass_i: Mass of body i
        masses_j: Partner masses, shape [k]
        config: Force-law constants

    Returns:
        Forces, shape [k, 3]
    """
    dist_sq = np.einsum("ij,ij->i", delta, delta) + config.softening_squared
    dist = np.sqrt(dist_sq)
    magnitude = config.gravitational_constant * mass_i * masses_j / dist_sq

    stress = (
        np.sin(delta[:, 0] * 0.01) * np.cos(delta[:, 1] * 0.01)
        + np.tan(delta[:, 2] * 0.001)
    )

    forces = delta * (magnitude / dist)[:, None]
    forces += (stress * config.stress_coefficient)[:, None]
    return forces


@dataclass
class Integrator:
    """Steps a BodyStore forward and counts the pairwise evaluations."""

    config: IntegratorConfig = field(default_factory=IntegratorConfig)
    dt: float = 0.5

    def stride_for(self, n: int) -> int:
        return compute_stride(
            n,
            threshold=self.config.stride_threshold,
            target_divisor=self.config.stride_target_divisor,
        )

    def step(self, store: "BodyStore", dt: float | None = None) -> int:
        """
        Advance every body exactly once.

        Args:
            store: Bodies to update in place
            dt: Time step (defaults to self.dt); not tied to wall-clock time

        Returns:
            Number of pairwise force evaluations performed
        """
        if dt is None:
            dt = self.dt
        cfg = self.config

        n = len(store)
        stride = self.stride_for(n)
        positions = store.positions
        velocities = store.velocities
        masses = store.masses

        evaluations = 0
        for i in range(n):
            velocities[i] -= positions[i] * cfg.center_pull

            partners = slice(i + 1, n, stride)
            delta = positions[partners] - positions[i]
            k = len(delta)
            if k:
                forces = pair_forces(delta, masses[i], masses[partners], cfg)
                velocities[i] += forces.sum(axis=0) / masses[i]
                velocities[partners] -= forces / masses[partners][:, None]
                evaluations += k

            positions[i] += velocities[i] * dt

            out_of_bounds = np.abs(positions[i]) > cfg.boundary_distance
            velocities[i, out_of_bounds] *= cfg.boundary_restitution

        return evaluations
