"""
Body store: the swarm the benchmark simulates.

Bodies are kept as parallel numpy arrays rather than one object per body:
- positions  [n, 3]
- velocities [n, 3]
- masses     [n]
- sizes      [n]

The arrays are over-allocated and grown geometrically, so appending a ramp
batch every sampling interval does not reallocate the whole swarm each time.
Only the first `len(store)` rows are live.

The renderer never receives the store itself, only a BodyView: non-writeable
numpy views onto the live rows, valid for the current frame.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class Vector3:
    """Three-component value type."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, values) -> Vector3:
        return cls(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class Body:
    """Snapshot of one body. The live state is owned by BodyStore."""

    position: Vector3
    velocity: Vector3
    mass: float
    size: float


@dataclass(frozen=True, eq=False)
class BodyView:
    """
    Read-only, frame-scoped view of the store.

    The arrays share memory with the store (no copy) but are flagged
    non-writeable. They are grown and mutated in place on the next tick, so
    consumers must not keep them past the frame they were handed.
    """

    positions: np.ndarray
    velocities: np.ndarray
    masses: np.ndarray
    sizes: np.ndarray

    def __len__(self) -> int:
        return len(self.masses)

    @property
    def headings(self) -> np.ndarray:
        """Heading angle of each body in the x/y plane (radians)."""
        return np.arctan2(self.velocities[:, 1], self.velocities[:, 0])


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class BodyStore:
    """
    Ordered, index-addressable, growable collection of bodies.

    Mass and size are fixed when a body is added. Position and velocity are
    mutated in place by the integrator through the `positions` and
    `velocities` properties.
    """

    def __init__(self, capacity: int = 1024):
        capacity = max(1, int(capacity))
        self._positions = np.zeros((capacity, 3), dtype=np.float64)
        self._velocities = np.zeros((capacity, 3), dtype=np.float64)
        self._masses = np.zeros(capacity, dtype=np.float64)
        self._sizes = np.zeros(capacity, dtype=np.float64)
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Body]:
        for i in range(self._count):
            yield self.body(i)

    @property
    def capacity(self) -> int:
        return len(self._masses)

    @property
    def positions(self) -> np.ndarray:
        """Live positions [n, 3] (writable view)."""
        return self._positions[: self._count]

    @property
    def velocities(self) -> np.ndarray:
        """Live velocities [n, 3] (writable view)."""
        return self._velocities[: self._count]

    @property
    def masses(self) -> np.ndarray:
        return _read_only(self._masses[: self._count])

    @property
    def sizes(self) -> np.ndarray:
        return _read_only(self._sizes[: self._count])

    def add(
        self,
        positions: np.ndarray,
        velocities: np.ndarray,
        masses: np.ndarray,
        sizes: np.ndarray,
    ) -> int:
        """
        Append a batch of bodies.

        Args:
            positions, velocities: arrays of shape [k, 3]
            masses, sizes: arrays of shape [k], strictly positive

        Returns:
            New population
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 3)
        masses = np.asarray(masses, dtype=np.float64).reshape(-1)
        sizes = np.asarray(sizes, dtype=np.float64).reshape(-1)

        k = len(masses)
        if not (len(positions) == len(velocities) == len(sizes) == k):
            raise ValueError("Body batch arrays must have the same length")
        if np.any(masses <= 0) or np.any(sizes <= 0):
            raise ValueError("Body mass and size must be strictly positive")
        if not (np.all(np.isfinite(positions)) and np.all(np.isfinite(velocities))):
            raise ValueError("Body position and velocity must be finite")

        self._reserve(self._count + k)
        end = self._count + k
        self._positions[self._count:end] = positions
        self._velocities[self._count:end] = velocities
        self._masses[self._count:end] = masses
        self._sizes[self._count:end] = sizes
        self._count = end
        return self._count

    def add_body(self, body: Body) -> int:
        """Append a single body."""
        return self.add(
            body.position.as_array()[None, :],
            body.velocity.as_array()[None, :],
            np.array([body.mass]),
            np.array([body.size]),
        )

    def body(self, index: int) -> Body:
        """Snapshot of the body at `index`."""
        if index < 0:
            index += self._count
        if not 0 <= index < self._count:
            raise IndexError(f"Body index {index} out of range for {self._count} bodies")
        return Body(
            position=Vector3.from_array(self._positions[index]),
            velocity=Vector3.from_array(self._velocities[index]),
            mass=float(self._masses[index]),
            size=float(self._sizes[index]),
        )

    def view(self) -> BodyView:
        """Read-only view of the live bodies for the current frame."""
        return BodyView(
            positions=_read_only(self.positions),
            velocities=_read_only(self.velocities),
            masses=self.masses,
            sizes=self.sizes,
        )

    def clear(self) -> None:
        """Drop all bodies, keeping the allocated capacity."""
        self._count = 0

    def total_momentum(self) -> np.ndarray:
        """Sum of m·v over all bodies."""
        return (self.masses[:, None] * self.velocities).sum(axis=0)

    def _reserve(self, needed: int) -> None:
        capacity = self.capacity
        if needed <= capacity:
            return
        while capacity < needed:
            capacity *= 2

        def grow(array: np.ndarray) -> np.ndarray:
            shape = (capacity,) + array.shape[1:]
            grown = np.zeros(shape, dtype=array.dtype)
            grown[: self._count] = array[: self._count]
            return grown

        self._positions = grow(self._positions)
        self._velocities = grow(self._velocities)
        self._masses = grow(self._masses)
        self._sizes = grow(self._sizes)
