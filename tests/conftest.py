"""
Pytest configuration and shared fixtures.
"""

import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np


class ManualClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class SequenceClock:
    """Clock that returns a fixed sequence of readings, one per call."""

    def __init__(self, readings):
        self.readings = list(readings)
        self.calls = 0

    def __call__(self) -> float:
        reading = self.readings[self.calls]
        self.calls += 1
        return reading


class FakeSurface:
    """Render surface that records what it was handed, without keeping the bodies."""

    def __init__(self, ready: bool = True, width: int = 800, height: int = 600):
        self.ready = ready
        self.width = width
        self.height = height
        self.populations = []
        self.stress_levels = []
        self.writeable_flags = []

    @property
    def is_ready(self) -> bool:
        return self.ready

    def draw(self, frame) -> None:
        self.populations.append(len(frame.bodies))
        self.stress_levels.append(frame.stress_level)
        self.writeable_flags.append(frame.bodies.positions.flags.writeable)


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def small_config():
    """Short run with a tiny swarm, cheap enough to tick many times."""
    from swarmbench.core import BenchmarkConfig
    return BenchmarkConfig(
        duration_ms=1000,
        sampling_interval_ms=500,
        initial_population=10,
    )


@pytest.fixture
def sequence_clock():
    """Factory for clocks that replay a fixed list of readings."""
    return SequenceClock


@pytest.fixture
def make_surface():
    """Factory for fake render surfaces."""
    return FakeSurface
