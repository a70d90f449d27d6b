"""
Final scoring.

    average_fps = mean of sampled fps          (0 for an empty history)
    final_score = floor(interactions / 100000 · average_fps / 60)

The score rewards both raw work (pairwise evaluations performed) and the
smoothness it was delivered at, normalized to a 60 fps display.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from swarmbench.core.telemetry import HistorySample

INTERACTIONS_PER_POINT = 100000
REFERENCE_FPS = 60.0


def average_fps(history: Sequence["HistorySample"]) -> float:
    """Mean fps of the history; 0.0 when no sample was recorded."""
    if not history:
        return 0.0
    return sum(sample.fps for sample in history) / len(history)


def final_score(total_interactions: int, avg_fps: float) -> int:
    """Score for a run with the given work and average frame rate."""
    return math.floor((total_interactions / INTERACTIONS_PER_POINT) * (avg_fps / REFERENCE_FPS))


@dataclass(frozen=True)
class BenchmarkResult:
    """Frozen outcome of a finished run."""

    final_score: int
    peak_population: int
    average_fps: float
    total_interaction_count: int
    history: tuple["HistorySample", ...]

    @property
    def rounded_average_fps(self) -> int:
        return int(round(self.average_fps))

    @property
    def crunch_power_millions(self) -> float:
        """Total pairwise evaluations, in millions."""
        return self.total_interaction_count / 1e6

    def to_dict(self) -> dict:
        return {
            "final_score": self.final_score,
            "peak_population": self.peak_population,
            "average_fps": self.average_fps,
            "total_interaction_count": self.total_interaction_count,
            "history": [
                {"time": s.elapsed_seconds, "fps": s.fps, "particles": s.population}
                for s in self.history
            ],
        }


def score_run(
    history: Sequence["HistorySample"],
    total_interactions: int,
    population: int,
) -> BenchmarkResult:
    """Derive all final accumulators from a run's raw data."""
    avg = average_fps(history)
    return BenchmarkResult(
        final_score=final_score(total_interactions, avg),
        peak_population=population,
        average_fps=avg,
        total_interaction_count=total_interactions,
        history=tuple(history),
    )
