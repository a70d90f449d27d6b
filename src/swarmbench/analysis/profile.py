"""
Post-run analysis of a benchmark's performance profile.

The run controller only needs the mean fps for scoring. This module answers
the question the benchmark is really asking: at what population does this
host stop keeping up?

A straight line is fitted to fps against population over the recorded
history:

    fps ≈ slope · population + intercept

and solved for the population at which it crosses a target frame rate
(30 fps by default). Frame rate does not fall linearly with an O(n²) load,
so treat the estimate as a rough figure for comparing hosts, not a
prediction.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING

import numpy as np
from scipy import stats

if TYPE_CHECKING:
    from swarmbench.core.telemetry import HistorySample


@dataclass
class ProfileSummary:
    """Summary statistics of a benchmark history."""

    n_samples: int
    duration_seconds: float
    peak_population: int
    min_fps: float
    max_fps: float
    mean_fps: float

    # Linear fit of fps against population (None when not computable)
    slope: float | None
    intercept: float | None
    r_squared: float | None

    target_fps: float
    breaking_point: float | None   # Population at which the fit hits target_fps


def history_arrays(history: Sequence["HistorySample"]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split a history into (elapsed_seconds, fps, population) arrays."""
    times = np.array([s.elapsed_seconds for s in history], dtype=np.float64)
    fps = np.array([s.fps for s in history], dtype=np.float64)
    population = np.array([s.population for s in history], dtype=np.float64)
    return times, fps, population


def estimate_breaking_point(
    slope: float | None,
    intercept: float | None,
    target_fps: float,
) -> float | None:
    """Population at which fps = slope·p + intercept reaches target_fps."""
    if slope is None or intercept is None or slope >= 0:
        return None
    population = (target_fps - intercept) / slope
    if population < 0:
        return None
    return float(population)


def summarize_profile(
    history: Sequence["HistorySample"],
    target_fps: float = 30.0,
) -> ProfileSummary:
    """
    Summarize a benchmark history.

    Args:
        history: Ordered samples from a run
        target_fps: Frame rate that counts as "keeping up"

    Returns:
        ProfileSummary; fit fields are None with fewer than two distinct
        populations in the history
    """
    if not history:
        return ProfileSummary(
            n_samples=0,
            duration_seconds=0.0,
            peak_population=0,
            min_fps=0.0,
            max_fps=0.0,
            mean_fps=0.0,
            slope=None,
            intercept=None,
            r_squared=None,
            target_fps=target_fps,
            breaking_point=None,
        )

    times, fps, population = history_arrays(history)

    slope = intercept = r_squared = None
    if len(np.unique(population)) >= 2:
        fit_slope, fit_intercept, r_value, _, _ = stats.linregress(population, fps)
        slope = float(fit_slope)
        intercept = float(fit_intercept)
        r_squared = float(r_value ** 2)

    return ProfileSummary(
        n_samples=len(history),
        duration_seconds=float(times[-1]),
        peak_population=int(population.max()),
        min_fps=float(fps.min()),
        max_fps=float(fps.max()),
        mean_fps=float(fps.mean()),
        slope=slope,
        intercept=intercept,
        r_squared=r_squared,
        target_fps=target_fps,
        breaking_point=estimate_breaking_point(slope, intercept, target_fps),
    )
