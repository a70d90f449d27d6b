"""
Performance profile chart for a finished benchmark.

One axes, two series over elapsed time:
- fps as a red line (left axis, fixed 0..65 so runs are comparable)
- population as a translucent lime fill (right axis)

Dashed reference lines mark 30 and 60 fps.
"""

from __future__ import annotations
from pathlib import Path
from typing import Sequence, TYPE_CHECKING

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from swarmbench.analysis.profile import history_arrays

if TYPE_CHECKING:
    from swarmbench.core.telemetry import HistorySample
    from swarmbench.core.scoring import BenchmarkResult


FPS_COLOR = "#ef4444"
LOAD_COLOR = (132 / 255, 204 / 255, 22 / 255)
GRID_COLOR = "#1e293b"
MAX_FPS_AXIS = 65.0
REFERENCE_FPS_LINES = (30.0, 60.0)


def plot_performance_profile(
    history: Sequence["HistorySample"],
    title: str = "Performance Profile",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (9, 3.5),
) -> tuple[Figure, Axes]:
    """
    Plot fps and population against elapsed time.

    Args:
        history: Ordered samples; at least two are needed for a meaningful plot
        title: Axes title
        ax: Existing axes (creates new if None)

    Returns:
        (fig, ax) tuple; ax is the fps axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    ax.set_title(title)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel("FPS", color=FPS_COLOR)
    ax.set_ylim(0, MAX_FPS_AXIS)

    for level in REFERENCE_FPS_LINES:
        ax.axhline(y=level, color=GRID_COLOR, linestyle="--", linewidth=1, alpha=0.6)

    if len(history) < 2:
        ax.text(
            0.5, 0.5, "Insufficient Data",
            transform=ax.transAxes, ha="center", va="center", color="gray",
        )
        return fig, ax

    times, fps, population = history_arrays(history)

    load_ax = ax.twinx()
    load_ax.fill_between(times, 0, population, color=LOAD_COLOR, alpha=0.3, linewidth=0)
    load_ax.set_ylim(0, population.max() * 1.05)
    load_ax.set_ylabel("Bodies", color=LOAD_COLOR)

    # Keep the fps line above the fill
    ax.set_zorder(load_ax.get_zorder() + 1)
    ax.patch.set_visible(False)

    ax.plot(times, fps, color=FPS_COLOR, linewidth=2, solid_capstyle="round", label="FPS")
    ax.set_xlim(0, times[-1])

    return fig, ax


def plot_result(result: "BenchmarkResult", figsize: tuple[float, float] = (9, 4)) -> Figure:
    """Profile chart titled with the headline numbers of a result."""
    fig, _ = plot_performance_profile(
        result.history,
        title=(
            f"Score {result.final_score:,} · peak {result.peak_population:,} bodies · "
            f"avg {result.rounded_average_fps} FPS · {result.crunch_power_millions:.1f}M interactions"
        ),
        figsize=figsize,
    )
    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
