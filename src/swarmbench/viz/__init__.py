"""
Visualization utilities.

- Performance profile chart (fps + population over time)
- Headless projection surface and swarm scatter plots
"""

from swarmbench.viz.profile import (
    plot_performance_profile,
    plot_result,
    save_figure,
)

from swarmbench.viz.surface import (
    ProjectedFrame,
    ProjectionSurface,
    heat_color,
    plot_swarm,
    project_bodies,
)

__all__ = [
    "plot_performance_profile",
    "plot_result",
    "save_figure",
    "ProjectedFrame",
    "ProjectionSurface",
    "heat_color",
    "plot_swarm",
    "project_bodies",
]
