"""
Headless render surface and perspective projection.

The benchmark core only hands out a read-only body view each frame. This
module is one consumer of that handoff: it projects the swarm to screen
space the same way an interactive canvas would, and can plot a projected
frame with matplotlib.

Projection (camera 1000 units behind the origin, focal length 600):

    scale = 600 / (600 + z + 1000)
    screen = (x·scale + w/2, y·scale + h/2),  radius = size·scale

Bodies with scale < 0.05 (behind or far from the camera) and bodies more
than 100 px off screen are culled.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math
from typing import TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.collections import EllipseCollection
from matplotlib.figure import Figure

if TYPE_CHECKING:
    from swarmbench.core.bodies import BodyView
    from swarmbench.core.run import FrameHandoff


FOCAL_LENGTH = 600.0
CAMERA_DISTANCE = 1000.0
MIN_SCALE = 0.05
CULL_MARGIN = 100.0
BACKGROUND_COLOR = (2 / 255, 8 / 255, 4 / 255)


@dataclass
class ProjectedFrame:
    """Screen-space copy of the visible bodies of one frame."""

    x: np.ndarray
    y: np.ndarray
    radius: np.ndarray
    heading: np.ndarray
    width: int
    height: int
    stress_level: float
    population: int
    now_ms: float = 0.0    # Frame time, drives the high-stress pulse

    @property
    def visible(self) -> int:
        return len(self.x)


def project_bodies(bodies: "BodyView", width: int, height: int) -> tuple[np.ndarray, ...]:
    """
    Perspective-project bodies and cull the invisible ones.

    Returns:
        (x, y, radius, heading) arrays for the visible bodies
    """
    positions = bodies.positions
    scale = FOCAL_LENGTH / (FOCAL_LENGTH + positions[:, 2] + CAMERA_DISTANCE)

    sx = positions[:, 0] * scale + width / 2
    sy = positions[:, 1] * scale + height / 2

    visible = (
        (scale >= MIN_SCALE)
        & (sx >= -CULL_MARGIN) & (sx <= width + CULL_MARGIN)
        & (sy >= -CULL_MARGIN) & (sy <= height + CULL_MARGIN)
    )
    radius = bodies.sizes * scale
    return sx[visible], sy[visible], radius[visible], bodies.headings[visible]


def heat_color(stress_level: float, now_ms: float = 0.0) -> tuple[float, float, float]:
    """Lime under light load, yellow past 0.3, pulsing red past 0.6."""
    if stress_level > 0.6:
        red = 239 + math.sin(now_ms * 0.01) * 20
        return (min(255.0, red) / 255, 68 / 255, 68 / 255)
    if stress_level > 0.3:
        return (234 / 255, 179 / 255, 8 / 255)
    return (132 / 255, 204 / 255, 22 / 255)


@dataclass
class ProjectionSurface:
    """
    Render surface that projects every frame without a display.

    Keeps only its own projected arrays, never the body view it was handed.
    """

    width: int = 1920
    height: int = 1080
    ready: bool = True

    frames_drawn: int = field(default=0, init=False)
    last_frame: ProjectedFrame | None = field(default=None, init=False)

    @property
    def is_ready(self) -> bool:
        return self.ready

    def draw(self, frame: "FrameHandoff") -> None:
        x, y, radius, heading = project_bodies(frame.bodies, frame.width, frame.height)
        self.last_frame = ProjectedFrame(
            x=x,
            y=y,
            radius=radius,
            heading=heading,
            width=frame.width,
            height=frame.height,
            stress_level=frame.stress_level,
            population=len(frame.bodies),
            now_ms=frame.now_ms,
        )
        self.frames_drawn += 1


def plot_swarm(
    frame: ProjectedFrame,
    title: str | None = None,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (9.6, 5.4),
) -> tuple[Figure, Axes]:
    """
    Plot a projected frame: one ellipse per body, stretched along its heading.

    Args:
        frame: Output of ProjectionSurface
        title: Axes title (defaults to a population/visibility line)
        ax: Existing axes (creates new if None)

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    ax.set_facecolor(BACKGROUND_COLOR)
    bodies = EllipseCollection(
        widths=frame.radius * 3.0,
        heights=frame.radius * 1.2,
        angles=np.degrees(frame.heading),
        units="xy",
        offsets=np.column_stack([frame.x, frame.y]),
        offset_transform=ax.transData,
        facecolors=heat_color(frame.stress_level, frame.now_ms),
        alpha=0.8,
        linewidths=0,
    )
    ax.add_collection(bodies)
    ax.set_xlim(0, frame.width)
    ax.set_ylim(frame.height, 0)  # screen coordinates: y grows downward
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])

    if title is None:
        title = f"{frame.population:,} bodies ({frame.visible:,} visible)"
    ax.set_title(title)
    return fig, ax
