"""
Telemetry sampler: frame-rate measurement on a fixed wall-clock cadence.

Frames are counted every tick; every `interval_ms` the sampler turns the
count into an fps figure, appends a HistorySample and restarts the window.
Sampling only gates metrics and ramp decisions. Integration runs every frame
regardless.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistorySample:
    """One telemetry sample. Immutable once recorded."""

    elapsed_seconds: float
    fps: float
    population: int


@dataclass
class LiveTelemetry:
    """Latest values for a HUD, refreshed on every sample."""

    timer_seconds: float = 0.0
    current_fps: int = 0
    current_population: int = 0
    progress_fraction: float = 0.0


@dataclass
class TelemetrySampler:
    """Counts frames and records an ordered fps history."""

    interval_ms: float = 500.0

    history: list[HistorySample] = field(default_factory=list, init=False)
    live: LiveTelemetry = field(default_factory=LiveTelemetry, init=False)
    frame_count: int = field(default=0, init=False)
    last_sample_ms: float = field(default=0.0, init=False)

    def __post_init__(self):
        if self.interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

    def reset(self, now_ms: float) -> None:
        """Clear history and restart the sampling window at now_ms."""
        self.history = []
        self.live = LiveTelemetry()
        self.frame_count = 0
        self.last_sample_ms = now_ms

    def count_frame(self) -> None:
        self.frame_count += 1

    def is_due(self, now_ms: float) -> bool:
        """True once more than one interval has passed since the last sample."""
        return now_ms > self.last_sample_ms + self.interval_ms

    def sample(
        self,
        now_ms: float,
        elapsed_ms: float,
        population: int,
        duration_ms: float | None = None,
    ) -> HistorySample:
        """
        Close the current window and record a sample.

        Args:
            now_ms: Current clock reading
            elapsed_ms: Time since run start
            population: Bodies alive at sample time
            duration_ms: Run length, used for the live progress fraction

        Returns:
            The appended HistorySample
        """
        window = now_ms - self.last_sample_ms
        fps = (self.frame_count * 1000.0) / window if window > 0 else 0.0
        elapsed_seconds = elapsed_ms / 1000.0

        if self.history and elapsed_seconds <= self.history[-1].elapsed_seconds:
            raise ValueError(
                f"Samples must be strictly increasing in time: "
                f"{elapsed_seconds} after {self.history[-1].elapsed_seconds}"
            )

        record = HistorySample(elapsed_seconds=elapsed_seconds, fps=fps, population=population)
        self.history.append(record)

        progress = 0.0
        if duration_ms:
            progress = min(1.0, max(0.0, elapsed_ms / duration_ms))
        self.live = LiveTelemetry(
            timer_seconds=round(elapsed_seconds, 1),
            current_fps=int(round(fps)),
            current_population=population,
            progress_fraction=progress,
        )

        self.frame_count = 0
        self.last_sample_ms = now_ms
        logger.debug("Sample t=%.2fs fps=%.1f population=%d", elapsed_seconds, fps, population)
        return record

