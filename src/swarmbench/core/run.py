"""
Run controller: the benchmark state machine and its frame loop.

    IDLE ──start──▶ RUNNING ──(now ≥ end, or cancel)──▶ FINISHED
                       ▲                                   │
                       └──────────────start────────────────┘

One tick per frame, always in this order:
1. If a sampling interval has elapsed: record a sample, ramp the population
2. If the run is over: finish (no integration this frame)
3. If the surface is not ready: skip to step 6
4. Integrate one step, accumulate the evaluation count
5. Hand a read-only view of the bodies to the render surface
6. Request the next frame

All run state lives on the BenchmarkRun instance, so several independent
runs can coexist in one process (tests rely on this).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import time
from typing import Callable, Protocol

import numpy as np

from swarmbench.core.bodies import BodyStore, BodyView
from swarmbench.core.errors import BenchmarkAlreadyRunningError, SurfaceNotReadyError
from swarmbench.core.frame_loop import FrameLoop
from swarmbench.core.integrator import Integrator, IntegratorConfig
from swarmbench.core.population import PopulationController, RampConfig, SpawnConfig
from swarmbench.core.scoring import BenchmarkResult, score_run
from swarmbench.core.telemetry import HistorySample, LiveTelemetry, TelemetrySampler

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass
class BenchmarkConfig:
    """All tunables of a benchmark run."""

    duration_ms: float = 30000.0
    sampling_interval_ms: float = 500.0
    initial_population: int = 2500
    dt: float = 0.5                   # Simulated time per frame, not wall-clock
    stress_population: int = 20000    # Population at which stress_level saturates

    integrator: IntegratorConfig = field(default_factory=IntegratorConfig)
    ramp: RampConfig = field(default_factory=RampConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)

    def __post_init__(self):
        if self.duration_ms <= 0:
            raise ValueError("duration_ms must be positive")
        if self.sampling_interval_ms <= 0:
            raise ValueError("sampling_interval_ms must be positive")
        if self.initial_population < 0:
            raise ValueError("initial_population cannot be negative")
        if self.stress_population <= 0:
            raise ValueError("stress_population must be positive")


@dataclass(frozen=True, eq=False)
class FrameHandoff:
    """What the render surface receives each frame. Valid for that frame only."""

    bodies: BodyView
    width: int
    height: int
    stress_level: float    # min(1, population / stress_population)
    now_ms: float


class RenderSurface(Protocol):
    """Drawing collaborator. The core never draws itself."""

    @property
    def is_ready(self) -> bool:
        """True once a drawable context exists."""
        ...

    @property
    def width(self) -> int:
        ...

    @property
    def height(self) -> int:
        ...

    def draw(self, frame: FrameHandoff) -> None:
        """Render one frame. Must not mutate or retain frame.bodies."""
        ...


def default_clock() -> float:
    """Monotonic wall clock in milliseconds."""
    return time.perf_counter() * 1000.0


class BenchmarkRun:
    """
    One benchmark instance: owns the swarm, telemetry and accumulators.

    Args:
        config: Run tunables (defaults to BenchmarkConfig())
        surface: Render surface; start() fails unless it reports ready
        clock: Callable returning milliseconds; inject a fake for tests
        rng: Random source for spawning; seed it for reproducible tests
        frame_loop: Scheduler that drives tick(); a private FrameLoop by default
    """

    def __init__(
        self,
        config: BenchmarkConfig | None = None,
        surface: RenderSurface | None = None,
        clock: Callable[[], float] | None = None,
        rng: np.random.Generator | None = None,
        frame_loop: FrameLoop | None = None,
    ):
        self.config = config if config is not None else BenchmarkConfig()
        self.surface = surface
        self.clock = clock if clock is not None else default_clock
        self.frame_loop = frame_loop if frame_loop is not None else FrameLoop()

        self.store = BodyStore()
        self.integrator = Integrator(config=self.config.integrator, dt=self.config.dt)
        self.population = PopulationController(
            self.store,
            rng=rng,
            spawn=self.config.spawn,
            ramp=self.config.ramp,
        )
        self.telemetry_sampler = TelemetrySampler(interval_ms=self.config.sampling_interval_ms)

        self.state = RunState.IDLE
        self.total_interaction_count = 0
        self.result: BenchmarkResult | None = None
        self.start_ms = 0.0
        self.end_ms = 0.0
        self.last_tick_ms = 0.0
        self._frame_handle: int | None = None

    # ─── Read access for UI / results consumers ──────────────────────────

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    @property
    def history(self) -> tuple[HistorySample, ...]:
        """Samples recorded so far, oldest first."""
        return tuple(self.telemetry_sampler.history)

    @property
    def telemetry(self) -> LiveTelemetry:
        """HUD values as of the latest sample."""
        return self.telemetry_sampler.live

    @property
    def current_population(self) -> int:
        return len(self.store)

    @property
    def elapsed_ms(self) -> float:
        return max(0.0, self.last_tick_ms - self.start_ms)

    @property
    def progress_fraction(self) -> float:
        return min(1.0, self.elapsed_ms / self.config.duration_ms)

    @property
    def stress_level(self) -> float:
        return min(1.0, len(self.store) / self.config.stress_population)

    @property
    def estimated_interactions(self) -> float:
        """Unsparsified pair estimate n² in millions, as shown on the HUD."""
        return len(self.store) ** 2 / 1e6

    # ─── Operations ───────────────────────────────────────────────────────

    def start(self) -> None:
        """
        Begin a run (from IDLE or FINISHED).

        Raises:
            BenchmarkAlreadyRunningError: a run is in progress
            SurfaceNotReadyError: no surface, or it has no drawable context
        """
        if self.state is RunState.RUNNING:
            logger.error("Benchmark start rejected: already running")
            raise BenchmarkAlreadyRunningError("Benchmark is already running")
        if self.surface is None or not self.surface.is_ready:
            logger.error("Benchmark start rejected: render surface not ready")
            raise SurfaceNotReadyError("Render surface context not ready")

        cfg = self.config
        self.store.clear()
        self.total_interaction_count = 0
        self.result = None

        self.population.add_bodies(cfg.initial_population)

        now = self.clock()
        self.start_ms = now
        self.end_ms = now + cfg.duration_ms
        self.last_tick_ms = now
        self.telemetry_sampler.reset(now)

        self.state = RunState.RUNNING
        self._frame_handle = self.frame_loop.request_frame(self.tick)
        logger.info(
            "Benchmark started: %d bodies, %.1fs duration",
            len(self.store), cfg.duration_ms / 1000.0,
        )

    def tick(self) -> None:
        """Execute one frame of the run."""
        if self.state is not RunState.RUNNING:
            return
        self._frame_handle = None

        now = self.clock()
        self.last_tick_ms = now
        elapsed = now - self.start_ms
        sampler = self.telemetry_sampler

        if sampler.is_due(now):
            sample = sampler.sample(now, elapsed, len(self.store), self.config.duration_ms)
            self.population.ramp(sample.fps)

        if now >= self.end_ms:
            self._finish()
            return

        # Surface lost mid-run: keep the clock running, skip the frame
        if not self.surface.is_ready:
            self._frame_handle = self.frame_loop.request_frame(self.tick)
            return

        sampler.count_frame()
        self.total_interaction_count += self.integrator.step(self.store)

        self.surface.draw(FrameHandoff(
            bodies=self.store.view(),
            width=self.surface.width,
            height=self.surface.height,
            stress_level=self.stress_level,
            now_ms=now,
        ))

        self._frame_handle = self.frame_loop.request_frame(self.tick)

    def cancel(self) -> None:
        """Stop a running benchmark and score what was collected so far."""
        if self.state is not RunState.RUNNING:
            return
        logger.info("Benchmark cancelled after %.1fs", self.elapsed_ms / 1000.0)
        self._finish()

    def run(self, max_frames: int | None = None) -> BenchmarkResult | None:
        """
        Start and pump the frame loop until the run finishes.

        Args:
            max_frames: Optional cap; the run is cancelled if it is reached

        Returns:
            The frozen result
        """
        self.start()
        self.frame_loop.run_until_idle(max_frames=max_frames)
        if self.state is RunState.RUNNING:
            self.cancel()
        return self.result

    def _finish(self) -> None:
        self.frame_loop.cancel_frame(self._frame_handle)
        self._frame_handle = None
        self.state = RunState.FINISHED
        self.result = score_run(
            self.telemetry_sampler.history,
            self.total_interaction_count,
            len(self.store),
        )
        logger.info(
            "Benchmark finished: score=%d peak=%d avg_fps=%.1f interactions=%d",
            self.result.final_score,
            self.result.peak_population,
            self.result.average_fps,
            self.result.total_interaction_count,
        )
