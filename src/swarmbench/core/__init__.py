"""
Core engine: the swarm, its integrator, the load controller and the run loop.

- BodyStore: growable numpy-backed swarm
- Integrator: one step of the stylized N-body force law
- PopulationController: spawn policy + fps-driven ramp
- TelemetrySampler: fps history on a fixed wall-clock cadence
- BenchmarkRun: IDLE → RUNNING → FINISHED state machine, driven by a FrameLoop
"""

from swarmbench.core.bodies import Body, BodyStore, BodyView, Vector3
from swarmbench.core.errors import BenchmarkAlreadyRunningError, BenchmarkError, SurfaceNotReadyError
from swarmbench.core.frame_loop import FrameLoop
from swarmbench.core.integrator import (
    Integrator,
    IntegratorConfig,
    compute_stride,
    count_interactions,
    pair_forces,
)
from swarmbench.core.population import PopulationController, RampConfig, SpawnConfig, spawn_bodies
from swarmbench.core.run import (
    BenchmarkConfig,
    BenchmarkRun,
    FrameHandoff,
    RenderSurface,
    RunState,
)
from swarmbench.core.scoring import BenchmarkResult, average_fps, final_score, score_run
from swarmbench.core.telemetry import HistorySample, LiveTelemetry, TelemetrySampler

__all__ = [
    "Body",
    "BodyStore",
    "BodyView",
    "Vector3",
    "BenchmarkError",
    "BenchmarkAlreadyRunningError",
    "SurfaceNotReadyError",
    "FrameLoop",
    "Integrator",
    "IntegratorConfig",
    "compute_stride",
    "count_interactions",
    "pair_forces",
    "PopulationController",
    "RampConfig",
    "SpawnConfig",
    "spawn_bodies",
    "BenchmarkConfig",
    "BenchmarkRun",
    "FrameHandoff",
    "RenderSurface",
    "RunState",
    "BenchmarkResult",
    "average_fps",
    "final_score",
    "score_run",
    "HistorySample",
    "LiveTelemetry",
    "TelemetrySampler",
]
