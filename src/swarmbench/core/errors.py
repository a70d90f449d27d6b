"""Exceptions raised by the benchmark run controller."""


class BenchmarkError(RuntimeError):
    """Base class for run-controller failures."""


class SurfaceNotReadyError(BenchmarkError):
    """start() was called before the render surface had a drawable context."""


class BenchmarkAlreadyRunningError(BenchmarkError):
    """start() was called while a run is in progress."""
