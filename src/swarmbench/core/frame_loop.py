"""
FrameLoop: a cooperative, single-threaded frame scheduler.

Modeled on an animation-frame callback queue: a callback asks for the next
frame from inside the current one, and at most one callback runs per frame.
Nothing runs concurrently, so the body store needs no locking.

`target_fps` paces the loop with sleeps (useful when a real display is
attached); by default frames are pumped back to back, which is what a CPU
stress test wants.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import itertools
import time
from typing import Callable


@dataclass
class FrameLoop:
    """Pumps at most one pending frame callback per frame."""

    target_fps: float | None = None

    frames_run: int = field(default=0, init=False)
    _pending: dict[int, Callable[[], None]] = field(default_factory=dict, init=False)
    _handles: itertools.count = field(default_factory=lambda: itertools.count(1), init=False)

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    def request_frame(self, callback: Callable[[], None]) -> int:
        """Schedule `callback` for the next frame. Returns a cancel handle."""
        handle = next(self._handles)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int | None) -> None:
        """Drop a pending callback. Unknown or spent handles are ignored."""
        if handle is not None:
            self._pending.pop(handle, None)

    def run_frame(self) -> bool:
        """Run the oldest pending callback. Returns False if none was pending."""
        if not self._pending:
            return False
        handle = next(iter(self._pending))
        callback = self._pending.pop(handle)
        started = time.perf_counter()
        callback()
        self.frames_run += 1
        if self.target_fps:
            budget = 1.0 / self.target_fps
            remaining = budget - (time.perf_counter() - started)
            if remaining > 0:
                time.sleep(remaining)
        return True

    def run_until_idle(self, max_frames: int | None = None) -> int:
        """
        Pump frames until nothing is scheduled.

        Args:
            max_frames: Optional safety cap on frames run by this call

        Returns:
            Number of frames run
        """
        count = 0
        while max_frames is None or count < max_frames:
            if not self.run_frame():
                break
            count += 1
        return count
