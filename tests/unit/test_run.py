"""Unit tests for the BenchmarkRun state machine."""

import math

import numpy as np
import pytest

from swarmbench.core.errors import BenchmarkAlreadyRunningError, SurfaceNotReadyError
from swarmbench.core.integrator import count_interactions
from swarmbench.core.run import BenchmarkConfig, BenchmarkRun, RunState


class TestBenchmarkConfig:
    """Tests for BenchmarkConfig."""

    def test_defaults(self):
        cfg = BenchmarkConfig()
        assert cfg.sampling_interval_ms == 500
        assert cfg.initial_population == 2500
        assert cfg.dt == 0.5
        assert cfg.ramp.high_amount == 1000
        assert cfg.integrator.gravitational_constant == 0.5

    @pytest.mark.parametrize("kwargs", [
        {"duration_ms": 0},
        {"sampling_interval_ms": -1},
        {"initial_population": -5},
        {"stress_population": 0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            BenchmarkConfig(**kwargs)


class TestStart:
    """Tests for the Idle → Running transition."""

    def test_initial_state(self, small_config, surface):
        run = BenchmarkRun(small_config, surface)
        assert run.state is RunState.IDLE
        assert run.result is None
        assert run.current_population == 0

    def test_start(self, small_config, surface, manual_clock, rng):
        manual_clock.now = 1000.0
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)

        run.start()

        assert run.state is RunState.RUNNING
        assert run.is_running
        assert run.current_population == 10
        assert run.start_ms == 1000.0
        assert run.end_ms == 2000.0
        assert run.frame_loop.pending

    def test_surface_not_ready(self, small_config, make_surface, manual_clock):
        run = BenchmarkRun(small_config, make_surface(ready=False), clock=manual_clock)

        with pytest.raises(SurfaceNotReadyError):
            run.start()

        assert run.state is RunState.IDLE
        assert run.current_population == 0
        assert not run.frame_loop.pending

    def test_no_surface(self, small_config, manual_clock):
        run = BenchmarkRun(small_config, None, clock=manual_clock)
        with pytest.raises(SurfaceNotReadyError):
            run.start()
        assert run.state is RunState.IDLE

    def test_already_running(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        run.store.positions[0, 0] = 123.0

        with pytest.raises(BenchmarkAlreadyRunningError):
            run.start()

        assert run.state is RunState.RUNNING
        assert run.store.positions[0, 0] == 123.0
        assert run.current_population == 10


class TestTick:
    """Tests for a single frame."""

    def test_tick_integrates_and_hands_off(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()

        manual_clock.advance(100)
        run.frame_loop.run_frame()

        assert run.total_interaction_count == count_interactions(10, 1)
        assert surface.populations == [10]
        assert surface.writeable_flags == [False]
        assert surface.stress_levels == [pytest.approx(10 / 20000)]
        assert run.frame_loop.pending
        assert run.history == ()

    def test_tick_samples_and_ramps(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()

        for _ in range(3):
            manual_clock.advance(100)
            run.frame_loop.run_frame()
        manual_clock.advance(300)  # t = 600
        run.frame_loop.run_frame()

        assert len(run.history) == 1
        sample = run.history[0]
        assert sample.fps == pytest.approx(3 * 1000 / 600)
        assert sample.population == 10
        # 5 fps is below the low threshold
        assert run.current_population == 110
        # The sampling frame still integrates, with the grown swarm
        assert surface.populations[-1] == 110

    def test_tick_when_idle_is_noop(self, small_config, surface, manual_clock):
        run = BenchmarkRun(small_config, surface, clock=manual_clock)
        run.tick()
        assert run.state is RunState.IDLE
        assert surface.populations == []

    def test_surface_lost_mid_run(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        surface.ready = False

        manual_clock.advance(100)
        run.frame_loop.run_frame()

        assert run.total_interaction_count == 0
        assert run.frame_loop.pending
        assert run.state is RunState.RUNNING

    def test_surface_lost_until_end_still_finishes(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        surface.ready = False

        manual_clock.advance(5000)
        frames = run.frame_loop.run_until_idle(max_frames=1000)

        assert frames == 1
        assert run.state is RunState.FINISHED
        assert not run.frame_loop.pending
        assert run.result is not None
        assert surface.populations == []

    def test_stress_level_saturates(self, surface, manual_clock, rng):
        cfg = BenchmarkConfig(duration_ms=1000, initial_population=30, stress_population=20)
        run = BenchmarkRun(cfg, surface, clock=manual_clock, rng=rng)
        run.start()

        assert run.stress_level == 1.0

        manual_clock.advance(100)
        run.frame_loop.run_frame()

        assert surface.stress_levels == [1.0]

    def test_history_is_read_only_snapshot(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        manual_clock.advance(600)
        run.frame_loop.run_frame()

        history = run.history
        assert isinstance(history, tuple)
        with pytest.raises(AttributeError):
            history.append(history[0])
        assert len(run.history) == 1

    def test_live_values(self, surface, manual_clock, rng):
        cfg = BenchmarkConfig(duration_ms=4000, sampling_interval_ms=500, initial_population=10)
        run = BenchmarkRun(cfg, surface, clock=manual_clock, rng=rng)
        run.start()

        manual_clock.advance(1000)
        run.frame_loop.run_frame()

        assert run.elapsed_ms == 1000
        assert run.progress_fraction == pytest.approx(0.25)
        assert run.telemetry.timer_seconds == 1.0
        assert run.telemetry.current_population == 10
        assert run.telemetry.progress_fraction == pytest.approx(0.25)
        assert run.stress_level == pytest.approx(110 / 20000)
        assert run.estimated_interactions == pytest.approx(110 ** 2 / 1e6)


class TestFinish:
    """Tests for completion and cancellation."""

    def test_finishes_at_end_time(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()

        manual_clock.advance(1000)
        run.frame_loop.run_frame()

        assert run.state is RunState.FINISHED
        assert not run.frame_loop.pending
        assert run.result is not None
        # Final frame sampled but did not integrate
        assert surface.populations == []
        assert run.total_interaction_count == 0

    def test_cancel(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        manual_clock.advance(100)
        run.frame_loop.run_frame()

        run.cancel()

        assert run.state is RunState.FINISHED
        assert not run.frame_loop.pending
        assert run.result.total_interaction_count == count_interactions(10, 1)
        assert run.result.average_fps == 0.0
        assert run.result.final_score == 0
        assert run.result.peak_population == 10

    def test_cancel_when_idle_is_noop(self, small_config, surface):
        run = BenchmarkRun(small_config, surface)
        run.cancel()
        assert run.state is RunState.IDLE
        assert run.result is None

    def test_run_with_frame_cap_cancels(self, surface, manual_clock, rng):
        cfg = BenchmarkConfig(duration_ms=60000, initial_population=5)
        run = BenchmarkRun(cfg, surface, clock=manual_clock, rng=rng)

        result = run.run(max_frames=4)

        assert run.state is RunState.FINISHED
        assert result is run.result
        assert len(surface.populations) == 4

    def test_result_frozen_until_next_start(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        manual_clock.advance(100)
        run.frame_loop.run_frame()
        run.cancel()
        result = run.result

        run.tick()
        run.cancel()

        assert run.result is result


class TestRerun:
    """Tests for Finished → Running."""

    def test_rerun_resets_state(self, small_config, surface, manual_clock, rng):
        run = BenchmarkRun(small_config, surface, clock=manual_clock, rng=rng)
        run.start()
        for _ in range(12):
            manual_clock.advance(100)
            run.frame_loop.run_frame()
        assert run.state is RunState.FINISHED
        assert len(run.history) > 0
        assert run.current_population > 10

        run.start()

        assert run.state is RunState.RUNNING
        assert run.history == ()
        assert run.total_interaction_count == 0
        assert run.current_population == 10
        assert run.result is None
        assert run.start_ms == manual_clock.now
        assert np.all(np.abs(run.store.positions[:, 1]) <= 100.0)


class TestEndToEnd:
    """Full runs driven by a scripted clock."""

    def test_two_sampling_intervals(self, small_config, surface, sequence_clock, rng):
        # start at 0, then one frame per reading; each reading closes an interval
        clock = sequence_clock([0.0, 501.0, 1002.0])
        run = BenchmarkRun(small_config, surface, clock=clock, rng=rng)
        states = [run.state]

        run.start()
        states.append(run.state)
        result = run.frame_loop.run_until_idle()
        states.append(run.state)

        assert states == [RunState.IDLE, RunState.RUNNING, RunState.FINISHED]
        assert result == 2
        assert len(run.history) == 2

        first, second = run.history
        assert first.elapsed_seconds == pytest.approx(0.501)
        assert first.fps == 0.0
        assert first.population == 10
        assert second.elapsed_seconds == pytest.approx(1.002)
        assert second.fps == pytest.approx(1000 / 501)
        assert second.population == 110

        # Only the 501 ms frame integrated, after ramping to 110 bodies
        assert run.total_interaction_count == 110 * 109 // 2

        final = run.result
        expected_avg = (first.fps + second.fps) / 2
        assert final.average_fps == pytest.approx(expected_avg)
        assert final.peak_population == 210
        assert final.total_interaction_count == run.total_interaction_count
        assert final.final_score == math.floor(
            (final.total_interaction_count / 100000) * (final.average_fps / 60)
        )
        assert final.history == tuple(run.history)

    def test_population_never_decreases(self, surface, manual_clock, rng):
        cfg = BenchmarkConfig(duration_ms=3000, sampling_interval_ms=500, initial_population=20)
        run = BenchmarkRun(cfg, surface, clock=manual_clock, rng=rng)
        run.start()

        populations = [run.current_population]
        while run.is_running:
            manual_clock.advance(150)
            run.frame_loop.run_frame()
            populations.append(run.current_population)

        assert populations == sorted(populations)
        assert populations[-1] > populations[0]
        samples = [s.elapsed_seconds for s in run.history]
        assert samples == sorted(samples)

    def test_independent_runs(self, small_config, make_surface, rng):
        first = BenchmarkRun(small_config, make_surface(), clock=lambda: 0.0, rng=rng)
        second = BenchmarkRun(small_config, make_surface(), clock=lambda: 0.0, rng=rng)

        first.start()

        assert first.current_population == 10
        assert second.current_population == 0
        assert second.state is RunState.IDLE
        assert first.store is not second.store

    def test_run_to_completion(self, small_config, surface, manual_clock, rng):
        def clock():
            return manual_clock.advance(50)

        run = BenchmarkRun(small_config, surface, clock=clock, rng=rng)
        result = run.run()

        assert run.state is RunState.FINISHED
        assert result.peak_population == run.current_population
        assert len(result.history) >= 1
        assert surface.populations == sorted(surface.populations)
        assert all(flag is False for flag in surface.writeable_flags)
