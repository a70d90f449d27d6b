#!/usr/bin/env python3
"""
Demo: Headless Swarm Benchmark

Runs the full benchmark without a display:
1. Attach a headless projection surface
2. Run for a fixed duration, ramping the swarm from the measured fps
3. Print the score and a profile summary
4. Save the performance profile and a final swarm snapshot

The score depends on the host; run it twice on different machines to compare.
"""

import argparse
from pathlib import Path

import matplotlib.pyplot as plt

from swarmbench.analysis import summarize_profile
from swarmbench.core import BenchmarkConfig, BenchmarkRun
from swarmbench.logging_config import setup_logging
from swarmbench.viz import ProjectionSurface, plot_result, plot_swarm, save_figure


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run the swarm benchmark without a display.")
    parser.add_argument("--duration", type=float, default=20.0, help="Run length in seconds")
    parser.add_argument("--log-level", default="info", help="Package log level")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    parser.add_argument("--trace-samples", action="store_true",
                        help="Log every fps sample and ramp step")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file, trace_samples=args.trace_samples)

    print("=" * 60)
    print("  SWARM BENCHMARK (headless)")
    print("=" * 60)

    duration_ms = args.duration * 1000.0
    config = BenchmarkConfig(duration_ms=duration_ms)
    surface = ProjectionSurface(width=1920, height=1080)

    print(f"\n1. Setup:")
    print(f"   Duration: {duration_ms / 1000:.0f}s")
    print(f"   Initial population: {config.initial_population}")
    print(f"   Sampling interval: {config.sampling_interval_ms:.0f} ms")

    print(f"\n2. Running...")
    run = BenchmarkRun(config=config, surface=surface)
    result = run.run()

    print(f"\n3. Results:")
    print(f"   Score:            {result.final_score:,}")
    print(f"   Peak bodies:      {result.peak_population:,}")
    print(f"   Avg frame rate:   {result.rounded_average_fps} FPS")
    print(f"   Crunch power:     {result.crunch_power_millions:.1f}M interactions")
    print(f"   Frames drawn:     {surface.frames_drawn}")

    summary = summarize_profile(result.history)
    if summary.breaking_point is not None:
        print(f"   ~{summary.target_fps:.0f} FPS limit: {summary.breaking_point:,.0f} bodies "
              f"(R²={summary.r_squared:.2f})")
    else:
        print(f"   {summary.target_fps:.0f} FPS limit: not reached / not estimable")

    output_dir = Path("output/demo_benchmark")
    output_dir.mkdir(parents=True, exist_ok=True)

    fig = plot_result(result)
    profile_path = output_dir / "profile.png"
    save_figure(fig, profile_path)
    plt.close(fig)
    print(f"\n4. Saved: {profile_path}")

    if surface.last_frame is not None:
        fig, _ = plot_swarm(surface.last_frame)
        swarm_path = output_dir / "swarm.png"
        save_figure(fig, swarm_path)
        plt.close(fig)
        print(f"   Saved: {swarm_path}")

    print("=" * 60)


if __name__ == "__main__":
    main()
