"""Command-line interface: run a headless particle flow simulation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import Any

from particleflow import __version__
from particleflow.config import load_settings
from particleflow.engine.simulation import FlowSimulation
from particleflow.errors import InvalidConfigurationError
from particleflow.logging_config import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="particleflow",
        description="Advect particles through a seed-defined velocity field (headless)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=300,
        help="Number of frames to simulate (default: 300)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=60.0,
        help="Simulated frame rate used to derive frame timestamps (default: 60)",
    )
    parser.add_argument("--width", type=int, help="Canvas width in pixels")
    parser.add_argument("--height", type=int, help="Canvas height in pixels")
    parser.add_argument("--particles", type=int, dest="num_particles", help="Particle count")
    parser.add_argument("--seeds", type=int, dest="num_seeds", help="Random seed count")
    parser.add_argument(
        "--preset",
        action="store_const",
        const="preset",
        dest="seed_layout",
        help="Use the fixed four-seed layout instead of random seeds",
    )
    parser.add_argument("--radius", type=float, dest="seed_radius", help="Seed radius")
    parser.add_argument("--max-age", type=int, dest="max_particle_age", help="Max particle age")
    parser.add_argument("--speed-factor", type=float, help="Displacement multiplier")
    parser.add_argument(
        "--bilinear",
        action="store_const",
        const="bilinear",
        dest="sampling",
        help="Sample the field bilinearly instead of per cell",
    )
    parser.add_argument("--random-seed", type=int, help="Seed for a reproducible run")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


_SETTING_KEYS = (
    "width",
    "height",
    "num_particles",
    "num_seeds",
    "seed_layout",
    "seed_radius",
    "max_particle_age",
    "speed_factor",
    "sampling",
    "random_seed",
)


def run(simulation: FlowSimulation, frames: int, fps: float) -> dict[str, Any]:
    """Drive ``frames`` frames at a fixed frame interval and summarize the run."""
    interval = 1.0 / fps
    simulation.clock.tick(0.0)
    start = time.perf_counter()
    for i in range(1, frames + 1):
        simulation.step(i * interval)
    elapsed = time.perf_counter() - start

    counts = simulation.particles.respawn_counts
    return {
        "frames": simulation.frame,
        "simulated_seconds": round(simulation.time, 6),
        "particles": len(simulation.particles),
        "seeds": len(simulation.seeds),
        "respawns": {reason.value: n for reason, n in sorted(counts.items())},
        "max_field_speed": round(simulation.grid.max_speed(), 6),
        "calm_fraction": round(simulation.grid.calm_fraction(), 6),
        "frames_per_second": round(simulation.frame / elapsed, 1) if elapsed > 0 else None,
    }


def main(args: list[str] | None = None) -> int:
    """Run a headless simulation and print a summary.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, 2 for invalid configuration).
    """
    parser = build_parser()
    parsed = parser.parse_args(args)
    configure_logging()

    overrides = {
        key: getattr(parsed, key) for key in _SETTING_KEYS if getattr(parsed, key) is not None
    }

    try:
        if parsed.frames < 0 or parsed.fps <= 0:
            raise InvalidConfigurationError("--frames must be >= 0 and --fps must be > 0")
        settings = load_settings(**overrides)
        simulation = FlowSimulation.from_settings(settings)
    except InvalidConfigurationError as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2

    summary = run(simulation, parsed.frames, parsed.fps)

    if parsed.json:
        print(json.dumps(summary, indent=2))
    else:
        print(
            f"Simulated {summary['frames']} frames "
            f"({summary['simulated_seconds']:.2f}s) of {summary['particles']} particles "
            f"through {summary['seeds']} seeds"
        )
        for reason, count in summary["respawns"].items():
            print(f"  respawns ({reason}): {count}")
        print(f"  calm fraction: {summary['calm_fraction']:.3f}")
        if summary["frames_per_second"] is not None:
            print(f"  {summary['frames_per_second']} frames/s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
