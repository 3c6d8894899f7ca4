"""Profile FlowSimulation.advance() and FieldGrid.build() to find hot spots."""

import cProfile
import pstats
import time
from io import StringIO

from particleflow.config import FlowSettings
from particleflow.engine.simulation import FlowSimulation
from particleflow.field.grid import FieldGrid
from particleflow.field.seeds import SeedSet
from particleflow.rng import make_rng

FRAME_DT = 1.0 / 60.0


def create_test_simulation(num_particles: int = 1500) -> FlowSimulation:
    """Create a reproducible simulation with the default canvas."""
    settings = FlowSettings(num_particles=num_particles, random_seed=42)
    return FlowSimulation.from_settings(settings)


def measure_frame_rate(simulation: FlowSimulation, num_frames: int) -> float:
    """Measure frames advanced per second."""
    start_time = time.perf_counter()
    for _ in range(num_frames):
        simulation.advance(FRAME_DT)
    elapsed = time.perf_counter() - start_time
    return num_frames / elapsed if elapsed > 0 else 0.0


def measure_field_build(num_seeds: int, width: int = 800, height: int = 600) -> float:
    """Seconds to build a field from ``num_seeds`` random seeds."""
    seeds = SeedSet.generate(num_seeds, width, height, (10.0, 80.0), 300.0, rng=make_rng(7))
    start_time = time.perf_counter()
    FieldGrid.build(seeds, width, height)
    return time.perf_counter() - start_time


def profile_advance(simulation: FlowSimulation, num_frames: int) -> str:
    """Profile advance() and return the top functions by cumulative time."""
    profiler = cProfile.Profile()

    profiler.enable()
    for _ in range(num_frames):
        simulation.advance(FRAME_DT)
    profiler.disable()

    stats_stream = StringIO()
    stats = pstats.Stats(profiler, stream=stats_stream)
    stats.sort_stats("cumulative")
    stats.print_stats(20)

    return stats_stream.getvalue()


def main() -> None:
    print("=" * 60)
    print("FlowSimulation Performance Profile")
    print("=" * 60)

    print("\n1. Field build time by seed count")
    print("-" * 40)
    for num_seeds in (4, 10, 20, 40):
        print(f"   {num_seeds:3d} seeds: {measure_field_build(num_seeds):.3f}s")

    print("\n2. Frame rate by particle count")
    print("-" * 40)
    for num_particles in (500, 1500, 5000):
        simulation = create_test_simulation(num_particles)
        fps = measure_frame_rate(simulation, 200)
        status = "OK" if fps >= 60 else "SLOW"
        print(f"   {num_particles:5d} particles: {fps:8.1f} frames/s [{status}]")

    print("\n3. Profile of 200 frames (1500 particles)")
    print("-" * 40)
    print(profile_advance(create_test_simulation(), 200))


if __name__ == "__main__":
    main()
