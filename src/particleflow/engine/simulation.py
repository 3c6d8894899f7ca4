"""Simulation driver: owns seeds, field and particles for one run.

An external animation loop calls ``FlowSimulation.step(timestamp)`` once per
frame with a monotonically increasing timestamp in seconds. The simulation
turns timestamps into frame deltas, advances the particles, and exposes the
state for the projector. Nothing here blocks or spans frames.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from particleflow.config import FlowSettings, SeedLayout
from particleflow.engine.particles import ParticleSystem
from particleflow.field.grid import FieldGrid
from particleflow.field.seeds import SeedSet
from particleflow.field.strength import strength_for_exponent
from particleflow.rng import RandomSource, make_rng

if TYPE_CHECKING:
    from collections.abc import Iterable

    from particleflow.model.seed import Seed

logger = logging.getLogger(__name__)

STATS_LOG_INTERVAL = 100  # frames between debug stats lines


@dataclass
class FrameClock:
    """Turns driver timestamps into frame deltas.

    The first tick has no previous timestamp and yields 0. Later ticks yield
    the difference from the previous timestamp, never less than 0.
    """

    previous: float | None = None

    def tick(self, timestamp: float) -> float:
        if self.previous is None:
            dt = 0.0
        else:
            dt = max(0.0, timestamp - self.previous)
        self.previous = timestamp
        return dt

    def reset(self) -> None:
        self.previous = None


@dataclass
class FlowSimulation:
    """All state for one particle flow run.

    Replaces free-floating field/particle/settings globals with one owned
    object, so several independent simulations can coexist.
    """

    seeds: SeedSet
    grid: FieldGrid
    particles: ParticleSystem
    clock: FrameClock = field(default_factory=FrameClock)

    # Capability toggles
    running: bool = True
    show_seeds: bool = False
    show_field: bool = False
    field_spacing: int = 20
    field_arrow_scale: float = 0.1

    # Simulation clock
    frame: int = 0  # frames advanced while running
    time: float = 0.0  # simulated seconds, before speed_factor

    @classmethod
    def from_settings(
        cls,
        settings: FlowSettings,
        rng: RandomSource | None = None,
    ) -> FlowSimulation:
        """Build seeds, field and particles from settings.

        Args:
            settings: Validated settings.
            rng: Random source shared by seed generation and respawn. If
                None, one is created from ``settings.random_seed``.
        """
        if rng is None:
            rng = make_rng(settings.random_seed)

        if settings.seed_layout == SeedLayout.PRESET:
            seeds = SeedSet.preset(settings.width, settings.height, settings.seed_radius)
        else:
            seeds = SeedSet.generate(
                settings.num_seeds,
                settings.width,
                settings.height,
                settings.speed_range,
                settings.seed_radius,
                rng=rng,
            )

        grid = FieldGrid.build(
            seeds,
            settings.width,
            settings.height,
            strength=strength_for_exponent(settings.strength_exponent),
        )
        particles = ParticleSystem(
            grid,
            settings.num_particles,
            max_age=settings.max_particle_age,
            speed_factor=settings.speed_factor,
            respawn_on_zero_velocity=settings.respawn_on_zero_velocity,
            zero_velocity_epsilon=settings.zero_velocity_epsilon,
            sampling=settings.sampling,
            randomize_initial_age=settings.randomize_initial_age,
            rng=rng,
        )
        logger.info(
            "Simulation ready: %d particles, %d seeds, %dx%d canvas",
            len(particles),
            len(seeds),
            grid.width,
            grid.height,
        )
        return cls(
            seeds=seeds,
            grid=grid,
            particles=particles,
            show_seeds=settings.show_seeds,
            show_field=settings.show_field,
            field_spacing=settings.field_spacing,
            field_arrow_scale=settings.field_arrow_scale,
        )

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def step(self, timestamp: float) -> float:
        """Advance by the time elapsed since the previous timestamp.

        The clock always advances, even while paused, so resuming does not
        produce one huge jump.

        Returns:
            The frame delta in seconds (0 while paused or on the first frame).
        """
        dt = self.clock.tick(timestamp)
        if not self.running:
            return 0.0
        self.advance(dt)
        return dt

    def advance(self, dt: float) -> None:
        """Advance all particles by an explicit ``dt`` seconds.

        Side effects:
            - Mutates every particle's position, previous position and age
            - Increments frame and time
        """
        self.particles.update(dt)
        self.frame += 1
        self.time += dt

        if self.frame % STATS_LOG_INTERVAL == 0:
            counts = self.particles.respawn_counts
            logger.debug(
                "Frame %d: t=%.2fs, particles=%d, respawns=%d",
                self.frame,
                self.time,
                len(self.particles),
                self.particles.total_respawns(),
                extra={"respawns": {reason.value: n for reason, n in counts.items()}},
            )

    def pause(self) -> None:
        self.running = False

    def resume(self) -> None:
        self.running = True

    def toggle_running(self) -> bool:
        self.running = not self.running
        return self.running

    def toggle_show_seeds(self) -> bool:
        self.show_seeds = not self.show_seeds
        return self.show_seeds

    def toggle_show_field(self) -> bool:
        self.show_field = not self.show_field
        return self.show_field

    def replace_seeds(self, seeds: Iterable[Seed]) -> None:
        """Rebuild the field from new seeds and move the particles onto it."""
        seed_set = seeds if isinstance(seeds, SeedSet) else SeedSet.of(seeds)
        self.grid = FieldGrid.build(seed_set, self.width, self.height, self.grid.strength)
        self.seeds = seed_set
        self.particles.rebind(self.grid)
