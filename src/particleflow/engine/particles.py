"""Particle system: advects a fixed population of particles through a FieldGrid.

Per particle, per frame:
1. Remember the current position as the previous one
2. Increment age
3. Read the field velocity at the current position
4. Move by dt * velocity * speed_factor (explicit Euler)
5. Respawn if the velocity was zero, the particle left the canvas,
   or it outlived max_age

Respawning happens inline: the particle gets a fresh random position with no
trail and zero age before update() returns. Particles are never created or
destroyed after construction.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from collections.abc import Iterator
from enum import StrEnum
from typing import TYPE_CHECKING

from particleflow.errors import InvalidConfigurationError
from particleflow.field.grid import SamplingMethod
from particleflow.model.particle import Particle
from particleflow.rng import RandomSource, make_rng

if TYPE_CHECKING:
    from particleflow.field.grid import FieldGrid

logger = logging.getLogger(__name__)

DEFAULT_ZERO_VELOCITY_EPSILON = 1e-9  # pixels / second


class RespawnReason(StrEnum):
    """Why a particle was sent back to a random position."""

    ZERO_VELOCITY = "zero_velocity"
    OUT_OF_BOUNDS = "out_of_bounds"
    AGED_OUT = "aged_out"


class ParticleSystem:
    """Fixed-size population of particles moving through one field.

    Args:
        grid: Field the particles read velocities from.
        num_particles: Population size, constant for the system's lifetime.
        max_age: Frames after which a particle respawns. None disables aging.
        speed_factor: Global multiplier on every displacement.
        respawn_on_zero_velocity: Respawn particles sitting in calm cells.
        zero_velocity_epsilon: Components within this of zero count as calm.
        sampling: Nearest-cell or bilinear field sampling.
        randomize_initial_age: Start particles at random ages in [0, max_age)
            so they do not all age out on the same frame.
        rng: Random source for spawn positions and initial ages.

    Raises:
        InvalidConfigurationError: On a negative count, age, speed factor or epsilon.
    """

    def __init__(
        self,
        grid: FieldGrid,
        num_particles: int,
        *,
        max_age: int | None = None,
        speed_factor: float = 1.0,
        respawn_on_zero_velocity: bool = True,
        zero_velocity_epsilon: float = DEFAULT_ZERO_VELOCITY_EPSILON,
        sampling: SamplingMethod | str = SamplingMethod.NEAREST,
        randomize_initial_age: bool = False,
        rng: RandomSource | None = None,
    ) -> None:
        if num_particles < 0:
            raise InvalidConfigurationError(
                f"particle count must be >= 0, got {num_particles}"
            )
        if max_age is not None and max_age < 0:
            raise InvalidConfigurationError(f"max_age must be >= 0, got {max_age}")
        if speed_factor < 0:
            raise InvalidConfigurationError(f"speed_factor must be >= 0, got {speed_factor}")
        if zero_velocity_epsilon < 0:
            raise InvalidConfigurationError(
                f"zero_velocity_epsilon must be >= 0, got {zero_velocity_epsilon}"
            )

        self.grid = grid
        self.max_age = max_age
        self.speed_factor = speed_factor
        self.respawn_on_zero_velocity = respawn_on_zero_velocity
        self.zero_velocity_epsilon = zero_velocity_epsilon
        self.sampling = SamplingMethod(sampling)
        self.rng: RandomSource = rng if rng is not None else make_rng()
        self.respawn_counts: Counter[RespawnReason] = Counter()

        self.particles: list[Particle] = [
            self._spawn(randomize_initial_age) for _ in range(num_particles)
        ]

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self.particles)

    def random_position(self) -> tuple[float, float]:
        """A uniformly random integer pixel on the canvas, as floats."""
        x = min(math.floor(self.rng.random() * self.width), self.width - 1)
        y = min(math.floor(self.rng.random() * self.height), self.height - 1)
        return (float(x), float(y))

    def _spawn(self, randomize_age: bool) -> Particle:
        x, y = self.random_position()
        age = 0
        if randomize_age and self.max_age:
            age = math.floor(self.rng.random() * self.max_age)
        return Particle.at(x, y, age=age)

    def respawn(self, particle: Particle) -> None:
        """Move a particle to a new random position with no trail and zero age."""
        x, y = self.random_position()
        particle.reset(x, y)

    def update(self, dt: float) -> None:
        """Advance every particle by ``dt`` seconds.

        Args:
            dt: Elapsed time since the previous frame, in seconds. Zero is
                valid (first frame); particles then stay put but still age
                and still respawn from calm cells.

        Raises:
            InvalidConfigurationError: If dt is negative.
        """
        if dt < 0:
            raise InvalidConfigurationError(f"dt must be >= 0, got {dt}")

        for particle in self.particles:
            reason = self._advance(particle, dt)
            if reason is not None:
                self.respawn(particle)
                self.respawn_counts[reason] += 1

    def _advance(self, particle: Particle, dt: float) -> RespawnReason | None:
        """Move one particle and return why it must respawn, if it must."""
        particle.age += 1
        vx, vy = self.grid.sample(particle.x, particle.y, self.sampling)

        step = dt * self.speed_factor
        particle.move_to(particle.x + step * vx, particle.y + step * vy)

        eps = self.zero_velocity_epsilon
        if self.respawn_on_zero_velocity and abs(vx) <= eps and abs(vy) <= eps:
            return RespawnReason.ZERO_VELOCITY
        if not self.grid.in_bounds(particle.x, particle.y):
            return RespawnReason.OUT_OF_BOUNDS
        if self.max_age is not None and particle.age > self.max_age:
            return RespawnReason.AGED_OUT
        return None

    def rebind(self, grid: FieldGrid) -> None:
        """Point the population at a rebuilt field of the same size.

        Raises:
            InvalidConfigurationError: If the new grid has different dimensions.
        """
        if (grid.width, grid.height) != (self.grid.width, self.grid.height):
            raise InvalidConfigurationError(
                f"cannot rebind {self.grid.width}x{self.grid.height} particles "
                f"to a {grid.width}x{grid.height} field"
            )
        self.grid = grid
        logger.debug("Particle system rebound to new field with %d seeds", len(grid.seeds))

    def total_respawns(self) -> int:
        return sum(self.respawn_counts.values())
