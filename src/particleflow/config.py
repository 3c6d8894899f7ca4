"""Simulation settings loaded from the environment.

Pydantic-based settings read from environment variables (prefix
``PARTICLEFLOW_``) and an optional .env file. Defaults give the classic
particle flow demo: an 800x600 canvas, 20 random seeds with a
300 pixel radius, and 1500 particles.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from functools import lru_cache
from typing import Any, Self

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from particleflow.errors import InvalidConfigurationError
from particleflow.field.grid import SamplingMethod

logger = logging.getLogger(__name__)


class SeedLayout(StrEnum):
    """Where the field's seeds come from."""

    RANDOM = "random"
    PRESET = "preset"


class FlowSettings(BaseSettings):
    """Parameters for one particle flow simulation.

    Environment Variables:
        PARTICLEFLOW_WIDTH / PARTICLEFLOW_HEIGHT: Canvas size in pixels
        PARTICLEFLOW_NUM_PARTICLES: Population size
        PARTICLEFLOW_NUM_SEEDS: Seeds to generate (random layout only)
        PARTICLEFLOW_SEED_LAYOUT: random or preset
        PARTICLEFLOW_SEED_MIN_SPEED / PARTICLEFLOW_SEED_MAX_SPEED: px/s per axis
        PARTICLEFLOW_SEED_RADIUS: Radius of influence in pixels
        PARTICLEFLOW_STRENGTH_EXPONENT: 1 for linear falloff, 2 for quadratic
        PARTICLEFLOW_MAX_PARTICLE_AGE: Frames before forced respawn (unset = never)
        PARTICLEFLOW_SPEED_FACTOR: Multiplier on every displacement
        PARTICLEFLOW_SAMPLING: nearest or bilinear
        PARTICLEFLOW_RANDOM_SEED: Seed for a reproducible run

    Example:
        >>> settings = FlowSettings()  # environment
        >>> settings = FlowSettings(width=400, height=300, num_particles=200)
    """

    model_config = SettingsConfigDict(
        env_prefix="PARTICLEFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Canvas
    width: int = Field(default=800, gt=0, description="Canvas width in pixels")
    height: int = Field(default=600, gt=0, description="Canvas height in pixels")

    # Seeds
    num_seeds: int = Field(default=20, ge=0, description="Number of random seeds")
    seed_layout: SeedLayout = Field(
        default=SeedLayout.RANDOM,
        description="random: generated seeds, preset: the fixed four-seed layout",
    )
    seed_min_speed: float = Field(default=10.0, ge=0.0, description="Minimum |v| per axis")
    seed_max_speed: float = Field(default=80.0, ge=0.0, description="Maximum |v| per axis")
    seed_radius: float = Field(default=300.0, gt=0.0, description="Radius of influence")
    strength_exponent: float = Field(
        default=2.0,
        gt=0.0,
        description="Falloff exponent of (1 - d/radius)",
    )

    # Particles
    num_particles: int = Field(default=1500, ge=0, description="Population size")
    max_particle_age: int | None = Field(
        default=None,
        ge=0,
        description="Frames before a particle is respawned (None disables aging)",
    )
    randomize_initial_age: bool = Field(
        default=False,
        description="Desynchronize aging by starting particles at random ages",
    )
    speed_factor: float = Field(default=1.0, ge=0.0, description="Displacement multiplier")
    respawn_on_zero_velocity: bool = Field(
        default=True,
        description="Respawn particles that land in calm cells",
    )
    zero_velocity_epsilon: float = Field(
        default=1e-9,
        ge=0.0,
        description="Velocity components within this of zero count as calm",
    )
    sampling: SamplingMethod = Field(
        default=SamplingMethod.NEAREST,
        description="Field sampling: nearest cell or bilinear",
    )

    # Display toggles, consumed by the projector
    show_seeds: bool = Field(default=False, description="Include seed markers in frames")
    show_field: bool = Field(default=False, description="Include field arrows in frames")
    field_spacing: int = Field(default=20, gt=0, description="Pixels between field arrows")
    field_arrow_scale: float = Field(
        default=0.1,
        gt=0.0,
        description="Arrow length per unit velocity",
    )

    random_seed: int | None = Field(
        default=None,
        description="Seed for the random source (None = nondeterministic)",
    )

    @field_validator("seed_layout", "sampling", mode="before")
    @classmethod
    def normalize_enum(cls, v: Any) -> Any:
        """Accept enum values in any case."""
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def check_speed_range(self) -> Self:
        if self.seed_max_speed < self.seed_min_speed:
            raise ValueError(
                f"seed_max_speed ({self.seed_max_speed}) must be >= "
                f"seed_min_speed ({self.seed_min_speed})"
            )
        return self

    @property
    def speed_range(self) -> tuple[float, float]:
        return (self.seed_min_speed, self.seed_max_speed)

    def __repr__(self) -> str:
        return (
            f"FlowSettings("
            f"canvas={self.width}x{self.height}, "
            f"particles={self.num_particles}, "
            f"seeds={self.num_seeds if self.seed_layout == SeedLayout.RANDOM else 'preset'}, "
            f"speed={self.seed_min_speed}-{self.seed_max_speed}, "
            f"radius={self.seed_radius}, "
            f"max_age={self.max_particle_age}, "
            f"sampling={self.sampling.value}"
            f")"
        )


def to_settings_error(exc: ValidationError) -> InvalidConfigurationError:
    """Flatten a pydantic ValidationError into an InvalidConfigurationError."""
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
        for err in exc.errors()
    )
    return InvalidConfigurationError(f"Invalid settings: {problems}")


def load_settings(**overrides: Any) -> FlowSettings:
    """Build settings from the environment plus explicit overrides.

    Raises:
        InvalidConfigurationError: If any value fails validation.
    """
    try:
        return FlowSettings(**overrides)
    except ValidationError as e:
        raise to_settings_error(e) from e


@lru_cache
def get_settings() -> FlowSettings:
    """Cached settings singleton.

    Call ``get_settings.cache_clear()`` to re-read the environment.
    """
    settings = load_settings()
    logger.info("Loaded settings: %s", settings)
    return settings
