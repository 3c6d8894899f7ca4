"""SeedSet: the handful of point sources that define the velocity field."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from particleflow.errors import InvalidConfigurationError
from particleflow.model.seed import Seed
from particleflow.rng import RandomSource, make_rng

logger = logging.getLogger(__name__)

# Fixed four-seed demo layout: (x fraction, y fraction, vx, vy)
PRESET_LAYOUT: tuple[tuple[float, float, float, float], ...] = (
    (0.15, 0.25, 70.0, 20.0),
    (0.75, 0.5, 50.0, -100.0),
    (0.5, 0.75, -100.0, 50.0),
    (0.25, 0.5, 0.0, -30.0),
)


def _check_canvas(width: float, height: float) -> None:
    if width <= 0 or height <= 0:
        raise InvalidConfigurationError(
            f"canvas dimensions must be positive, got {width}x{height}"
        )


def check_radius(radius: float) -> None:
    """Reject zero, negative and NaN radii, which would divide by zero in the falloff."""
    if not radius > 0:
        raise InvalidConfigurationError(f"seed radius must be positive, got {radius}")


def _signed_speed(rng: RandomSource, min_speed: float, max_speed: float) -> float:
    """Draw a magnitude in [min_speed, max_speed) then a random sign."""
    magnitude = min_speed + rng.random() * (max_speed - min_speed)
    sign = -1.0 if rng.random() < 0.5 else 1.0
    return sign * magnitude


@dataclass(frozen=True)
class SeedSet:
    """Immutable ordered collection of seeds.

    Order matters only for floating point summation in the field builder:
    the same sequence always produces the same grid.
    """

    seeds: tuple[Seed, ...] = ()

    def __iter__(self) -> Iterator[Seed]:
        return iter(self.seeds)

    def __len__(self) -> int:
        return len(self.seeds)

    def __getitem__(self, index: int) -> Seed:
        return self.seeds[index]

    @classmethod
    def of(cls, seeds: Iterable[Seed]) -> SeedSet:
        return cls(tuple(seeds))

    @classmethod
    def generate(
        cls,
        count: int,
        width: float,
        height: float,
        speed_range: tuple[float, float],
        radius: float,
        rng: RandomSource | None = None,
    ) -> SeedSet:
        """Generate ``count`` seeds at uniform random positions.

        Each velocity component is ``sign * (min + random() * (max - min))``
        with the sign picked independently per axis, so every axis gets a
        symmetric two-sided speed distribution.

        Args:
            count: Number of seeds (0 gives an empty, all-calm field).
            width: Canvas width in pixels.
            height: Canvas height in pixels.
            speed_range: (min_speed, max_speed) in pixels per second.
            radius: Radius of influence shared by every seed.
            rng: Random source; a fresh unseeded generator if None.

        Raises:
            InvalidConfigurationError: On negative count, bad canvas,
                non-positive radius or an inverted/negative speed range.
        """
        if count < 0:
            raise InvalidConfigurationError(f"seed count must be >= 0, got {count}")
        _check_canvas(width, height)
        check_radius(radius)
        min_speed, max_speed = speed_range
        if min_speed < 0 or max_speed < min_speed:
            raise InvalidConfigurationError(
                f"speed range must satisfy 0 <= min <= max, got {speed_range}"
            )

        if rng is None:
            rng = make_rng()

        seeds = []
        for _ in range(count):
            x = rng.random() * width
            y = rng.random() * height
            vx = _signed_speed(rng, min_speed, max_speed)
            vy = _signed_speed(rng, min_speed, max_speed)
            seeds.append(Seed(x=x, y=y, vx=vx, vy=vy, radius=radius))

        logger.debug("Generated %d seeds on %gx%g canvas", count, width, height)
        return cls(tuple(seeds))

    @classmethod
    def preset(cls, width: float, height: float, radius: float) -> SeedSet:
        """The fixed four-seed layout, scaled to the canvas."""
        _check_canvas(width, height)
        check_radius(radius)
        return cls(
            tuple(
                Seed(x=fx * width, y=fy * height, vx=vx, vy=vy, radius=radius)
                for fx, fy, vx, vy in PRESET_LAYOUT
            )
        )
