"""FieldGrid: dense per-pixel velocity lookup precomputed from seeds.

Building the grid costs O(width * height * seeds) once, up front, so that the
per-frame particle update is a constant-time array read per particle.

Arrays are indexed ``[x, y]``: ``u[50, 100]`` is the x velocity at pixel
(50, 100).
"""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum

import numpy as np

from particleflow.errors import InvalidConfigurationError, OutOfBoundsError
from particleflow.field.seeds import SeedSet, check_radius
from particleflow.field.strength import StrengthFunction, quadratic_strength
from particleflow.logging_config import log_duration
from particleflow.model.seed import Seed

logger = logging.getLogger(__name__)


class SamplingMethod(StrEnum):
    """How a continuous particle position reads the grid."""

    NEAREST = "nearest"  # floor to the containing cell
    BILINEAR = "bilinear"  # blend the four surrounding cells


def _check_dimensions(width: int, height: int) -> None:
    # Sign first: NaN fails it, and int() would raise on NaN or infinity
    if not (width > 0 and height > 0):
        raise InvalidConfigurationError(
            f"grid dimensions must be positive, got {width}x{height}"
        )
    if not (math.isfinite(width) and math.isfinite(height)) or (
        int(width) != width or int(height) != height
    ):
        raise InvalidConfigurationError(
            f"grid dimensions must be integers, got {width}x{height}"
        )


def _check_seeds(seeds: Iterable[Seed]) -> None:
    for seed in seeds:
        check_radius(seed.radius)


def _accumulate(u: np.ndarray, v: np.ndarray, seed: Seed, strength: StrengthFunction) -> None:
    """Add one seed's weighted velocity to every pixel within its radius.

    Only the seed's bounding box is evaluated; pixels in the box but outside
    the circle get weight zero.
    """
    width, height = u.shape
    x0 = max(0, math.ceil(seed.x - seed.radius))
    x1 = min(width - 1, math.floor(seed.x + seed.radius))
    y0 = max(0, math.ceil(seed.y - seed.radius))
    y1 = min(height - 1, math.floor(seed.y + seed.radius))
    if x0 > x1 or y0 > y1:
        return

    dx = np.arange(x0, x1 + 1, dtype=np.float64)[:, np.newaxis] - seed.x
    dy = np.arange(y0, y1 + 1, dtype=np.float64)[np.newaxis, :] - seed.y
    distance = np.sqrt(dx * dx + dy * dy)

    weight = np.where(distance <= seed.radius, strength(distance, seed.radius), 0.0)
    u[x0 : x1 + 1, y0 : y1 + 1] += weight * seed.vx
    v[x0 : x1 + 1, y0 : y1 + 1] += weight * seed.vy


@dataclass(frozen=True, eq=False)
class FieldGrid:
    """Read-only velocity field over the integer pixels of a canvas.

    Use ``FieldGrid.build`` rather than constructing directly.
    """

    width: int
    height: int
    u: np.ndarray = field(repr=False)  # x velocity, shape (width, height)
    v: np.ndarray = field(repr=False)  # y velocity, shape (width, height)
    seeds: SeedSet = field(default_factory=SeedSet)
    strength: StrengthFunction = quadratic_strength

    @classmethod
    def build(
        cls,
        seeds: Iterable[Seed],
        width: int,
        height: int,
        strength: StrengthFunction = quadratic_strength,
    ) -> FieldGrid:
        """Precompute the field for every pixel in [0, width) x [0, height).

        Each pixel holds the componentwise sum of ``strength(d) * velocity``
        over the seeds whose distance ``d`` to the pixel is within their
        radius. Pixels reached by no seed hold (0, 0).

        Args:
            seeds: Seeds in summation order.
            width: Canvas width in pixels.
            height: Canvas height in pixels.
            strength: Falloff function, quadratic by default.

        Returns:
            A FieldGrid with read-only arrays.

        Raises:
            InvalidConfigurationError: If width or height is not a positive
                integer, or a seed's radius is not positive.
        """
        _check_dimensions(width, height)
        width, height = int(width), int(height)
        seed_set = seeds if isinstance(seeds, SeedSet) else SeedSet.of(seeds)
        _check_seeds(seed_set)

        u = np.zeros((width, height), dtype=np.float64)
        v = np.zeros((width, height), dtype=np.float64)
        with log_duration(
            logger, "Built %dx%d field from %d seeds", width, height, len(seed_set)
        ):
            for seed in seed_set:
                _accumulate(u, v, seed, strength)

        grid = cls._freeze(width, height, u, v, seed_set, strength)
        logger.debug(
            "Field stats: max_speed=%.3f, calm_fraction=%.3f",
            grid.max_speed(),
            grid.calm_fraction(),
        )
        return grid

    @classmethod
    def _freeze(
        cls,
        width: int,
        height: int,
        u: np.ndarray,
        v: np.ndarray,
        seeds: SeedSet,
        strength: StrengthFunction,
    ) -> FieldGrid:
        u.flags.writeable = False
        v.flags.writeable = False
        return cls(width=width, height=height, u=u, v=v, seeds=seeds, strength=strength)

    def extended(self, seeds: Iterable[Seed]) -> FieldGrid:
        """Return a new grid with extra seeds accumulated after the existing ones.

        Equivalent, bit for bit, to building from the concatenated seed
        sequence, but only the new seeds are evaluated.

        Raises:
            InvalidConfigurationError: If a new seed's radius is not positive.
        """
        added = tuple(seeds)
        _check_seeds(added)
        u = self.u.copy()
        v = self.v.copy()
        for seed in added:
            _accumulate(u, v, seed, self.strength)
        logger.debug("Extended field with %d seeds", len(added))
        return self._freeze(
            self.width,
            self.height,
            u,
            v,
            SeedSet(self.seeds.seeds + added),
            self.strength,
        )

    def in_bounds(self, x: float, y: float) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def lookup(self, x: int, y: int) -> tuple[float, float]:
        """Velocity stored for integer pixel (x, y).

        Use ``sample`` for continuous positions.

        Raises:
            TypeError: If x or y is not an integer.
            OutOfBoundsError: If (x, y) is outside the grid. Callers must
                guard positions themselves; nothing is clamped here.
        """
        if not (isinstance(x, numbers.Integral) and isinstance(y, numbers.Integral)):
            raise TypeError(f"lookup takes integer pixel coordinates, got ({x!r}, {y!r})")
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(x, y, self.width, self.height)
        return (float(self.u[x, y]), float(self.v[x, y]))

    def sample(
        self,
        px: float,
        py: float,
        method: SamplingMethod = SamplingMethod.NEAREST,
    ) -> tuple[float, float]:
        """Velocity at a continuous position.

        NEAREST reads the containing cell. BILINEAR blends the four cells
        around the position; at the last row/column the missing neighbour
        is the edge cell itself.

        Raises:
            OutOfBoundsError: If the position is outside the canvas.
        """
        if not self.in_bounds(px, py):
            raise OutOfBoundsError(px, py, self.width, self.height)

        x0 = math.floor(px)
        y0 = math.floor(py)
        if method == SamplingMethod.NEAREST:
            return self.lookup(x0, y0)

        x1 = min(x0 + 1, self.width - 1)
        y1 = min(y0 + 1, self.height - 1)
        fx = px - x0
        fy = py - y0

        def blend(arr: np.ndarray) -> float:
            top = arr[x0, y0] * (1.0 - fx) + arr[x1, y0] * fx
            bottom = arr[x0, y1] * (1.0 - fx) + arr[x1, y1] * fx
            return float(top * (1.0 - fy) + bottom * fy)

        return (blend(self.u), blend(self.v))

    def max_speed(self) -> float:
        """Largest velocity magnitude anywhere on the grid."""
        return float(np.max(np.hypot(self.u, self.v)))

    def calm_fraction(self, epsilon: float = 0.0) -> float:
        """Share of pixels whose velocity components are both within epsilon of zero."""
        calm = (np.abs(self.u) <= epsilon) & (np.abs(self.v) <= epsilon)
        return float(np.count_nonzero(calm)) / calm.size
