"""Seed strength functions: distance from a seed centre to an influence weight.

Every strength function maps ``(distance, radius)`` to a weight in [0, 1]
that is 1 at the centre, non-increasing in distance, and 0 at or beyond the
radius. They accept scalars or numpy arrays so the field builder can evaluate
a whole canvas at once.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from particleflow.errors import InvalidConfigurationError

StrengthFunction = Callable[[Any, float], Any]


def power_strength(exponent: float) -> StrengthFunction:
    """Build ``(1 - d/radius) ** exponent``, clipped to zero past the radius.

    Args:
        exponent: Falloff exponent. 1 is linear, 2 fades faster near the edge.

    Raises:
        InvalidConfigurationError: If exponent is not positive.
    """
    if exponent <= 0:
        raise InvalidConfigurationError(f"strength exponent must be > 0, got {exponent}")

    def strength(distance: Any, radius: float) -> Any:
        s = np.clip(1.0 - np.asarray(distance, dtype=np.float64) / radius, 0.0, 1.0)
        return s**exponent

    strength.__name__ = f"power_strength_{exponent:g}"
    return strength


def linear_strength(distance: Any, radius: float) -> Any:
    """``1 - d/radius``."""
    return np.clip(1.0 - np.asarray(distance, dtype=np.float64) / radius, 0.0, 1.0)


def quadratic_strength(distance: Any, radius: float) -> Any:
    """``(1 - d/radius) ** 2``, the default falloff."""
    s = linear_strength(distance, radius)
    return s * s


def strength_for_exponent(exponent: float) -> StrengthFunction:
    """Return the named function for exponents 1 and 2, a power law otherwise."""
    if exponent == 1:
        return linear_strength
    if exponent == 2:
        return quadratic_strength
    return power_strength(exponent)
