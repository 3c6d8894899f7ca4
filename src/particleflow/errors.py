"""Error taxonomy for particleflow.

Two conditions are raised by the core:

- OutOfBoundsError: a field lookup outside the grid. This is a caller bug
  (a particle position escaped the canvas) and is never clamped away.
- InvalidConfigurationError: bad canvas dimensions, counts or ranges, raised
  at construction time before any grid or particle exists.
"""

from __future__ import annotations


class ParticleFlowError(Exception):
    """Base class for particleflow errors."""


class OutOfBoundsError(ParticleFlowError, IndexError):
    """Raised when a grid coordinate lies outside [0, width) x [0, height)."""

    def __init__(self, x: float, y: float, width: int, height: int) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(f"Coordinate ({x}, {y}) outside grid bounds {width}x{height}")


class InvalidConfigurationError(ParticleFlowError, ValueError):
    """Raised when simulation parameters are rejected at construction."""
