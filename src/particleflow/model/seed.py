"""Seed dataclass: a point source of velocity with a bounded radius of influence."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Seed:
    """A point source contributing its velocity to nearby pixels.

    Velocity is in pixels per second. Pixels farther than ``radius`` from
    (x, y) receive nothing from this seed.
    """

    x: float
    y: float
    vx: float  # pixels / second
    vy: float
    radius: float

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> tuple[float, float]:
        return (self.vx, self.vy)
