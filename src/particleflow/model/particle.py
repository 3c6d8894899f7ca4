"""Particle dataclass: a massless point advected through the velocity field."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Particle:
    """A point carried along by the field.

    The renderer draws a segment from the previous position to the current
    one each frame. After a respawn both are equal, so that frame's segment
    collapses to a point.
    """

    x: float
    y: float
    prev_x: float = 0.0
    prev_y: float = 0.0
    age: int = 0  # frames since last respawn

    @classmethod
    def at(cls, x: float, y: float, age: int = 0) -> Particle:
        """Create a particle resting at (x, y)."""
        return cls(x=x, y=y, prev_x=x, prev_y=y, age=age)

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def previous_position(self) -> tuple[float, float]:
        return (self.prev_x, self.prev_y)

    def move_to(self, x: float, y: float) -> None:
        """Record the current position as previous and move to (x, y)."""
        self.prev_x = self.x
        self.prev_y = self.y
        self.x = x
        self.y = y

    def reset(self, x: float, y: float) -> None:
        """Place the particle at (x, y) with no trail and zero age."""
        self.x = self.prev_x = x
        self.y = self.prev_y = y
        self.age = 0
