"""Frame projector: simulation state to renderer-ready frames.

Converts a FlowSimulation into a Frame dataclass holding everything an
external renderer needs for one animation frame: one line segment per
particle, optional seed markers and optional field arrows. Nothing here
draws; trail fading and compositing are the renderer's business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from particleflow.engine.simulation import FlowSimulation
    from particleflow.field.grid import FieldGrid
    from particleflow.model.particle import Particle
    from particleflow.model.seed import Seed


PARTICLE_COLOR = "#333333"
SEED_COLOR = "#ff0000"
FIELD_COLOR = "#64646433"  # translucent grey
SEED_MARKER_SIZE = 6.0


@dataclass
class ParticleVisual:
    """The segment a particle travelled this frame.

    Right after a respawn the segment is degenerate (start == end) and
    renders as a point.
    """

    x0: float
    y0: float
    x1: float
    y1: float
    age: int = 0
    color: str = PARTICLE_COLOR

    @property
    def is_point(self) -> bool:
        return self.x0 == self.x1 and self.y0 == self.y1


@dataclass
class SeedVisual:
    """A seed marker plus a line showing its velocity."""

    x: float
    y: float
    # End of the velocity line, one second of travel from the seed
    tip_x: float
    tip_y: float
    radius: float
    size: float = SEED_MARKER_SIZE
    color: str = SEED_COLOR


@dataclass
class FieldArrowVisual:
    """Field velocity at a sample pixel, drawn as a short line."""

    x: float
    y: float
    tip_x: float
    tip_y: float
    color: str = FIELD_COLOR


@dataclass
class Frame:
    """A complete snapshot for rendering one animation frame."""

    frame: int
    time: float
    width: int
    height: int

    particles: list[ParticleVisual] = field(default_factory=list)
    seeds: list[SeedVisual] = field(default_factory=list)
    arrows: list[FieldArrowVisual] = field(default_factory=list)


def project(simulation: FlowSimulation) -> Frame:
    """Project simulation state into a Frame.

    Seeds and field arrows are included only when the simulation's
    ``show_seeds`` / ``show_field`` toggles are on.

    Args:
        simulation: The simulation to snapshot

    Returns:
        Frame containing all visual elements for rendering
    """
    frame = Frame(
        frame=simulation.frame,
        time=simulation.time,
        width=simulation.width,
        height=simulation.height,
    )

    for particle in simulation.particles:
        frame.particles.append(_project_particle(particle))

    if simulation.show_seeds:
        frame.seeds = [_project_seed(seed) for seed in simulation.seeds]

    if simulation.show_field:
        frame.arrows = field_arrows(
            simulation.grid,
            simulation.field_spacing,
            simulation.field_arrow_scale,
        )

    return frame


def _project_particle(particle: Particle) -> ParticleVisual:
    return ParticleVisual(
        x0=particle.prev_x,
        y0=particle.prev_y,
        x1=particle.x,
        y1=particle.y,
        age=particle.age,
    )


def _project_seed(seed: Seed) -> SeedVisual:
    return SeedVisual(
        x=seed.x,
        y=seed.y,
        tip_x=seed.x + seed.vx,
        tip_y=seed.y + seed.vy,
        radius=seed.radius,
    )


def field_arrows(grid: FieldGrid, spacing: int, scale: float) -> list[FieldArrowVisual]:
    """Sample the field on a regular lattice for a field-only rendering.

    Args:
        grid: Field to sample
        spacing: Pixels between samples along each axis
        scale: Arrow length per unit velocity

    Returns:
        One arrow per sample pixel, calm pixels included (as zero-length arrows)
    """
    arrows = []
    for x in range(0, grid.width, spacing):
        for y in range(0, grid.height, spacing):
            vx, vy = grid.lookup(x, y)
            arrows.append(
                FieldArrowVisual(x=x, y=y, tip_x=x + scale * vx, tip_y=y + scale * vy)
            )
    return arrows
