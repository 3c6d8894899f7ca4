"""Frame projection: simulation state to renderer-ready snapshots."""

from particleflow.projection.projector import (
    FieldArrowVisual,
    Frame,
    ParticleVisual,
    SeedVisual,
    field_arrows,
    project,
)

__all__ = [
    "FieldArrowVisual",
    "Frame",
    "ParticleVisual",
    "SeedVisual",
    "field_arrows",
    "project",
]
