"""Domain model: Seed, Particle."""

from particleflow.model.particle import Particle
from particleflow.model.seed import Seed

__all__ = [
    "Particle",
    "Seed",
]
