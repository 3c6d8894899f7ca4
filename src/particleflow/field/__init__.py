"""Velocity field: seeds, strength falloff, and the precomputed pixel grid."""

from particleflow.field.grid import FieldGrid, SamplingMethod
from particleflow.field.seeds import PRESET_LAYOUT, SeedSet
from particleflow.field.strength import (
    StrengthFunction,
    linear_strength,
    power_strength,
    quadratic_strength,
    strength_for_exponent,
)

__all__ = [
    "PRESET_LAYOUT",
    "FieldGrid",
    "SamplingMethod",
    "SeedSet",
    "StrengthFunction",
    "linear_strength",
    "power_strength",
    "quadratic_strength",
    "strength_for_exponent",
]
