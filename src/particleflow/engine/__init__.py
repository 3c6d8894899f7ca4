"""Simulation engine: particle advection, frame clock, and the simulation driver."""

from particleflow.engine.particles import (
    DEFAULT_ZERO_VELOCITY_EPSILON,
    ParticleSystem,
    RespawnReason,
)
from particleflow.engine.simulation import FlowSimulation, FrameClock

__all__ = [
    "DEFAULT_ZERO_VELOCITY_EPSILON",
    "FlowSimulation",
    "FrameClock",
    "ParticleSystem",
    "RespawnReason",
]
