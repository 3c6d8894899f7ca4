"""Shared fixtures for particleflow tests."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable

import pytest


class ScriptedRandom:
    """Random source that replays a fixed sequence of values, cycling when exhausted."""

    def __init__(self, values: Iterable[float]) -> None:
        self.values = list(values)
        self._cycle = itertools.cycle(self.values)
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return next(self._cycle)


@pytest.fixture
def scripted_random() -> Callable[..., ScriptedRandom]:
    """Factory fixture: ``scripted_random(0.5, 0.25)`` replays those values."""

    def make(*values: float) -> ScriptedRandom:
        return ScriptedRandom(values)

    return make


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo configure_logging() side effects so caplog keeps seeing records."""
    logger = logging.getLogger("particleflow")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
