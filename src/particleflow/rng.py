"""Injectable randomness for seed generation and particle respawn."""

from __future__ import annotations

import random
from typing import Protocol


class RandomSource(Protocol):
    """Anything with a ``random()`` returning floats in [0, 1).

    ``random.Random`` satisfies this; tests pass scripted sequences.
    """

    def random(self) -> float: ...


def make_rng(seed: int | None = None) -> random.Random:
    """Create an independent generator, reproducible when ``seed`` is given."""
    return random.Random(seed)
