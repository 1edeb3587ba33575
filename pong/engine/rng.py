"""
Seeded RNG so serves (and every test scenario built on them) are reproducible.
"""
from __future__ import annotations

import random


class SeededRNG:
    """Wrapper around random.Random; one per match, injected into serves and sparring."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def sign(self) -> int:
        """+1 or -1 with equal probability."""
        return 1 if self._rng.random() > 0.5 else -1
