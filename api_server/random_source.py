"""
Seeded pseudo-random source for the server loop.

Created once at process start and handed to the loop explicitly, so nothing
touches the module-level generator in `random`.
"""

import random
import time
from typing import Optional


class RandomSource:
    """Pseudo-random source seeded from the nanosecond wall clock by default"""

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = time.time_ns()
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def draw_interval(self, minimum: int = 1, maximum: int = 3) -> int:
        """
        Draw a whole-second interval uniformly from [minimum, maximum].

        With the defaults this is a uniform pick from {0, 1, 2} plus one.
        """
        if minimum < 0 or maximum < 0:
            raise ValueError(f"Interval bounds must be non-negative (got {minimum}..{maximum})")
        if maximum < minimum:
            raise ValueError(f"Interval maximum {maximum} is below minimum {minimum}")
        return self._rng.randrange(maximum - minimum + 1) + minimum

    def __repr__(self) -> str:
        return f"RandomSource(seed={self._seed})"
