from __future__ import annotations

import math
import random

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_chance(self, probability: float) -> bool:
        """True with ``probability``; values outside [0, 1] saturate."""

        return self._random.random() < probability

    def next_unit_circle(self) -> Vector2:
        angle = self._random.uniform(0, 2 * math.pi)
        vector = Vector2()
        vector.from_polar((1, math.degrees(angle)))
        return vector

    def next_in_rect(self, left: float, right: float, bottom: float, top: float, margin: float = 0.0) -> Vector2:
        """Uniform point in the rectangle shrunk by ``margin`` on every side."""

        return Vector2(
            self._random.uniform(left + margin, right - margin),
            self._random.uniform(bottom + margin, top - margin),
        )
