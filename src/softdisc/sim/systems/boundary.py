from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from pygame.math import Vector2

from ..core.config import BoundaryConfig, BoundaryMode
from ..core.rng import DeterministicRng
from ..utils.math2d import _minimal_image

if TYPE_CHECKING:
    from ..core.particle import Particle

logger = logging.getLogger(__name__)

OverlapTest = Callable[[Vector2, float, int], bool]


class BoundaryPolicy:
    """Per-edge boundary rules applied to a particle after it has been integrated.

    Edges are handled in the order left, right, bottom, top, each on the
    position left behind by the previous edge.
    """

    def __init__(
        self,
        config: BoundaryConfig,
        left: float,
        right: float,
        bottom: float,
        top: float,
    ) -> None:
        self.left_mode = BoundaryMode(config.left)
        self.right_mode = BoundaryMode(config.right)
        self.bottom_mode = BoundaryMode(config.bottom)
        self.top_mode = BoundaryMode(config.top)
        self.reentry_y = config.reentry_y
        self.reinject_attempts = max(0, int(config.reinject_attempts))
        self.set_bounds(left, right, bottom, top)

    def set_bounds(self, left: float, right: float, bottom: float, top: float) -> None:
        self.left = left
        self.right = right
        self.bottom = bottom
        self.top = top

    def set_mode(self, edge: str, mode: BoundaryMode | str) -> None:
        mode = BoundaryMode(mode)
        if edge not in {"left", "right", "bottom", "top"}:
            raise ValueError(f"unknown edge {edge!r}")
        setattr(self, f"{edge}_mode", mode)

    @property
    def wrap_x(self) -> bool:
        return self.left_mode == BoundaryMode.WRAP or self.right_mode == BoundaryMode.WRAP

    @property
    def wrap_y(self) -> bool:
        return self.bottom_mode == BoundaryMode.WRAP or self.top_mode == BoundaryMode.WRAP

    @property
    def periodic_x(self) -> bool:
        return self.left_mode == BoundaryMode.WRAP and self.right_mode == BoundaryMode.WRAP

    @property
    def periodic_y(self) -> bool:
        return self.bottom_mode == BoundaryMode.WRAP and self.top_mode == BoundaryMode.WRAP

    def displacement(self, origin: Vector2, target: Vector2) -> Vector2:
        """Shortest vector from ``origin`` to ``target`` under the wrapped axes."""

        dx = target.x - origin.x
        dy = target.y - origin.y
        if self.wrap_x:
            dx = _minimal_image(dx, self.right - self.left)
        if self.wrap_y:
            dy = _minimal_image(dy, self.top - self.bottom)
        return Vector2(dx, dy)

    def apply(self, particle: Particle, overlaps: OverlapTest, rng: DeterministicRng) -> bool:
        """Correct ``particle`` in place; returns whether it crossed the bottom edge."""

        width = self.right - self.left
        height = self.top - self.bottom
        radius = particle.radius
        pos = particle.position
        marked = False

        if self.left_mode == BoundaryMode.WRAP:
            while pos.x < self.left:
                pos.x += width
        elif self.left_mode == BoundaryMode.RANDOM and pos.x < self.left:
            self._reinject(
                particle,
                lambda: (self.right - radius, rng.next_range(self.bottom + radius, self.top - radius)),
                overlaps,
            )

        if self.right_mode == BoundaryMode.WRAP:
            while pos.x >= self.right:
                pos.x -= width
        elif self.right_mode == BoundaryMode.RANDOM and pos.x > self.right:
            self._reinject(
                particle,
                lambda: (self.left + radius, rng.next_range(self.bottom + radius, self.top - radius)),
                overlaps,
            )

        if self.bottom_mode == BoundaryMode.WRAP:
            if pos.y < self.bottom:
                marked = True
            while pos.y < self.bottom:
                pos.y += height
        elif self.bottom_mode == BoundaryMode.RANDOM and pos.y < self.bottom:
            marked = True
            self._reinject(particle, lambda: self._bottom_reentry(radius, rng), overlaps)

        if self.top_mode == BoundaryMode.WRAP:
            while pos.y >= self.top:
                pos.y -= height
        elif self.top_mode == BoundaryMode.RANDOM and pos.y > self.top:
            self._reinject(
                particle,
                lambda: (rng.next_range(self.left + radius, self.right - radius), self.bottom + radius),
                overlaps,
            )

        return marked

    def _bottom_reentry(self, radius: float, rng: DeterministicRng) -> tuple[float, float]:
        x = rng.next_range(self.left + radius, self.right - radius)
        if self.reentry_y is None:
            return x, self.top - radius
        y = self.reentry_y + 4.0 * radius * rng.next_float()
        return x, min(max(y, self.bottom + radius), self.top - radius)

    def _reinject(
        self,
        particle: Particle,
        draw: Callable[[], tuple[float, float]],
        overlaps: OverlapTest,
    ) -> None:
        particle.position.update(*draw())
        count = 0
        while overlaps(particle.position, particle.radius, particle.id) and count < self.reinject_attempts:
            particle.position.update(*draw())
            count += 1
        if count >= self.reinject_attempts and self.reinject_attempts > 0:
            if overlaps(particle.position, particle.radius, particle.id):
                logger.warning(
                    "Particle %d reinjected at (%.4f, %.4f) while still overlapping after %d attempts",
                    particle.id,
                    particle.position.x,
                    particle.position.y,
                    count,
                )
        particle.freeze()
