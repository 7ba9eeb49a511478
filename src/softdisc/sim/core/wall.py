from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pygame.math import Vector2

from ..systems.contact import wall_contact

if TYPE_CHECKING:
    from .particle import Particle


@dataclass(slots=True, eq=False)
class Wall:
    """Immovable line segment from ``origin`` to ``origin + span``."""

    origin: Vector2
    span: Vector2
    repulsion: float = 50000.0
    dissipation: float = 1000.0
    friction: float = 0.0
    gamma: float = 5.0
    expires_at: float | None = None
    direction: Vector2 = field(init=False)
    length: float = field(init=False)

    def __post_init__(self) -> None:
        self.origin = Vector2(self.origin)
        self.span = Vector2(self.span)
        self.length = self.span.length()
        self.direction = self.span / self.length if self.length > 0.0 else Vector2()

    @classmethod
    def between(cls, start: Vector2, end: Vector2, **params: float) -> "Wall":
        return cls(Vector2(start), Vector2(end) - Vector2(start), **params)

    @property
    def end(self) -> Vector2:
        return self.origin + self.span

    @property
    def normal(self) -> Vector2:
        return Vector2(-self.direction.y, self.direction.x)

    @property
    def temporary(self) -> bool:
        return self.expires_at is not None

    def closest_point(self, point: Vector2) -> Vector2:
        along = (point - self.origin).dot(self.direction)
        along = max(0.0, min(self.length, along))
        return self.origin + self.direction * along

    def interact(self, particle: Particle, torque_multiplier: float = 1.0) -> bool:
        return wall_contact(self, particle, torque_multiplier)

    def expired(self, time: float) -> bool:
        return self.expires_at is not None and self.expires_at < time
