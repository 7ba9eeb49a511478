from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from pygame.math import Vector2

from ..systems.contact import particle_contact
from .errors import Outcome, PhysicalParameterError


class ParticleKind(str, Enum):
    PASSIVE = "Passive"
    RUN_AND_TUMBLE = "RunAndTumble"
    BACTERIA = "Bacteria"


def disc_mass(radius: float, density: float) -> float:
    return density * math.pi * radius * radius


@dataclass(slots=True, eq=False)
class Particle:
    """A soft disc.

    Forces are accumulated into ``force``/``normal_force``/``shear_force``/``torque``
    by any number of contact calls during a step and consumed once by the
    integration step. An inverse mass of zero marks an immovable body.
    """

    id: int
    position: Vector2
    radius: float
    kind: ParticleKind = ParticleKind.PASSIVE
    velocity: Vector2 = field(default_factory=Vector2)
    acceleration: Vector2 = field(default_factory=Vector2)
    theta: float = 0.0
    omega: float = 0.0
    alpha: float = 0.0
    inv_mass: float = 1.0
    inv_inertia: float = 1.0
    drag: float = 0.0
    repulsion: float = 50000.0
    dissipation: float = 50.0
    friction: float = 0.0
    force: Vector2 = field(default_factory=Vector2)
    normal_force: Vector2 = field(default_factory=Vector2)
    shear_force: Vector2 = field(default_factory=Vector2)
    torque: float = 0.0
    # Run-and-tumble state
    run_direction: Vector2 = field(default_factory=lambda: Vector2(1.0, 0.0))
    bias: Vector2 = field(default_factory=Vector2)
    run_force: float = 0.0
    run_time: float = 0.0
    tumble_time: float = 0.0
    timer: float = 0.0
    running: bool = True
    # Bacteria state
    reproduction_timer: float = 0.0
    maturation_time: float = 0.0
    reproduction_delay: float = 0.0

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise PhysicalParameterError(f"particle {self.id}: radius must be positive, got {self.radius}")

    @property
    def mass(self) -> float:
        return math.inf if self.inv_mass == 0.0 else 1.0 / self.inv_mass

    @property
    def inertia(self) -> float:
        return math.inf if self.inv_inertia == 0.0 else 1.0 / self.inv_inertia

    @property
    def fixed(self) -> bool:
        return self.inv_mass == 0.0

    @property
    def momentum(self) -> Vector2:
        if self.fixed:
            return Vector2()
        return self.velocity * self.mass

    @property
    def kinetic_energy(self) -> float:
        if self.fixed:
            return 0.0
        energy = 0.5 * self.mass * self.velocity.length_squared()
        if self.inv_inertia > 0.0:
            energy += 0.5 * self.inertia * self.omega * self.omega
        return energy

    def can_reproduce(self) -> bool:
        return self.kind == ParticleKind.BACTERIA and self.reproduction_timer >= self.maturation_time

    def set_mass(self, mass: float) -> Outcome:
        if not mass > 0.0 or math.isinf(mass):
            return Outcome.invalid_parameter(f"particle {self.id}: mass must be finite and positive, got {mass}")
        self.inv_mass = 1.0 / mass
        return Outcome.success()

    def set_inertia(self, inertia: float) -> Outcome:
        if not inertia > 0.0 or math.isinf(inertia):
            return Outcome.invalid_parameter(
                f"particle {self.id}: moment of inertia must be finite and positive, got {inertia}"
            )
        self.inv_inertia = 1.0 / inertia
        return Outcome.success()

    def set_radius(self, radius: float) -> Outcome:
        if not radius > 0.0:
            return Outcome.invalid_parameter(f"particle {self.id}: radius must be positive, got {radius}")
        self.radius = radius
        return Outcome.success()

    def interact(self, other: Particle, displacement: Vector2 | None = None, torque_multiplier: float = 1.0) -> bool:
        return particle_contact(self, other, displacement, torque_multiplier)

    def reset_accumulators(self) -> None:
        self.force.update(0.0, 0.0)
        self.normal_force.update(0.0, 0.0)
        self.shear_force.update(0.0, 0.0)
        self.torque = 0.0

    def freeze(self) -> None:
        self.velocity.update(0.0, 0.0)
        self.acceleration.update(0.0, 0.0)
        self.omega = 0.0
        self.alpha = 0.0

    def fix(self, fixed: bool = True, density: float = 1.0) -> None:
        if fixed:
            self.inv_mass = 0.0
            self.inv_inertia = 0.0
            self.freeze()
            return
        mass = disc_mass(self.radius, density)
        self.inv_mass = 1.0 / mass
        self.inv_inertia = 2.0 / (mass * self.radius * self.radius)
