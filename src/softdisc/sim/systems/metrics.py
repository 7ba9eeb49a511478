from __future__ import annotations

import math
from typing import Iterable, List

from pygame.math import Vector2

from ..core.config import DomainConfig
from ..core.particle import Particle
from ..types.metrics import StepMetrics


def create_metrics(
    iteration: int,
    time: float,
    epsilon: float,
    population: int,
    births: int,
    deaths: int,
    pair_checks: int,
    duration_ms: float,
) -> StepMetrics:
    return StepMetrics(
        iteration=iteration,
        time=time,
        epsilon=epsilon,
        population=population,
        births=births,
        deaths=deaths,
        pair_checks=pair_checks,
        step_duration_ms=duration_ms,
    )


def in_bounds(particle: Particle, domain: DomainConfig) -> bool:
    """Whether any part of the disc lies inside the domain rectangle."""

    pos = particle.position
    radius = particle.radius
    if pos.x + radius < domain.left or pos.x - radius > domain.right:
        return False
    if pos.y + radius < domain.bottom or pos.y - radius > domain.top:
        return False
    return True


def average_speed(particles: Iterable[Particle], domain: DomainConfig) -> float:
    total = 0.0
    count = 0
    for particle in particles:
        if in_bounds(particle, domain):
            total += particle.velocity.length()
            count += 1
    return total / count if count > 0 else -1.0


def average_speed_sq(particles: Iterable[Particle], domain: DomainConfig) -> float:
    total = 0.0
    count = 0
    for particle in particles:
        if in_bounds(particle, domain):
            total += particle.velocity.length_squared()
            count += 1
    return total / count if count > 0 else -1.0


def average_kinetic_energy(particles: Iterable[Particle], domain: DomainConfig) -> float:
    total = 0.0
    count = 0
    for particle in particles:
        if in_bounds(particle, domain):
            total += particle.kinetic_energy
            count += 1
    return total / count if count > 0 else -1.0


def net_momentum(particles: Iterable[Particle], domain: DomainConfig) -> Vector2:
    momentum = Vector2()
    for particle in particles:
        if in_bounds(particle, domain):
            momentum += particle.momentum
    return momentum


def net_velocity(particles: Iterable[Particle], domain: DomainConfig) -> Vector2:
    velocity = Vector2()
    for particle in particles:
        if in_bounds(particle, domain):
            velocity += particle.velocity
    return velocity


def highest_position(particles: Iterable[Particle], domain: DomainConfig) -> float:
    y = domain.bottom
    for particle in particles:
        if particle.position.y > y:
            y = particle.position.y
    return y


def max_velocity(particles: Iterable[Particle], domain: DomainConfig) -> float:
    best = -1.0
    for particle in particles:
        if in_bounds(particle, domain):
            best = max(best, particle.velocity.length_squared())
    return math.sqrt(best) if best > 0.0 else -1.0


def max_acceleration(particles: Iterable[Particle], domain: DomainConfig) -> float:
    best = -1.0
    for particle in particles:
        if in_bounds(particle, domain):
            best = max(best, particle.acceleration.length_squared())
    return math.sqrt(best) if best > 0.0 else -1.0


def density_y_profile(particles: Iterable[Particle], domain: DomainConfig, bins: int) -> List[float]:
    """Particle counts in ``bins`` horizontal slabs; out-of-range heights land in the end bins."""

    bins = max(1, int(bins))
    profile = [0.0] * bins
    scale = bins / domain.height
    for particle in particles:
        y = (particle.position.y - domain.bottom) * scale
        if math.isfinite(y):
            index = min(bins - 1, max(0, math.floor(y)))
        else:
            index = bins - 1 if y > 0.0 else 0
        profile[index] += 1.0
    return profile
