from __future__ import annotations

from typing import Callable, Dict

from ..core.particle import Particle, ParticleKind
from ..core.rng import DeterministicRng
from ..utils.math2d import _safe_normalize


def _advance_passive(particle: Particle, epsilon: float, rng: DeterministicRng) -> None:
    return None


def _advance_run_and_tumble(particle: Particle, epsilon: float, rng: DeterministicRng) -> None:
    if particle.running:
        particle.force += particle.run_direction * particle.run_force
    particle.timer += epsilon
    if particle.running and particle.timer >= particle.run_time:
        particle.running = False
        particle.timer = 0.0
    elif not particle.running and particle.timer >= particle.tumble_time:
        particle.running = True
        particle.timer = 0.0
        direction = _safe_normalize(rng.next_unit_circle() + particle.bias)
        if direction.length_squared() > 0.0:
            particle.run_direction = direction


def _advance_bacteria(particle: Particle, epsilon: float, rng: DeterministicRng) -> None:
    particle.reproduction_timer += epsilon


_ADVANCE: Dict[ParticleKind, Callable[[Particle, float, DeterministicRng], None]] = {
    ParticleKind.PASSIVE: _advance_passive,
    ParticleKind.RUN_AND_TUMBLE: _advance_run_and_tumble,
    ParticleKind.BACTERIA: _advance_bacteria,
}


def integrate(particle: Particle, epsilon: float, rng: DeterministicRng) -> None:
    """Advance one particle by ``epsilon`` with semi-implicit Euler.

    The kind-specific rule runs first so that self-propulsion joins the
    accumulated contact forces before they are consumed.
    """

    _ADVANCE[particle.kind](particle, epsilon, rng)

    inv_mass = particle.inv_mass
    ax = particle.force.x * inv_mass
    ay = particle.force.y * inv_mass
    particle.acceleration.update(ax, ay)
    vx = particle.velocity.x + ax * epsilon
    vy = particle.velocity.y + ay * epsilon
    particle.velocity.update(vx, vy)
    particle.position.update(particle.position.x + vx * epsilon, particle.position.y + vy * epsilon)

    particle.alpha = particle.torque * particle.inv_inertia
    particle.omega += particle.alpha * epsilon
    particle.theta += particle.omega * epsilon
