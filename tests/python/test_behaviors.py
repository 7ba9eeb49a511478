from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from softdisc.sim.core.particle import Particle, ParticleKind
from softdisc.sim.core.rng import DeterministicRng
from softdisc.sim.systems.behaviors import integrate


def test_semi_implicit_euler_uses_updated_velocity():
    particle = Particle(id=0, position=Vector2(0.0, 0.0), radius=0.1)
    particle.velocity = Vector2(1.0, 0.0)
    particle.force = Vector2(0.0, 2.0)
    particle.torque = 3.0
    assert particle.set_mass(2.0)
    assert particle.set_inertia(0.5)

    integrate(particle, 0.1, DeterministicRng(1))

    assert particle.acceleration == Vector2(0.0, 1.0)
    assert particle.velocity.x == approx(1.0)
    assert particle.velocity.y == approx(0.1)
    assert particle.position.x == approx(0.1)
    assert particle.position.y == approx(0.01)
    assert particle.alpha == approx(6.0)
    assert particle.omega == approx(0.6)
    assert particle.theta == approx(0.06)


def test_fixed_particle_ignores_force():
    particle = Particle(id=0, position=Vector2(0.3, 0.3), radius=0.1)
    particle.velocity = Vector2(5.0, 5.0)
    particle.fix()
    particle.force = Vector2(100.0, -100.0)
    particle.torque = 10.0

    integrate(particle, 0.1, DeterministicRng(1))

    assert particle.position == Vector2(0.3, 0.3)
    assert particle.velocity == Vector2()
    assert particle.omega == 0.0
    assert particle.kinetic_energy == 0.0


def test_run_and_tumble_cycle():
    particle = Particle(
        id=0,
        position=Vector2(),
        radius=0.01,
        kind=ParticleKind.RUN_AND_TUMBLE,
        run_force=4.0,
        run_time=0.25,
        tumble_time=0.25,
        bias=Vector2(0.0, 100.0),
    )
    rng = DeterministicRng(3)

    integrate(particle, 0.1, rng)
    assert particle.force == Vector2(4.0, 0.0)
    assert particle.running

    for _ in range(2):
        particle.reset_accumulators()
        integrate(particle, 0.1, rng)
    assert not particle.running

    particle.reset_accumulators()
    integrate(particle, 0.1, rng)
    assert particle.force == Vector2()

    for _ in range(2):
        particle.reset_accumulators()
        integrate(particle, 0.1, rng)
    assert particle.running
    # A strong bias pulls the fresh direction almost straight up.
    assert particle.run_direction.length() == approx(1.0)
    assert particle.run_direction.y > 0.99


def test_bacteria_age_while_integrating():
    particle = Particle(
        id=0,
        position=Vector2(),
        radius=0.01,
        kind=ParticleKind.BACTERIA,
        maturation_time=0.15,
    )
    rng = DeterministicRng(1)

    integrate(particle, 0.1, rng)
    assert not particle.can_reproduce()
    integrate(particle, 0.1, rng)
    assert particle.reproduction_timer == approx(0.2)
    assert particle.can_reproduce()


def test_default_mass_follows_disc_area():
    particle = Particle(id=0, position=Vector2(), radius=0.5)
    particle.fix(False, density=2.0)

    assert particle.mass == approx(2.0 * 3.141592653589793 * 0.25)
    assert particle.inertia == approx(0.5 * particle.mass * 0.25)
