from __future__ import annotations

from pygame.math import Vector2
from pytest import approx

from softdisc.sim.core.config import BoundaryConfig, BoundaryMode, SimulationConfig
from softdisc.sim.core.particle import Particle
from softdisc.sim.core.rng import DeterministicRng
from softdisc.sim.core.simulation import Simulation
from softdisc.sim.systems.boundary import BoundaryPolicy


def never_overlaps(position: Vector2, radius: float, particle_id: int) -> bool:
    return False


def make_policy(**modes) -> BoundaryPolicy:
    return BoundaryPolicy(BoundaryConfig(**modes), 0.0, 1.0, 0.0, 1.0)


def test_wrap_translates_by_domain_width_and_keeps_motion():
    policy = make_policy()
    particle = Particle(id=0, position=Vector2(1.003, 0.5), radius=0.01)
    particle.velocity = Vector2(2.0, -1.0)
    particle.omega = 3.0

    marked = policy.apply(particle, never_overlaps, DeterministicRng(1))

    assert not marked
    assert particle.position.x == approx(0.003)
    assert particle.position.y == approx(0.5)
    assert particle.velocity == Vector2(2.0, -1.0)
    assert particle.omega == 3.0


def test_two_half_width_moves_return_to_start():
    policy = make_policy()
    rng = DeterministicRng(1)
    particle = Particle(id=0, position=Vector2(0.7, 0.5), radius=0.01)

    for _ in range(2):
        particle.position.x += 0.5
        policy.apply(particle, never_overlaps, rng)

    assert particle.position.x == approx(0.7)


def test_wrapping_through_bottom_is_reported():
    policy = make_policy()
    particle = Particle(id=0, position=Vector2(0.5, -0.02), radius=0.01)

    assert policy.apply(particle, never_overlaps, DeterministicRng(1))
    assert particle.position.y == approx(0.98)


def test_random_bottom_reinjects_frozen_inside_domain():
    policy = make_policy(bottom=BoundaryMode.RANDOM)
    rng = DeterministicRng(5)
    for trial in range(20):
        particle = Particle(id=trial, position=Vector2(0.3, -0.001), radius=0.02)
        particle.velocity = Vector2(0.4, -3.0)
        particle.omega = 7.0

        assert policy.apply(particle, never_overlaps, rng)

        assert particle.velocity == Vector2()
        assert particle.omega == 0.0
        assert 0.0 <= particle.position.x <= 1.0
        assert 0.0 <= particle.position.y <= 1.0
        assert particle.position.y == approx(1.0 - 0.02)


def test_random_reinjection_gives_up_after_attempt_budget():
    policy = make_policy(left=BoundaryMode.RANDOM, reinject_attempts=10)
    calls = []

    def always_overlaps(position: Vector2, radius: float, particle_id: int) -> bool:
        calls.append(particle_id)
        return True

    particle = Particle(id=4, position=Vector2(-0.01, 0.5), radius=0.02)
    particle.velocity = Vector2(-1.0, 0.0)

    policy.apply(particle, always_overlaps, DeterministicRng(2))

    # One initial draw plus ten retries, then a final check before giving up.
    assert len(calls) == 12
    assert set(calls) == {4}
    assert particle.velocity == Vector2()
    assert particle.position.x == approx(1.0 - 0.02)
    assert 0.02 <= particle.position.y <= 0.98


def test_reentry_height_is_used_for_bottom_reinjection():
    policy = make_policy(bottom=BoundaryMode.RANDOM, reentry_y=0.6)
    particle = Particle(id=0, position=Vector2(0.5, -0.01), radius=0.01)

    policy.apply(particle, never_overlaps, DeterministicRng(9))

    assert 0.6 <= particle.position.y <= 0.6 + 4 * 0.01


def test_open_edges_leave_particle_outside():
    policy = make_policy(left=BoundaryMode.NONE, right=BoundaryMode.NONE, top=BoundaryMode.NONE)
    particle = Particle(id=0, position=Vector2(1.2, 1.3), radius=0.01)
    particle.velocity = Vector2(1.0, 1.0)

    assert not policy.apply(particle, never_overlaps, DeterministicRng(1))
    assert particle.position == Vector2(1.2, 1.3)
    assert particle.velocity == Vector2(1.0, 1.0)


def test_displacement_uses_minimal_image_on_wrapped_axes():
    policy = make_policy(bottom=BoundaryMode.NONE, top=BoundaryMode.NONE)

    delta = policy.displacement(Vector2(0.95, 0.1), Vector2(0.05, 0.9))

    assert delta.x == approx(0.1)
    assert delta.y == approx(0.8)


def test_particle_crossing_right_edge_reappears_on_left():
    config = SimulationConfig(gravity=(0.0, 0.0), has_drag=False)
    config.boundary.bottom = BoundaryMode.NONE
    config.boundary.top = BoundaryMode.NONE
    sim = Simulation(config)
    particle = sim.add_particle(sim.create_particle((0.999, 0.5), 0.005))
    particle.velocity = Vector2(0.02 / sim.epsilon, 0.0)

    sim.step()

    assert particle.position.x == approx(0.019)
    assert particle.position.y == approx(0.5)
    assert sim.sector_grid.sector_of(particle) == sim.sector_grid.interior_index(0, 5)


def test_reentry_line_near_the_top_stays_inside_the_domain():
    policy = make_policy(bottom=BoundaryMode.RANDOM, top=BoundaryMode.NONE, reentry_y=0.99)
    rng = DeterministicRng(3)

    for trial in range(50):
        particle = Particle(id=trial, position=Vector2(0.5, -0.01), radius=0.02)
        policy.apply(particle, never_overlaps, rng)

        assert 0.02 <= particle.position.y <= 1.0 - 0.02


def test_reentry_height_outside_the_domain_is_rejected():
    sim = Simulation(SimulationConfig())

    outcome = sim.set_reentry_height(1.5)

    assert not outcome
    assert sim.boundary.reentry_y is None
    assert sim.set_reentry_height(0.25)
    assert sim.config.boundary.reentry_y == 0.25
    assert sim.set_reentry_height(None)


def test_exact_right_edge_wraps_to_the_left_edge():
    policy = make_policy()
    particle = Particle(id=0, position=Vector2(1.0, 0.5), radius=0.01)

    policy.apply(particle, never_overlaps, DeterministicRng(1))

    assert particle.position.x == approx(0.0)
