from __future__ import annotations

import numpy as np
from pygame.math import Vector2
from pytest import approx

from softdisc.sim.core.config import BacteriaConfig, BoundaryMode, FieldConfig, SimulationConfig
from softdisc.sim.core.particle import ParticleKind
from softdisc.sim.core.simulation import Simulation
from softdisc.sim.systems.fields import local_fitness


def biology_config(**fields) -> SimulationConfig:
    return SimulationConfig(
        gravity=(0.0, 0.0),
        has_drag=False,
        biology=True,
        fields=FieldConfig(**fields),
        bacteria=BacteriaConfig(reproduction_delay=1e6),
    )


def test_fitness_saturates_in_resource_and_waste():
    config = FieldConfig(metabolic_cost=0.0)

    assert local_fitness(config, 0.0, 0.0) == 0.0
    assert local_fitness(config, 1.0, 0.0) == approx(0.5)
    assert local_fitness(config, 1e9, 0.0) == approx(1.0)
    assert local_fitness(config, 1.0, 1.0) == approx(0.0)
    assert local_fitness(FieldConfig(metabolic_cost=0.25), 1.0, 0.0) == approx(0.25)


def test_fields_follow_sector_grid_and_periodic_axes():
    config = biology_config()
    config.boundary.top = BoundaryMode.NONE
    sim = Simulation(config)
    sim.set_sector_dims(6, 4)

    sim.run(0.0001)

    assert sim.resource.shape == (6, 4)
    assert sim.resource.wrap_x
    assert not sim.resource.wrap_y
    assert np.allclose(sim.resource.values, 5.0)
    assert sim.fitness_grid().shape == (6, 4)


def test_negative_fitness_kills_every_agent_in_the_cell():
    sim = Simulation(biology_config(metabolic_cost=2.0))
    sim.add_particles(6, 0.01, kind=ParticleKind.BACTERIA, watched=True)

    sim.run(0.01)

    assert sim.particle_count == 0
    assert sim.watched == []
    assert sim.stop_reason == "all agents died"
    assert sim.iteration == 1
    assert sim.metrics.deaths == 6


def test_fit_agent_reproduces_next_to_itself():
    sim = Simulation(biology_config(metabolic_cost=0.0))
    parent = sim.add_watched_particle(sim.create_particle((0.5, 0.5), 0.01, ParticleKind.BACTERIA))
    parent.velocity = Vector2(0.2, 0.0)

    metrics = sim.step()

    assert metrics.births == 1
    assert sim.particle_count == 2
    child = next(p for p in sim.particles if p is not parent)
    assert child.kind == ParticleKind.BACTERIA
    assert child.velocity == parent.velocity
    assert child.velocity is not parent.velocity
    assert (child.position - parent.position).length() == approx(2.1 * 0.01, rel=1e-6)
    assert parent.reproduction_timer == 0.0
    assert child.id in sim.watched


def test_immature_agents_do_not_reproduce():
    config = biology_config(metabolic_cost=0.0)
    config.bacteria.maturation_time = 1.0
    sim = Simulation(config)
    sim.add_particle(sim.create_particle((0.5, 0.5), 0.01, ParticleKind.BACTERIA))

    for _ in range(5):
        sim.step()

    assert sim.particle_count == 1


def test_agents_secrete_waste_and_consume_resource():
    config = biology_config(metabolic_cost=0.0, resource_diffusion=0.0, waste_diffusion=0.0)
    config.bacteria.reproduction_delay = 0.0
    sim = Simulation(config)
    sim.add_particle(sim.create_particle((0.55, 0.55), 0.01, ParticleKind.BACTERIA))
    sim.add_particle(sim.create_particle((0.58, 0.58), 0.01, ParticleKind.BACTERIA))

    sim.run(0.0001)

    eps = 1e-4
    assert sim.waste_at(5, 5) == approx(eps * 1.0 * 2)
    assert sim.resource_at(5, 5) == approx(5.0 - eps * 1.0 * 5.0 * 2)
    assert sim.resource_at(0, 0) == approx(5.0)
    assert sim.waste_at(0, 0) == 0.0


def test_passive_particles_are_ignored_by_biology():
    sim = Simulation(biology_config(metabolic_cost=2.0))
    sim.add_particles(4, 0.01)

    sim.run(0.0005)

    assert sim.particle_count == 4
    assert np.allclose(sim.waste.values, 0.0)


def test_adaptive_step_feeds_fields_the_step_just_taken():
    config = biology_config(metabolic_cost=0.0, resource_diffusion=0.0, waste_diffusion=0.0)
    config.bacteria.reproduction_delay = 0.0
    config.time.adaptive = True
    sim = Simulation(config)
    agent = sim.add_particle(sim.create_particle((0.55, 0.55), 0.01, ParticleKind.BACTERIA))
    agent.velocity = Vector2(10.0, 0.0)

    sim.run(1e-4)

    assert sim.time == approx(1e-4)
    assert sim.epsilon == approx(1e-5)
    assert sim.waste_at(5, 5) == approx(1e-4)
    assert sim.resource_at(5, 5) == approx(5.0 - 1e-4 * 5.0)
    assert agent.reproduction_timer == approx(1e-4)
