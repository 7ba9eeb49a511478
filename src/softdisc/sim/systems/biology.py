from __future__ import annotations

from typing import TYPE_CHECKING, List, Tuple

from pygame.math import Vector2

from ..core.particle import Particle, ParticleKind
from .fields import local_fitness

if TYPE_CHECKING:
    from ..core.simulation import Simulation


def _spawn_child(sim: Simulation, parent: Particle, pending: List[Particle]) -> Particle | None:
    config = sim._config.bacteria
    rng = sim._biology_rng
    radius = parent.radius
    reach = config.spawn_distance * radius
    for _ in range(max(0, int(config.placement_attempts))):
        candidate = parent.position + rng.next_unit_circle() * reach
        if sim.would_overlap(candidate, radius):
            continue
        if any(
            sim._boundary.displacement(candidate, other.position).length_squared()
            < (radius + other.radius) ** 2
            for other in pending
        ):
            continue
        child = sim.create_particle(candidate, radius, ParticleKind.BACTERIA)
        child.velocity = Vector2(parent.velocity)
        parent.reproduction_timer = 0.0
        return child
    return None


def apply_biology(sim: Simulation, epsilon: float) -> Tuple[int, int]:
    """Run secretion, uptake, death and reproduction for every occupied sector.

    Deaths and births are applied after all cells have been visited so that
    the sector grid is not mutated while it is being read. Returns
    ``(births, deaths)``.
    """

    if sim._resource is None or sim._waste is None:
        return 0, 0
    config = sim._config.fields
    grid = sim._grid
    resource = sim._resource.values
    waste = sim._waste.values
    rng = sim._biology_rng

    dead: List[Particle] = []
    born: List[Tuple[Particle, bool]] = []
    pending: List[Particle] = []
    for y in range(grid.sectors_y):
        for x in range(grid.sectors_x):
            agents = [p for p in grid.cell(x, y) if p.kind == ParticleKind.BACTERIA]
            count = len(agents)
            if count == 0:
                continue
            waste[x, y] += epsilon * config.secretion_rate * count
            level = resource[x, y]
            resource[x, y] = max(0.0, level - epsilon * config.uptake_rate * level * count)

            fitness = local_fitness(config, float(resource[x, y]), float(waste[x, y]))
            if fitness < 0.0:
                dead.extend(agents)
                continue
            for agent in agents:
                if not agent.can_reproduce():
                    continue
                if not rng.next_chance(fitness * agent.reproduction_delay):
                    continue
                child = _spawn_child(sim, agent, pending)
                if child is not None:
                    pending.append(child)
                    born.append((child, sim.is_watched(agent)))

    for particle in dead:
        sim._remove_particle(particle)
    for child, watched in born:
        sim._insert_particle(child, watched)
    return len(born), len(dead)
