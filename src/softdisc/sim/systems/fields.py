from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..core.config import FieldConfig
from ..core.field_grid import FieldGrid

if TYPE_CHECKING:
    from ..core.simulation import Simulation


def local_fitness(config: FieldConfig, resource: float, waste: float) -> float:
    """Saturating gain from resource minus saturating penalty from waste minus upkeep."""

    gain = config.resource_gain * resource / (resource + config.resource_saturation)
    penalty = config.waste_penalty * waste / (waste + config.waste_saturation)
    return gain - penalty - config.metabolic_cost


def initialize_fields(sim: Simulation) -> None:
    config = sim._config.fields
    domain = sim._config.domain
    grid = sim._grid
    boundary = sim._boundary
    sim._resource = FieldGrid(
        grid.sectors_x,
        grid.sectors_y,
        domain.left,
        domain.right,
        domain.bottom,
        domain.top,
        wrap_x=boundary.periodic_x,
        wrap_y=boundary.periodic_y,
        value=config.initial_resource,
    )
    sim._waste = FieldGrid(
        grid.sectors_x,
        grid.sectors_y,
        domain.left,
        domain.right,
        domain.bottom,
        domain.top,
        wrap_x=boundary.periodic_x,
        wrap_y=boundary.periodic_y,
        value=config.initial_waste,
    )


def update_fields(sim: Simulation, epsilon: float) -> None:
    if sim._resource is None or sim._waste is None:
        return
    config = sim._config.fields
    sim._resource.diffuse(epsilon, config.resource_diffusion, config.replenish)
    sim._waste.diffuse(epsilon, config.waste_diffusion, config.waste_source)


def fitness_grid(sim: Simulation) -> np.ndarray:
    if sim._resource is None or sim._waste is None:
        return np.zeros((0, 0))
    config = sim._config.fields
    resource = sim._resource.values
    waste = sim._waste.values
    return (
        config.resource_gain * resource / (resource + config.resource_saturation)
        - config.waste_penalty * waste / (waste + config.waste_saturation)
        - config.metabolic_cost
    )
