from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

import yaml


class BoundaryMode(str, Enum):
    WRAP = "wrap"
    RANDOM = "random"
    NONE = "none"


@dataclass
class DomainConfig:
    left: float = 0.0
    right: float = 1.0
    bottom: float = 0.0
    top: float = 1.0

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.top - self.bottom


@dataclass
class SectorConfig:
    sectors_x: int = 10
    sectors_y: int = 10
    sectorize: bool = True
    # Particles in the overflow bucket interact with every particle.
    overflow_interacts: bool = False


@dataclass
class TimeStepConfig:
    default_epsilon: float = 1e-4
    min_epsilon: float = 1e-7
    adaptive: bool = False
    max_iterations: int = -1


@dataclass
class BoundaryConfig:
    left: BoundaryMode = BoundaryMode.WRAP
    right: BoundaryMode = BoundaryMode.WRAP
    bottom: BoundaryMode = BoundaryMode.WRAP
    top: BoundaryMode = BoundaryMode.WRAP
    # Height particles re-enter at after leaving through a random bottom edge.
    reentry_y: float | None = None
    reinject_attempts: int = 10


@dataclass
class ParticleContactConfig:
    repulsion: float = 50000.0
    dissipation: float = 50.0
    friction: float = math.sqrt(0.5)
    drag: float = 1.0
    density: float = 1.0
    torque_multiplier: float = 1.0


@dataclass
class WallContactConfig:
    repulsion: float = 50000.0
    dissipation: float = 1000.0
    friction: float = 0.0
    gamma: float = 5.0


@dataclass
class ActiveConfig:
    run_time: float = 0.1
    tumble_time: float = 0.4
    run_force: float = 10.0


@dataclass
class BacteriaConfig:
    maturation_time: float = 0.0
    reproduction_delay: float = 0.01
    placement_attempts: int = 50
    spawn_distance: float = 2.1


@dataclass
class FieldConfig:
    resource_diffusion: float = 50.0
    waste_diffusion: float = 50.0
    secretion_rate: float = 1.0
    uptake_rate: float = 1.0
    replenish: float = 0.0
    waste_source: float = 0.0
    initial_resource: float = 5.0
    initial_waste: float = 0.0
    resource_gain: float = 1.0
    waste_penalty: float = 1.0
    resource_saturation: float = 1.0
    waste_saturation: float = 1.0
    metabolic_cost: float = 0.1


@dataclass
class RecordingConfig:
    record_interval: float = 1.0 / 15.0
    start_recording: float = 0.0
    stop_recording: float = 1e9
    record_all_iterations: bool = False
    sample_points: int = 100
    mark_watch: bool = False
    mark_start_time: float = 1.0
    mark_delay: float = 5.0


@dataclass
class SimulationConfig:
    gravity: tuple[float, float] = (0.0, -3.0)
    temperature: float = 0.0
    has_drag: bool = True
    biology: bool = False
    insertion_failure_budget: int = 250
    seed: int = 42
    config_version: str = "v1"
    domain: DomainConfig = field(default_factory=DomainConfig)
    sectors: SectorConfig = field(default_factory=SectorConfig)
    time: TimeStepConfig = field(default_factory=TimeStepConfig)
    boundary: BoundaryConfig = field(default_factory=BoundaryConfig)
    particle: ParticleContactConfig = field(default_factory=ParticleContactConfig)
    wall: WallContactConfig = field(default_factory=WallContactConfig)
    active: ActiveConfig = field(default_factory=ActiveConfig)
    bacteria: BacteriaConfig = field(default_factory=BacteriaConfig)
    fields: FieldConfig = field(default_factory=FieldConfig)
    recording: RecordingConfig = field(default_factory=RecordingConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def validate(self) -> List[str]:
        problems: List[str] = []
        domain = self.domain
        if domain.left >= domain.right:
            problems.append(f"domain left ({domain.left}) must be below right ({domain.right})")
        if domain.bottom >= domain.top:
            problems.append(f"domain bottom ({domain.bottom}) must be below top ({domain.top})")
        reentry_y = self.boundary.reentry_y
        if reentry_y is not None and not domain.bottom <= reentry_y < domain.top:
            problems.append(f"reentry_y ({reentry_y}) must lie in [bottom, top)")
        if self.time.default_epsilon <= 0.0:
            problems.append("default_epsilon must be positive")
        if self.time.min_epsilon <= 0.0 or self.time.min_epsilon > self.time.default_epsilon:
            problems.append("min_epsilon must be positive and not above default_epsilon")
        if self.particle.density <= 0.0:
            problems.append("particle density must be positive")
        if self.recording.sample_points < 1:
            problems.append("sample_points must be at least 1")
        return problems


_SECTIONS = {
    "domain": DomainConfig,
    "sectors": SectorConfig,
    "time": TimeStepConfig,
    "particle": ParticleContactConfig,
    "wall": WallContactConfig,
    "active": ActiveConfig,
    "bacteria": BacteriaConfig,
    "fields": FieldConfig,
    "recording": RecordingConfig,
}


def load_config(raw: dict) -> SimulationConfig:
    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return default

    sections = {name: cls(**(raw.get(name) or {})) for name, cls in _SECTIONS.items()}

    boundary_raw = dict(raw.get("boundary") or {})
    for edge in ("left", "right", "bottom", "top"):
        if edge in boundary_raw:
            boundary_raw[edge] = BoundaryMode(str(boundary_raw[edge]).lower())
    boundary = BoundaryConfig(**boundary_raw)

    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS and k not in {"boundary", "gravity"}}
    gravity = _pair(raw.get("gravity"), SimulationConfig.gravity)
    return SimulationConfig(gravity=gravity, boundary=boundary, **sections, **sim_values)
