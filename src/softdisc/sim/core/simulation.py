from __future__ import annotations

import logging
from dataclasses import fields as dataclass_fields
from time import perf_counter
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import numpy as np
from pygame.math import Vector2

from .config import BoundaryMode, SimulationConfig
from .errors import ConfigurationError, Outcome
from .field_grid import FieldGrid
from .particle import Particle, ParticleKind
from .rng import DeterministicRng
from .sector_grid import SectorGrid
from .wall import Wall
from ..systems import biology, fields, metrics as metrics_system
from ..systems.behaviors import integrate
from ..systems.boundary import BoundaryPolicy
from ..systems.recording import FrameRecorder, Statistic
from ..types.metrics import StepMetrics
from ..types.snapshot import Snapshot, SnapshotDomain, SnapshotFields, SnapshotMetadata

logger = logging.getLogger(__name__)

_NOISE_RNG_SALT = 0xB40A7E5EED5A17ED
_BOUNDARY_RNG_SALT = 0xED6E0F1A11C0DE21
_BIOLOGY_RNG_SALT = 0x0B1A57ED5EED9931

FlowField = Callable[[Vector2], Vector2]
Region = Tuple[float, float, float, float]


def _derive_stream_seed(seed: int, salt: int) -> int:
    return (int(seed) ^ int(salt)) & 0xFFFFFFFFFFFFFFFF


class Simulation:
    """Soft-disc simulation driver.

    Owns every particle, wall and field. Within a step all forces are
    accumulated before any particle moves, and structural changes (births,
    deaths, wall expiry) happen only after integration.
    """

    def __init__(self, config: SimulationConfig | None = None):
        config = config if config is not None else SimulationConfig()
        problems = config.validate()
        if problems:
            raise ConfigurationError("; ".join(problems))
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._noise_rng = DeterministicRng(_derive_stream_seed(config.seed, _NOISE_RNG_SALT))
        self._boundary_rng = DeterministicRng(_derive_stream_seed(config.seed, _BOUNDARY_RNG_SALT))
        self._biology_rng = DeterministicRng(_derive_stream_seed(config.seed, _BIOLOGY_RNG_SALT))
        domain = config.domain
        self._boundary = BoundaryPolicy(config.boundary, domain.left, domain.right, domain.bottom, domain.top)
        self._grid = SectorGrid(
            domain.left,
            domain.right,
            domain.bottom,
            domain.top,
            config.sectors.sectors_x,
            config.sectors.sectors_y,
            wrap_x=self._boundary.wrap_x,
            wrap_y=self._boundary.wrap_y,
        )
        self._particles: Dict[int, Particle] = {}
        self._walls: List[Wall] = []
        self._temp_walls: List[Wall] = []
        self._watched: List[int] = []
        self._recorder = FrameRecorder(config.recording)
        self._resource: FieldGrid | None = None
        self._waste: FieldGrid | None = None
        self._gravity = Vector2(config.gravity)
        self._flow: FlowField | None = None
        self._next_id = 0
        self._time = 0.0
        self._iteration = 0
        self._epsilon = config.time.default_epsilon
        self._min_epsilon_seen = self._epsilon
        self._running = False
        self._stop_reason = ""
        self._run_time = 0.0
        self._time_marks: List[float] = []
        self._last_mark = config.recording.mark_start_time
        self._delay_triggered_exit = False
        self._metrics: StepMetrics | None = None
        logger.info(
            "Simulation created: domain [%g, %g] x [%g, %g], %dx%d sectors, seed %d",
            domain.left,
            domain.right,
            domain.bottom,
            domain.top,
            self._grid.sectors_x,
            self._grid.sectors_y,
            config.seed,
        )

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def particles(self) -> List[Particle]:
        return list(self._particles.values())

    @property
    def particle_count(self) -> int:
        return len(self._particles)

    @property
    def walls(self) -> List[Wall]:
        return list(self._walls)

    @property
    def temp_walls(self) -> List[Wall]:
        return list(self._temp_walls)

    @property
    def sector_grid(self) -> SectorGrid:
        return self._grid

    @property
    def boundary(self) -> BoundaryPolicy:
        return self._boundary

    @property
    def resource(self) -> FieldGrid | None:
        return self._resource

    @property
    def waste(self) -> FieldGrid | None:
        return self._waste

    @property
    def recorder(self) -> FrameRecorder:
        return self._recorder

    @property
    def time(self) -> float:
        return self._time

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def min_epsilon_seen(self) -> float:
        return self._min_epsilon_seen

    @property
    def gravity(self) -> Vector2:
        return Vector2(self._gravity)

    @property
    def temperature(self) -> float:
        return self._config.temperature

    @property
    def running(self) -> bool:
        return self._running

    @property
    def stop_reason(self) -> str:
        return self._stop_reason

    @property
    def run_time(self) -> float:
        return self._run_time

    @property
    def time_marks(self) -> List[float]:
        return list(self._time_marks)

    @property
    def last_mark(self) -> float:
        return self._last_mark

    @property
    def delay_triggered_exit(self) -> bool:
        return self._delay_triggered_exit

    @property
    def metrics(self) -> StepMetrics | None:
        return self._metrics

    @property
    def watched(self) -> List[int]:
        return list(self._watched)

    def get_particle(self, particle_id: int) -> Particle | None:
        return self._particles.get(particle_id)

    def is_watched(self, particle: Particle) -> bool:
        return particle.id in self._watched

    def watched_particles(self) -> List[Particle]:
        return [self._particles[pid] for pid in self._watched if pid in self._particles]

    def create_particle(
        self,
        position: Vector2 | Sequence[float],
        radius: float,
        kind: ParticleKind = ParticleKind.PASSIVE,
        bias: Vector2 | Sequence[float] | None = None,
    ) -> Particle:
        """Build a particle carrying the current default parameters; it is not added."""

        contact = self._config.particle
        active = self._config.active
        bacteria = self._config.bacteria
        particle = Particle(
            id=self._next_id,
            position=Vector2(position),
            radius=radius,
            kind=ParticleKind(kind),
            drag=contact.drag,
            repulsion=contact.repulsion,
            dissipation=contact.dissipation,
            friction=contact.friction,
            bias=Vector2(bias) if bias is not None else Vector2(),
        )
        self._next_id += 1
        particle.fix(False, contact.density)
        if particle.kind == ParticleKind.RUN_AND_TUMBLE:
            particle.run_force = active.run_force
            particle.run_time = active.run_time
            particle.tumble_time = active.tumble_time
            particle.run_direction = self._noise_rng.next_unit_circle()
        elif particle.kind == ParticleKind.BACTERIA:
            particle.maturation_time = bacteria.maturation_time
            particle.reproduction_delay = bacteria.reproduction_delay
        return particle

    def add_particle(self, particle: Particle, watched: bool = False) -> Particle:
        if particle.id in self._particles:
            raise ConfigurationError(f"particle id {particle.id} is already in the simulation")
        self._next_id = max(self._next_id, particle.id + 1)
        self._insert_particle(particle, watched)
        return particle

    def add_watched_particle(self, particle: Particle) -> Particle:
        return self.add_particle(particle, watched=True)

    def remove_particle(self, particle: Particle | int) -> bool:
        pid = particle if isinstance(particle, int) else particle.id
        target = self._particles.get(pid)
        if target is None:
            return False
        self._remove_particle(target)
        return True

    def would_overlap(
        self,
        position: Vector2 | Sequence[float],
        radius: float,
        exclude: int | None = None,
        check_bounds: bool = True,
    ) -> bool:
        """Whether a disc at ``position`` would touch a domain edge or any particle other than ``exclude``."""

        position = Vector2(position)
        if check_bounds:
            domain = self._config.domain
            if (
                position.x - radius < domain.left
                or domain.right < position.x + radius
                or position.y - radius < domain.bottom
                or domain.top < position.y + radius
            ):
                return True
        displacement = self._boundary.displacement
        for particle in self._particles.values():
            if particle.id == exclude:
                continue
            reach = radius + particle.radius
            if displacement(position, particle.position).length_squared() < reach * reach:
                return True
        return False

    def add_particles(
        self,
        count: int,
        radius: float,
        variation: float = 0.0,
        region: Region | None = None,
        kind: ParticleKind = ParticleKind.PASSIVE,
        max_speed: float = 0.0,
        watched: bool = False,
        bias: Vector2 | Sequence[float] | None = None,
    ) -> int:
        """Place up to ``count`` particles at random non-overlapping spots; returns how many were placed."""

        if region is None:
            domain = self._config.domain
            region = (domain.left, domain.right, domain.bottom, domain.top)
        left, right, bottom, top = region
        budget = self._config.insertion_failure_budget
        placed = 0
        failed = 0
        while placed < count:
            size = radius * (1.0 + variation * self._rng.next_float())
            position = self._rng.next_in_rect(left, right, bottom, top, size)
            if self.would_overlap(position, size):
                failed += 1
                if failed > budget:
                    logger.warning(
                        "Stopped inserting after %d consecutive failures: placed %d of %d particles",
                        failed,
                        placed,
                        count,
                    )
                    break
                continue
            particle = self.create_particle(position, size, kind, bias)
            if max_speed > 0.0:
                particle.velocity = self._rng.next_unit_circle() * max_speed
            self._insert_particle(particle, watched)
            placed += 1
            failed = 0
        return placed

    def create_wall(self, start: Vector2 | Sequence[float], end: Vector2 | Sequence[float]) -> Wall:
        contact = self._config.wall
        return Wall.between(
            Vector2(start),
            Vector2(end),
            repulsion=contact.repulsion,
            dissipation=contact.dissipation,
            friction=contact.friction,
            gamma=contact.gamma,
        )

    def add_wall(self, wall: Wall) -> Wall:
        wall.expires_at = None
        self._walls.append(wall)
        return wall

    def add_temp_wall(self, wall: Wall, duration: float) -> Wall:
        wall.expires_at = self._time + duration
        self._temp_walls.append(wall)
        return wall

    def discard(self) -> None:
        """Drop every particle, wall, field and recorded series."""

        logger.info(
            "Discarding %d particles, %d walls and %d temporary walls",
            len(self._particles),
            len(self._walls),
            len(self._temp_walls),
        )
        self._particles.clear()
        self._grid.clear()
        self._watched.clear()
        self._walls.clear()
        self._temp_walls.clear()
        self._resource = None
        self._waste = None
        self._time_marks.clear()
        self._recorder.reset()
        self._metrics = None

    def _insert_particle(self, particle: Particle, watched: bool) -> None:
        self._particles[particle.id] = particle
        self._grid.insert(particle)
        if watched and particle.id not in self._watched:
            self._watched.append(particle.id)

    def _remove_particle(self, particle: Particle) -> None:
        self._particles.pop(particle.id, None)
        self._grid.remove(particle)
        if particle.id in self._watched:
            self._watched.remove(particle.id)

    def set_dimensions(self, left: float, right: float, bottom: float, top: float) -> Outcome:
        if not left < right or not bottom < top:
            return Outcome.invalid_configuration(
                f"domain [{left}, {right}] x [{bottom}, {top}] needs left < right and bottom < top"
            )
        domain = self._config.domain
        domain.left, domain.right, domain.bottom, domain.top = left, right, bottom, top
        self._boundary.set_bounds(left, right, bottom, top)
        self._grid.set_bounds(left, right, bottom, top)
        self._grid.rebuild(self._particles.values())
        for grid in (self._resource, self._waste):
            if grid is not None:
                grid.set_bounds(left, right, bottom, top)
        return Outcome.success()

    def set_boundary(
        self,
        left: BoundaryMode | str | None = None,
        right: BoundaryMode | str | None = None,
        bottom: BoundaryMode | str | None = None,
        top: BoundaryMode | str | None = None,
    ) -> Outcome:
        requested = {"left": left, "right": right, "bottom": bottom, "top": top}
        modes: Dict[str, BoundaryMode] = {}
        for edge, mode in requested.items():
            if mode is None:
                continue
            try:
                modes[edge] = BoundaryMode(str(getattr(mode, "value", mode)).lower())
            except ValueError:
                return Outcome.invalid_configuration(f"unknown boundary mode {mode!r} for the {edge} edge")
        for edge, mode in modes.items():
            self._boundary.set_mode(edge, mode)
            setattr(self._config.boundary, edge, mode)
        self._grid.set_wrap(self._boundary.wrap_x, self._boundary.wrap_y)
        for grid in (self._resource, self._waste):
            if grid is not None:
                grid.wrap_x = self._boundary.periodic_x
                grid.wrap_y = self._boundary.periodic_y
        return Outcome.success()

    def set_reentry_height(self, height: float | None) -> Outcome:
        domain = self._config.domain
        if height is not None and not domain.bottom <= height < domain.top:
            return Outcome.invalid_configuration(
                f"reentry height {height} must lie in [{domain.bottom}, {domain.top})"
            )
        self._boundary.reentry_y = height
        self._config.boundary.reentry_y = height
        return Outcome.success()

    def set_sector_dims(self, sectors_x: int, sectors_y: int) -> Outcome:
        sectors_x = max(1, int(sectors_x))
        sectors_y = max(1, int(sectors_y))
        self._grid.resize(sectors_x, sectors_y, self._particles.values())
        self._config.sectors.sectors_x = sectors_x
        self._config.sectors.sectors_y = sectors_y
        logger.debug("Sector grid resized to %dx%d", sectors_x, sectors_y)
        if self._resource is not None:
            fields.initialize_fields(self)
        return Outcome.success()

    def set_sectorize(self, sectorize: bool) -> None:
        self._config.sectors.sectorize = sectorize

    def set_overflow_interacts(self, enabled: bool) -> None:
        self._config.sectors.overflow_interacts = enabled

    def set_time_step(self, default_epsilon: float, min_epsilon: float | None = None) -> Outcome:
        minimum = self._config.time.min_epsilon if min_epsilon is None else min_epsilon
        if not default_epsilon > 0.0:
            return Outcome.invalid_configuration(f"time step must be positive, got {default_epsilon}")
        if not 0.0 < minimum <= default_epsilon:
            return Outcome.invalid_configuration(
                f"minimum time step must be positive and not above {default_epsilon}, got {minimum}"
            )
        self._config.time.default_epsilon = default_epsilon
        self._config.time.min_epsilon = minimum
        self._epsilon = default_epsilon
        return Outcome.success()

    def set_adaptive_time_step(self, adaptive: bool) -> None:
        self._config.time.adaptive = adaptive

    def set_max_iterations(self, max_iterations: int) -> None:
        self._config.time.max_iterations = int(max_iterations)

    def set_gravity(self, gravity: Vector2 | Sequence[float]) -> None:
        self._gravity = Vector2(gravity)
        self._config.gravity = (self._gravity.x, self._gravity.y)

    def set_flow(self, flow: FlowField | None) -> None:
        self._flow = flow

    def set_has_drag(self, has_drag: bool) -> None:
        self._config.has_drag = has_drag

    def set_temperature(self, temperature: float) -> Outcome:
        if temperature < 0.0:
            return Outcome.invalid_configuration(f"temperature must not be negative, got {temperature}")
        self._config.temperature = temperature
        return Outcome.success()

    def set_biology(self, enabled: bool) -> None:
        self._config.biology = enabled

    def set_field_rates(self, **rates: float) -> Outcome:
        config = self._config.fields
        known = {f.name for f in dataclass_fields(config)}
        for name, value in rates.items():
            if name not in known:
                return Outcome.invalid_configuration(f"unknown field parameter {name!r}")
            if value < 0.0:
                return Outcome.invalid_configuration(f"{name} must not be negative, got {value}")
        for name, value in rates.items():
            setattr(config, name, float(value))
        return Outcome.success()

    def set_particle_repulsion(self, repulsion: float) -> Outcome:
        return self._set_particle_value("repulsion", repulsion)

    def set_particle_dissipation(self, dissipation: float) -> Outcome:
        return self._set_particle_value("dissipation", dissipation)

    def set_particle_friction(self, friction: float) -> Outcome:
        return self._set_particle_value("friction", friction)

    def set_particle_drag(self, drag: float) -> Outcome:
        return self._set_particle_value("drag", drag)

    def set_particle_fix(self, fixed: bool) -> None:
        for particle in self._particles.values():
            particle.fix(fixed, self._config.particle.density)

    def set_wall_repulsion(self, repulsion: float) -> Outcome:
        return self._set_wall_value("repulsion", repulsion)

    def set_wall_dissipation(self, dissipation: float) -> Outcome:
        return self._set_wall_value("dissipation", dissipation)

    def set_wall_friction(self, friction: float) -> Outcome:
        return self._set_wall_value("friction", friction)

    def set_wall_gamma(self, gamma: float) -> Outcome:
        return self._set_wall_value("gamma", gamma)

    def _set_particle_value(self, name: str, value: float) -> Outcome:
        if value < 0.0:
            return Outcome.invalid_parameter(f"particle {name} must not be negative, got {value}")
        setattr(self._config.particle, name, value)
        for particle in self._particles.values():
            setattr(particle, name, value)
        return Outcome.success()

    def _set_wall_value(self, name: str, value: float) -> Outcome:
        if value < 0.0:
            return Outcome.invalid_parameter(f"wall {name} must not be negative, got {value}")
        setattr(self._config.wall, name, value)
        for wall in self._walls:
            setattr(wall, name, value)
        for wall in self._temp_walls:
            setattr(wall, name, value)
        return Outcome.success()

    def add_statistic(self, func: Statistic) -> int:
        return self._recorder.add_statistic(func)

    def statistic(self, index: int) -> List[Tuple[float, float]]:
        return self._recorder.statistic(index)

    def stop(self, reason: str = "stop requested") -> None:
        if self._running:
            self._stop_reason = reason
        self._running = False

    def run(self, duration: float) -> None:
        """Step until simulated time reaches ``duration`` or something stops the run."""

        self._reset_run()
        if self._config.biology:
            fields.initialize_fields(self)
        logger.info("Run started: %d particles, target time %g", len(self._particles), duration)
        start = perf_counter()
        if self._recorder.wants_initial(self._time):
            self._record_frame()
        while self._time < duration and self._running:
            self.step()
        if self._running:
            self._stop_reason = "time limit reached"
            self._running = False
        self._run_time = perf_counter() - start
        logger.info(
            "Run stopped at t=%.6g after %d iterations: %s",
            self._time,
            self._iteration,
            self._stop_reason,
        )
        logger.debug("Run took %.3f s of wall-clock time", self._run_time)

    def step(self) -> StepMetrics:
        start = perf_counter()
        config = self._config
        particles = list(self._particles.values())
        epsilon = self._epsilon

        self._accumulate_forces(particles)
        pair_checks = self._interact(particles)
        if config.temperature > 0.0:
            for particle in particles:
                particle.force += self._noise_rng.next_unit_circle() * config.temperature

        boundary = self._boundary
        overlaps = self._reinjection_overlaps
        for particle in particles:
            integrate(particle, epsilon, self._noise_rng)
            if boundary.apply(particle, overlaps, self._boundary_rng):
                self._time_marks.append(self._time + epsilon)
                self._last_mark = self._time + epsilon
        self._grid.rebuild(particles)

        self._time += epsilon
        self._iteration += 1
        self._epsilon = self._next_epsilon(particles)
        max_iterations = config.time.max_iterations
        if max_iterations > 0 and self._iteration >= max_iterations:
            self.stop("iteration cap reached")
        if self._recorder.wants_frame(self._time):
            self._record_frame()
        recording = config.recording
        if (
            recording.mark_watch
            and self._time > recording.mark_start_time
            and self._time - self._last_mark > recording.mark_delay
        ):
            self.stop("no boundary crossing within the mark delay")
            self._delay_triggered_exit = True

        self._expire_temp_walls()

        births = 0
        deaths = 0
        if config.biology:
            if self._resource is None or self._waste is None:
                fields.initialize_fields(self)
            births, deaths = biology.apply_biology(self, epsilon)
            fields.update_fields(self, epsilon)
            if not self._particles:
                self.stop("all agents died")

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            self._iteration,
            self._time,
            epsilon,
            len(self._particles),
            births,
            deaths,
            pair_checks,
            elapsed_ms,
        )
        self._metrics = metrics
        return metrics

    def _reset_run(self) -> None:
        self._time = 0.0
        self._iteration = 0
        self._epsilon = self._config.time.default_epsilon
        self._min_epsilon_seen = self._epsilon
        self._time_marks.clear()
        self._last_mark = self._config.recording.mark_start_time
        self._delay_triggered_exit = False
        self._run_time = 0.0
        self._running = True
        self._stop_reason = ""
        self._recorder.reset()

    def _accumulate_forces(self, particles: Iterable[Particle]) -> None:
        gravity = self._gravity
        has_gravity = gravity.x != 0.0 or gravity.y != 0.0
        flow = self._flow if self._config.has_drag else None
        has_drag = self._config.has_drag
        for particle in particles:
            particle.reset_accumulators()
            if particle.fixed:
                continue
            if has_gravity:
                particle.force += gravity * particle.mass
            if has_drag and particle.drag > 0.0:
                target = flow(particle.position) if flow is not None else Vector2()
                particle.force += (Vector2(target) - particle.velocity) * particle.drag

    def _interact(self, particles: List[Particle]) -> int:
        torque_multiplier = self._config.particle.torque_multiplier
        displacement = self._boundary.displacement
        pair_checks = 0
        if self._config.sectors.sectorize:
            partners = particles if self._config.sectors.overflow_interacts else None
            for particle, other in self._grid.iter_pairs(partners):
                particle.interact(other, displacement(particle.position, other.position), torque_multiplier)
                pair_checks += 1
        else:
            for particle in particles:
                for other in particles:
                    if other is particle:
                        continue
                    particle.interact(other, displacement(particle.position, other.position), torque_multiplier)
                    pair_checks += 1

        for wall in self._walls:
            for particle in particles:
                wall.interact(particle, torque_multiplier)
        for wall in self._temp_walls:
            for particle in particles:
                wall.interact(particle, torque_multiplier)
        return pair_checks

    def _reinjection_overlaps(self, position: Vector2, radius: float, particle_id: int) -> bool:
        return self.would_overlap(position, radius, exclude=particle_id, check_bounds=False)

    def _next_epsilon(self, particles: Sequence[Particle]) -> float:
        timing = self._config.time
        default = timing.default_epsilon
        if not timing.adaptive:
            return default
        domain = self._config.domain
        vmax = metrics_system.max_velocity(particles, domain)
        amax = metrics_system.max_acceleration(particles, domain)
        epsilon = default
        if vmax > 0.0:
            epsilon = min(epsilon, default / vmax)
        if amax > 0.0:
            epsilon = min(epsilon, default / amax)
        epsilon = max(timing.min_epsilon, epsilon)
        if epsilon < self._min_epsilon_seen:
            self._min_epsilon_seen = epsilon
        return epsilon

    def _expire_temp_walls(self) -> None:
        if not self._temp_walls:
            return
        kept: List[Wall] = []
        for wall in self._temp_walls:
            if wall.expired(self._time):
                logger.debug("Temporary wall from %s to %s expired at t=%.6g", wall.origin, wall.end, self._time)
            else:
                kept.append(wall)
        self._temp_walls = kept

    def _record_frame(self) -> None:
        particles = list(self._particles.values())
        profile = metrics_system.density_y_profile(
            particles, self._config.domain, self._config.recording.sample_points
        )
        self._recorder.record(self._time, particles, self.watched_particles(), profile)

    def positions(self) -> List[Vector2]:
        return [Vector2(p.position) for p in self._particles.values()]

    def velocities(self) -> List[Vector2]:
        return [Vector2(p.velocity) for p in self._particles.values()]

    def radii(self) -> List[float]:
        return [p.radius for p in self._particles.values()]

    def average_speed(self) -> float:
        return metrics_system.average_speed(self._particles.values(), self._config.domain)

    def average_speed_sq(self) -> float:
        return metrics_system.average_speed_sq(self._particles.values(), self._config.domain)

    def average_kinetic_energy(self) -> float:
        return metrics_system.average_kinetic_energy(self._particles.values(), self._config.domain)

    def total_kinetic_energy(self) -> float:
        return sum(p.kinetic_energy for p in self._particles.values())

    def net_momentum(self) -> Vector2:
        return metrics_system.net_momentum(self._particles.values(), self._config.domain)

    def net_velocity(self) -> Vector2:
        return metrics_system.net_velocity(self._particles.values(), self._config.domain)

    def highest_position(self) -> float:
        return metrics_system.highest_position(self._particles.values(), self._config.domain)

    def max_velocity(self) -> float:
        return metrics_system.max_velocity(self._particles.values(), self._config.domain)

    def max_acceleration(self) -> float:
        return metrics_system.max_acceleration(self._particles.values(), self._config.domain)

    def density_x_profile(self) -> List[float]:
        return [float(count) for count in self._grid.column_counts()]

    def density_y_profile(self, bins: int | None = None) -> List[float]:
        if bins is None:
            bins = self._config.recording.sample_points
        return metrics_system.density_y_profile(self._particles.values(), self._config.domain, bins)

    def average_profile(self) -> List[Tuple[float, float]]:
        return self._recorder.average_profile(self._config.domain.width)

    def watch_positions(self) -> List[List[Vector2]]:
        return self._recorder.watch_frames

    def mark_slope(self) -> float:
        if len(self._time_marks) < 2:
            return 0.0
        span = self._time_marks[-1] - self._time_marks[0]
        return len(self._time_marks) / span if span > 0.0 else 0.0

    def mark_span(self) -> float:
        if len(self._time_marks) < 2:
            return 0.0
        return self._time_marks[-1] - self._time_marks[0]

    def resource_at(self, x: int, y: int) -> float:
        return 0.0 if self._resource is None else self._resource.at(x, y)

    def waste_at(self, x: int, y: int) -> float:
        return 0.0 if self._waste is None else self._waste.at(x, y)

    def fitness_grid(self) -> np.ndarray:
        return fields.fitness_grid(self)

    def snapshot(self) -> Snapshot:
        domain = self._config.domain
        boundary = self._boundary
        particles_payload = [
            {
                "id": p.id,
                "kind": p.kind.value,
                "x": p.position.x,
                "y": p.position.y,
                "vx": p.velocity.x,
                "vy": p.velocity.y,
                "radius": p.radius,
                "theta": p.theta,
                "omega": p.omega,
                "fixed": p.fixed,
                "watched": p.id in self._watched,
            }
            for p in self._particles.values()
        ]
        walls_payload = [
            {
                "x0": wall.origin.x,
                "y0": wall.origin.y,
                "x1": wall.end.x,
                "y1": wall.end.y,
                "temporary": wall.temporary,
                "expires_at": wall.expires_at,
            }
            for wall in self._walls + self._temp_walls
        ]
        field_payload = None
        if self._resource is not None and self._waste is not None:
            field_payload = SnapshotFields(
                resource=self._resource.values.tolist(),
                waste=self._waste.values.tolist(),
            )
        return Snapshot(
            iteration=self._iteration,
            time=self._time,
            metrics=self._metrics,
            particles=particles_payload,
            walls=walls_payload,
            domain=SnapshotDomain(
                left=domain.left,
                right=domain.right,
                bottom=domain.bottom,
                top=domain.top,
                boundary={
                    "left": boundary.left_mode.value,
                    "right": boundary.right_mode.value,
                    "bottom": boundary.bottom_mode.value,
                    "top": boundary.top_mode.value,
                },
            ),
            metadata=SnapshotMetadata(
                epsilon=self._epsilon,
                gravity=(self._gravity.x, self._gravity.y),
                temperature=self._config.temperature,
                seed=self._config.seed,
                config_version=self._config.config_version,
            ),
            fields=field_payload,
        )
