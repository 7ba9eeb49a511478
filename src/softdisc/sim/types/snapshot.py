from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .metrics import StepMetrics


@dataclass(slots=True)
class Snapshot:
    iteration: int
    time: float
    metrics: StepMetrics | None
    particles: List[Dict[str, Any]]
    walls: List[Dict[str, Any]]
    domain: "SnapshotDomain"
    metadata: "SnapshotMetadata"
    fields: "SnapshotFields | None" = None


@dataclass(slots=True)
class SnapshotDomain:
    left: float
    right: float
    bottom: float
    top: float
    boundary: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class SnapshotMetadata:
    epsilon: float
    gravity: tuple[float, float]
    temperature: float
    seed: int
    config_version: str


@dataclass(slots=True)
class SnapshotFields:
    resource: List[List[float]]
    waste: List[List[float]]
