from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class StepMetrics:
    iteration: int
    time: float
    epsilon: float
    population: int
    births: int
    deaths: int
    pair_checks: int
    step_duration_ms: float = 0.0
