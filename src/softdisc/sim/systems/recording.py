from __future__ import annotations

import math
from typing import Callable, List, Sequence, Tuple

from pygame.math import Vector2

from ..core.config import RecordingConfig
from ..core.particle import Particle

Statistic = Callable[[Sequence[Particle]], float]


class FrameRecorder:
    """Collects per-frame data while a run is inside its recording window.

    A frame holds the watched particles' positions, one ``(time, value)``
    sample per registered statistic and the vertical density profile.
    """

    def __init__(self, config: RecordingConfig) -> None:
        self._config = config
        self._statistics: List[Statistic] = []
        self._series: List[List[Tuple[float, float]]] = []
        self._watch_frames: List[List[Vector2]] = []
        self._profiles: List[List[float]] = []
        self._last_record = -math.inf

    @property
    def frame_count(self) -> int:
        return len(self._profiles)

    @property
    def watch_frames(self) -> List[List[Vector2]]:
        return self._watch_frames

    @property
    def profiles(self) -> List[List[float]]:
        return self._profiles

    @property
    def last_record(self) -> float:
        return self._last_record

    def add_statistic(self, func: Statistic) -> int:
        self._statistics.append(func)
        self._series.append([])
        return len(self._statistics) - 1

    def statistic(self, index: int) -> List[Tuple[float, float]]:
        if 0 <= index < len(self._series):
            return self._series[index]
        return []

    def reset(self) -> None:
        for series in self._series:
            series.clear()
        self._watch_frames.clear()
        self._profiles.clear()
        self._last_record = -math.inf

    def wants_initial(self, time: float) -> bool:
        config = self._config
        return config.record_all_iterations or config.start_recording <= time < config.stop_recording

    def wants_frame(self, time: float) -> bool:
        config = self._config
        if config.record_all_iterations:
            return True
        return (
            config.start_recording < time < config.stop_recording
            and time - self._last_record > config.record_interval
        )

    def record(
        self,
        time: float,
        particles: Sequence[Particle],
        watched: Sequence[Particle],
        profile: List[float],
    ) -> None:
        self._watch_frames.append([Vector2(p.position) for p in watched])
        for func, series in zip(self._statistics, self._series):
            series.append((time, float(func(particles))))
        self._profiles.append(profile)
        self._last_record = time

    def average_profile(self, width: float) -> List[Tuple[float, float]]:
        """Mean density profile as ``(fraction of height, density)`` points."""

        if not self._profiles:
            return []
        bins = len(self._profiles[0])
        totals = [0.0] * bins
        for profile in self._profiles:
            for i, value in enumerate(profile[:bins]):
                totals[i] += value
        factor = bins / (len(self._profiles) * width)
        return [(i / bins, total * factor) for i, total in enumerate(totals)]
