"""Ray-cast distance sensor built on the segment intersection helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from .geometry import Polygon, Segment, Touch, Vec2, lerp, polygon_edges, segment_intersection


@dataclass(frozen=True)
class SensorConfig:
    """Shape of the ray fan cast in front of a vehicle."""

    ray_count: int = 5
    ray_length: float = 150.0
    ray_spread: float = math.pi / 2

    def __post_init__(self) -> None:
        if self.ray_count <= 0:
            raise ValueError("ray_count must be positive")
        if self.ray_length < 0:
            raise ValueError("ray_length must not be negative")


class Sensor:
    """Casts a fan of rays and keeps the nearest obstacle touch per ray."""

    def __init__(self, config: SensorConfig | None = None) -> None:
        self._config = config or SensorConfig()
        self._rays: List[Segment] = []
        self._readings: List[Touch | None] = []

    @property
    def config(self) -> SensorConfig:
        return self._config

    @property
    def ray_count(self) -> int:
        return self._config.ray_count

    @property
    def rays(self) -> Tuple[Segment, ...]:
        return tuple(self._rays)

    @property
    def readings(self) -> Tuple[Touch | None, ...]:
        return tuple(self._readings)

    def update(self, center: Vec2, heading: float, obstacles: Iterable[Polygon]) -> None:
        obstacles = list(obstacles)
        self._rays = self.cast_rays(center, heading)
        self._readings = [_nearest_touch(ray, obstacles) for ray in self._rays]

    def cast_rays(self, center: Vec2, heading: float) -> List[Segment]:
        count = self._config.ray_count
        spread = self._config.ray_spread
        length = self._config.ray_length
        cx, cy = float(center[0]), float(center[1])

        rays: List[Segment] = []
        for index in range(count):
            fraction = 0.5 if count == 1 else index / (count - 1)
            angle = lerp(spread / 2, -spread / 2, fraction) + heading
            end = (cx - math.sin(angle) * length, cy - math.cos(angle) * length)
            rays.append(((cx, cy), end))
        return rays

    def values(self) -> List[float]:
        """Readings as network inputs: near obstacles approach 1, misses are 0."""
        return [0.0 if touch is None else 1.0 - touch.offset for touch in self._readings]


def _nearest_touch(ray: Segment, obstacles: Sequence[Polygon]) -> Touch | None:
    best: Touch | None = None
    for obstacle in obstacles:
        for edge in polygon_edges(obstacle):
            touch = segment_intersection(edge, ray)
            if touch is None:
                continue
            if best is None or touch.offset < best.offset:
                best = touch
    return best


__all__ = ["Sensor", "SensorConfig"]
