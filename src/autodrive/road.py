"""Straight multi-lane road definition."""

from __future__ import annotations

from typing import List, Sequence

from .geometry import Polygon, Segment, lerp

# Stand-in for an endless road in both directions.
ROAD_INFINITY = 10_000_000.0


class Road:
    """Vertical road centered on ``x`` with evenly sized lanes."""

    def __init__(self, x: float, width: float, lane_count: int = 3) -> None:
        if width <= 0:
            raise ValueError("road width must be positive")
        if lane_count <= 0:
            raise ValueError("lane_count must be positive")
        self.x = float(x)
        self.width = float(width)
        self.lane_count = int(lane_count)
        self.left = self.x - self.width / 2
        self.right = self.x + self.width / 2
        self.top = -ROAD_INFINITY
        self.bottom = ROAD_INFINITY

        top_left = (self.left, self.top)
        top_right = (self.right, self.top)
        bottom_left = (self.left, self.bottom)
        bottom_right = (self.right, self.bottom)
        self._borders: List[Segment] = [
            (top_left, bottom_left),
            (top_right, bottom_right),
        ]

    @property
    def lane_width(self) -> float:
        return self.width / self.lane_count

    @property
    def borders(self) -> Sequence[Segment]:
        return tuple(self._borders)

    def border_polygons(self) -> List[Polygon]:
        """Borders as two-point polygons, ready to join an obstacle set."""
        return [list(border) for border in self._borders]

    def lane_center(self, lane_index: int) -> float:
        """X of a lane's center; out-of-range indices clamp to the nearest lane."""
        index = max(0, min(int(lane_index), self.lane_count - 1))
        return self.left + self.lane_width / 2 + index * self.lane_width

    def lane_divider_xs(self) -> List[float]:
        return [
            lerp(self.left, self.right, index / self.lane_count)
            for index in range(1, self.lane_count)
        ]


__all__ = ["ROAD_INFINITY", "Road"]
