"""Segment and polygon intersection helpers shared by collision and sensing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

Vec2 = Tuple[float, float]
Segment = Tuple[Vec2, Vec2]
Polygon = Sequence[Vec2]


@dataclass(frozen=True)
class Touch:
    """Intersection point plus the normalized offset along the second segment."""

    x: float
    y: float
    offset: float

    @property
    def point(self) -> Vec2:
        return self.x, self.y


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def segment_intersection(first: Segment, second: Segment) -> Touch | None:
    """Return where two segments cross, or ``None``.

    ``t`` runs along ``first`` and ``u`` along ``second``; both must lie in
    ``[0, 1]``. Parallel and collinear segments never touch.
    """
    (ax, ay), (bx, by) = first
    (cx, cy), (dx, dy) = second

    t_top = (dx - cx) * (ay - cy) - (dy - cy) * (ax - cx)
    u_top = (cy - ay) * (ax - bx) - (cx - ax) * (ay - by)
    bottom = (dy - cy) * (bx - ax) - (dx - cx) * (by - ay)

    if bottom == 0:
        return None

    t = t_top / bottom
    u = u_top / bottom
    if 0 <= t <= 1 and 0 <= u <= 1:
        return Touch(x=lerp(ax, bx, t), y=lerp(ay, by, t), offset=u)
    return None


def polygon_edges(polygon: Polygon) -> Iterator[Segment]:
    """Yield the edges of a closed polygon, the last point wrapping to the first."""
    count = len(polygon)
    for index in range(count):
        yield polygon[index], polygon[(index + 1) % count]


def polygon_intersection(first: Polygon, second: Polygon) -> Touch | None:
    """Return the first touch found between the edges of two polygons.

    Edges of ``first`` form the outer loop and edges of ``second`` the inner
    one. The touch returned is the first in that order, not the closest.
    """
    for edge in polygon_edges(first):
        for other in polygon_edges(second):
            touch = segment_intersection(edge, other)
            if touch is not None:
                return touch
    return None


def polygons_intersect(first: Polygon, second: Polygon) -> bool:
    return polygon_intersection(first, second) is not None


__all__ = [
    "Polygon",
    "Segment",
    "Touch",
    "Vec2",
    "lerp",
    "polygon_edges",
    "polygon_intersection",
    "polygons_intersect",
    "segment_intersection",
]
