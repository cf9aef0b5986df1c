"""Polygon geometry for nesting.

Polygons are stored as flat coordinate tuples ``(x0, y0, x1, y1, ...)``
forming an implicitly closed ring. All operations are pure: rotation and
translation return new polygons, and measurements are recomputed on every
call.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from sheetnest.nesting.errors import InvalidPart

Bounds = Tuple[float, float, float, float]  # (min_x, max_x, min_y, max_y)


@dataclass(frozen=True)
class Polygon:
    """An implicitly closed ring of 2D points."""
    points: Tuple[float, ...] = ()

    def __post_init__(self):
        coords = tuple(float(v) for v in self.points)
        if len(coords) % 2 != 0:
            raise InvalidPart(
                f"Polygon needs an even number of coordinates, got {len(coords)}"
            )
        object.__setattr__(self, "points", coords)

    @classmethod
    def from_points(cls, pairs: Sequence[Tuple[float, float]]) -> "Polygon":
        """Create from a sequence of (x, y) pairs."""
        flat: List[float] = []
        for x, y in pairs:
            flat.extend((x, y))
        return cls(tuple(flat))

    @classmethod
    def rectangle(cls, width: float, height: float) -> "Polygon":
        """Axis-aligned rectangle with its lower-left corner at the origin."""
        return cls((0.0, 0.0, width, 0.0, width, height, 0.0, height))

    def __len__(self) -> int:
        return len(self.points) // 2

    def vertices(self) -> Iterator[Tuple[float, float]]:
        """Iterate over (x, y) pairs."""
        for i in range(0, len(self.points), 2):
            yield self.points[i], self.points[i + 1]

    def bounds(self) -> Bounds:
        return bounds(self)

    def area(self) -> float:
        return area(self)

    @property
    def width(self) -> float:
        min_x, max_x, _, _ = bounds(self)
        return max_x - min_x

    @property
    def height(self) -> float:
        _, _, min_y, max_y = bounds(self)
        return max_y - min_y

    def rotated(self, angle: float) -> "Polygon":
        return rotate(self, angle)

    def translated(self, dx: float, dy: float) -> "Polygon":
        return translate(self, dx, dy)

    def to_list(self) -> List[float]:
        """Convert to a flat list for serialization."""
        return list(self.points)


def bounds(polygon: Polygon) -> Bounds:
    """Axis-aligned bounds as (min_x, max_x, min_y, max_y).

    An empty polygon has the degenerate box (0, 0, 0, 0).
    """
    pts = polygon.points
    if not pts:
        return (0.0, 0.0, 0.0, 0.0)

    xs = pts[0::2]
    ys = pts[1::2]
    return (min(xs), max(xs), min(ys), max(ys))


def area(polygon: Polygon) -> float:
    """Unsigned area by the shoelace formula. Fewer than 3 points gives 0."""
    n = len(polygon)
    if n < 3:
        return 0.0

    pts = polygon.points
    total = 0.0
    for i in range(n):
        j = (i + 1) % n
        total += pts[i * 2] * pts[j * 2 + 1]
        total -= pts[j * 2] * pts[i * 2 + 1]
    return abs(total) / 2.0


def rotate(polygon: Polygon, angle: float) -> Polygon:
    """Rotate by ``angle`` radians about the center of the bounding box."""
    min_x, max_x, min_y, max_y = bounds(polygon)
    cx = (min_x + max_x) / 2.0
    cy = (min_y + max_y) / 2.0
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)

    rotated: List[float] = []
    for x, y in polygon.vertices():
        dx = x - cx
        dy = y - cy
        rotated.append(dx * cos_a - dy * sin_a + cx)
        rotated.append(dx * sin_a + dy * cos_a + cy)
    return Polygon(tuple(rotated))


def translate(polygon: Polygon, dx: float, dy: float) -> Polygon:
    """Shift every point by (dx, dy)."""
    moved: List[float] = []
    for x, y in polygon.vertices():
        moved.append(x + dx)
        moved.append(y + dy)
    return Polygon(tuple(moved))


def rotation_angles(steps: int) -> List[float]:
    """Evenly spaced angles over a full turn, starting at 0."""
    return [i * (2.0 * math.pi / steps) for i in range(steps)]
