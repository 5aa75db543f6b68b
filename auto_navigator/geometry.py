"""Geometry helpers shared by the planning components.

All positions are 2D float tuples; numpy is used where a batch of points is
compared at once (distance matrices, explored-area queries).
"""

import math
from typing import List, Sequence, Tuple

import numpy as np

from auto_navigator.models import Position


def distance(a: Position, b: Position) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def lerp(a: Position, b: Position, t: float) -> Position:
    """Linear interpolation between a and b.

    Uses the (1 - t) * a + t * b form so that t == 1 yields b exactly.
    """
    return (a[0] * (1.0 - t) + b[0] * t, a[1] * (1.0 - t) + b[1] * t)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def angle_to(a: Position, b: Position) -> float:
    """Heading from a to b in radians, in (-pi, pi]."""
    return math.atan2(b[1] - a[1], b[0] - a[0])


def offset(origin: Position, angle: float, length: float) -> Position:
    """Point at `length` from origin along heading `angle`."""
    return (origin[0] + math.cos(angle) * length, origin[1] + math.sin(angle) * length)


def compass_directions(count: int = 8) -> List[Tuple[float, float]]:
    """Unit vectors at equal angular increments starting at 0 rad.

    With the default count this gives the 8 compass directions at 45 degrees.
    """
    step = 2.0 * math.pi / count
    return [(math.cos(i * step), math.sin(i * step)) for i in range(count)]


def distance_matrix(points: Sequence[Position]) -> np.ndarray:
    """Pairwise Euclidean distances as an (n, n) array."""
    if len(points) == 0:
        return np.zeros((0, 0))
    arr = np.asarray(points, dtype=float)
    diff = arr[:, None, :] - arr[None, :, :]
    return np.linalg.norm(diff, axis=-1)


def distances_from(origin: Position, points: Sequence[Position]) -> np.ndarray:
    """Distances from origin to every point, as a 1D array."""
    if len(points) == 0:
        return np.zeros(0)
    arr = np.asarray(points, dtype=float)
    return np.linalg.norm(arr - np.asarray(origin, dtype=float), axis=1)


def path_length(points: Sequence[Position]) -> float:
    """Total length of an open polyline."""
    return sum(distance(points[i], points[i + 1]) for i in range(len(points) - 1))


def grid_cell(point: Position) -> Tuple[int, int]:
    """Integer unit cell containing the point (floor of each coordinate)."""
    return (math.floor(point[0]), math.floor(point[1]))
