"""Path generation, cropping and route optimization.

Paths are straight-line interpolations between two positions; there is no
obstacle model. Routes over a set of points are ordered with a
nearest-neighbour construction followed by 2-opt improvement.
"""

import logging
import math
from collections import OrderedDict
from typing import List, Optional, Sequence, Tuple

import numpy as np

from auto_navigator.config import NavigatorConfig
from auto_navigator.geometry import clamp, distance, distance_matrix, grid_cell, lerp, path_length
from auto_navigator.models import Position, as_position


CacheKey = Tuple[Tuple[int, int], Tuple[int, int], str]


class PathfindingEngine:
    """Generates, crops and orders waypoint sequences.

    Attributes:
        config: Navigator configuration
        area_id: Identifier of the current area; part of every cache key
    """

    def __init__(self, config: Optional[NavigatorConfig] = None, logger: Optional[logging.Logger] = None):
        self.config = config or NavigatorConfig()
        self._logger = logger or logging.getLogger(__name__)
        self.area_id: str = ""
        self._path_cache: 'OrderedDict[CacheKey, List[Position]]' = OrderedDict()
        self.cache_hits = 0
        self.cache_misses = 0

    # =========================================================================
    # Path generation
    # =========================================================================

    def step_size_for(self, length: float) -> float:
        """Interpolation step for a route of the given length."""
        if not self.config.adaptive_step:
            return self.config.fixed_step_size
        return clamp(length / 10.0, self.config.min_step_size, self.config.max_step_size)

    def generate_path(self, start: Position, end: Position) -> List[Position]:
        """Interpolate a waypoint sequence from start to end.

        Produces steps + 1 evenly spaced points inclusive of both ends, where
        steps = floor(length / step_size), at least 1. If the last point is
        farther than end_epsilon from end, end is appended.

        Args:
            start: Start position
            end: Goal position

        Returns:
            Waypoint list; [start] when start == end
        """
        start = as_position(start)
        end = as_position(end)
        length = distance(start, end)
        if length == 0.0:
            return [start]

        step = self.step_size_for(length)
        steps = max(1, int(math.floor(length / step)))
        path = [lerp(start, end, i / steps) for i in range(steps + 1)]

        if distance(path[-1], end) > self.config.end_epsilon:
            path.append(end)

        return path

    def get_path(self, start: Position, end: Position) -> List[Position]:
        """Memoized generate_path keyed by the grid cells of both ends.

        The cached path was generated from the first start/end seen for the
        pair of cells; callers receive a copy.
        """
        key: CacheKey = (grid_cell(start), grid_cell(end), self.area_id)
        cached = self._path_cache.get(key)
        if cached is not None:
            self.cache_hits += 1
            self._path_cache.move_to_end(key)
            return list(cached)

        self.cache_misses += 1
        path = self.generate_path(start, end)
        self._path_cache[key] = path
        if len(self._path_cache) > self.config.path_cache_size:
            self._path_cache.popitem(last=False)
        return list(path)

    @property
    def cache_size(self) -> int:
        return len(self._path_cache)

    def clear_cache(self) -> None:
        """Drop every memoized path."""
        if self._path_cache:
            self._logger.debug(f'[ROUTE] Cleared {len(self._path_cache)} cached paths')
        self._path_cache.clear()

    def set_area(self, area_id: str) -> None:
        """Switch to a new area; cached paths from the old one are dropped."""
        if area_id != self.area_id:
            self.clear_cache()
        self.area_id = area_id

    # =========================================================================
    # Cropping
    # =========================================================================

    def crop_path(
        self,
        full_path: Sequence[Position],
        current: Position,
        radius: Optional[float] = None,
    ) -> List[Position]:
        """Cut the locally relevant part of a path around the agent.

        Starts at the path point nearest to current (lowest index on ties),
        keeps points within radius up to extra_points_count, then adds one
        lookahead point beyond the radius and stops.

        Args:
            full_path: Complete waypoint sequence
            current: Agent position
            radius: Crop radius, defaults to path_crop_radius

        Returns:
            Cropped waypoints; never empty for non-empty input
        """
        if len(full_path) == 0:
            return []

        radius = self.config.path_crop_radius if radius is None else radius
        current = as_position(current)

        closest_index = 0
        closest_distance = math.inf
        for i, point in enumerate(full_path):
            d = distance(current, point)
            if d < closest_distance:
                closest_distance = d
                closest_index = i

        cropped: List[Position] = []
        for point in full_path[closest_index:]:
            if distance(current, point) <= radius:
                cropped.append(as_position(point))
                if len(cropped) >= self.config.extra_points_count:
                    break
            elif cropped:
                # Lookahead point beyond the radius
                cropped.append(as_position(point))
                break

        return cropped if cropped else [as_position(full_path[0])]

    # =========================================================================
    # Route optimization
    # =========================================================================

    def optimize_route(self, points: Sequence[Position]) -> List[Position]:
        """Order points into a short open tour.

        Nearest-neighbour construction from the first point, then 2-opt.
        Each 2-opt pass visits every non-adjacent edge pair once and adopts
        a reversal as soon as it is strictly shorter; two_opt_passes bounds
        the number of passes (a pass without improvement ends early).

        Returns:
            A permutation of points; inputs of 3 or fewer points are
            returned in their original order
        """
        points = [as_position(p) for p in points]
        if len(points) <= 3:
            return points

        dist = distance_matrix(points)
        tour = self._nearest_neighbor_order(dist)
        tour = self._two_opt(tour, dist)
        return [points[i] for i in tour]

    def nearest_neighbor_route(self, points: Sequence[Position]) -> List[Position]:
        """Nearest-neighbour ordering only, starting from the first point."""
        points = [as_position(p) for p in points]
        if len(points) <= 1:
            return points
        order = self._nearest_neighbor_order(distance_matrix(points))
        return [points[i] for i in order]

    @staticmethod
    def route_length(points: Sequence[Position]) -> float:
        return path_length(points)

    @staticmethod
    def _nearest_neighbor_order(dist: np.ndarray) -> List[int]:
        n = dist.shape[0]
        order = [0]
        visited = np.zeros(n, dtype=bool)
        visited[0] = True
        current = 0
        for _ in range(n - 1):
            candidates = np.where(visited, np.inf, dist[current])
            # argmin returns the first minimum, so ties go to the lower index
            nearest = int(np.argmin(candidates))
            order.append(nearest)
            visited[nearest] = True
            current = nearest
        return order

    def _two_opt(self, tour: List[int], dist: np.ndarray) -> List[int]:
        n = len(tour)
        best = list(tour)
        best_length = self._tour_length(best, dist)

        for pass_number in range(self.config.two_opt_passes):
            improved = False
            for i in range(1, n - 2):
                for k in range(i + 1, n):
                    if k - i == 1:
                        continue
                    candidate = best[:i] + best[i:k + 1][::-1] + best[k + 1:]
                    candidate_length = self._tour_length(candidate, dist)
                    if candidate_length < best_length:
                        best = candidate
                        best_length = candidate_length
                        improved = True
            if not improved:
                break
            self._logger.debug(f'[ROUTE] 2-opt pass {pass_number + 1}: length {best_length:.2f}')

        return best

    @staticmethod
    def _tour_length(tour: List[int], dist: np.ndarray) -> float:
        return float(sum(dist[tour[j], tour[j + 1]] for j in range(len(tour) - 1)))
