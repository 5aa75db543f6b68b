"""Exploration planner: frontier generation, traversal and coverage.

The planner keeps the explored-area record (positions the agent actually
visited), proposes discovery points that are not yet covered, orders them
into a route and walks that route with a monotonically increasing index.
"""

import logging
import math
import random
from typing import Callable, List, Optional, Sequence

import numpy as np

from auto_navigator.config import NavigatorConfig
from auto_navigator.geometry import compass_directions, distance, distances_from, offset
from auto_navigator.models import Position, as_position, as_positions
from auto_navigator.pathfinding import PathfindingEngine


# Grid strategy: lattice half-width in cells, and minimum distance of a kept cell
GRID_SECTIONS_PER_SIDE = 4
GRID_MIN_DISTANCE = 20.0

# Directional strategy
DIRECTIONAL_MAX_STEP = 40.0
DIRECTIONAL_RADIUS_FACTOR = 0.8
RANDOM_FALLBACK_ATTEMPTS = 8


class ExplorationPlanner:
    """Proposes unvisited frontier points and tracks coverage.

    Attributes:
        config: Navigator configuration
        discovery_points: Ordered discovery points of the current set
        discovery_index: Index of the current target, 0 <= index <= len
    """

    def __init__(
        self,
        engine: Optional[PathfindingEngine] = None,
        config: Optional[NavigatorConfig] = None,
        rng: Optional[random.Random] = None,
        seed_source: Optional[Callable[[], List[Position]]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize ExplorationPlanner.

        Args:
            engine: Path engine used for route optimization
            config: Navigator configuration (defaults to engine's)
            rng: Random source for the grid and directional strategies
            seed_source: Extra candidate points offered on every frontier plan
            logger: Logger instance (optional, creates default if not provided)
        """
        self.config = config or (engine.config if engine is not None else NavigatorConfig())
        self.engine = engine or PathfindingEngine(self.config)
        self._rng = rng or random.Random(self.config.random_seed)
        self._seed_source = seed_source
        self._logger = logger or logging.getLogger(__name__)
        self.discovery_points: List[Position] = []
        self.discovery_index: int = 0
        self._explored: List[Position] = []
        self._recorded_count: int = 0

    def reset(self) -> None:
        """Clear explored areas and the discovery set."""
        self.discovery_points = []
        self.discovery_index = 0
        self._explored = []
        self._recorded_count = 0

    # =========================================================================
    # Explored-area bookkeeping
    # =========================================================================

    @property
    def explored_areas(self) -> List[Position]:
        return list(self._explored)

    @property
    def explored_count(self) -> int:
        return len(self._explored)

    @property
    def recorded_count(self) -> int:
        """Positions recorded this session, including trimmed ones."""
        return self._recorded_count

    def record_visited(self, position: Position) -> bool:
        """Record the agent position if it moved far enough since the last record.

        When the record exceeds max_explored_areas, the oldest
        explored_trim_batch entries are dropped at once.

        Returns:
            True if the position was recorded
        """
        position = as_position(position)
        if self._explored and distance(self._explored[-1], position) <= self.config.record_distance:
            return False

        self._explored.append(position)
        self._recorded_count += 1
        if len(self._explored) > self.config.max_explored_areas:
            del self._explored[:self.config.explored_trim_batch]
            self._logger.debug(
                f'[EXPLORE] Trimmed explored areas to {len(self._explored)} entries'
            )
        return True

    def is_explored(self, position: Position, radius: Optional[float] = None) -> bool:
        """True if any explored record lies strictly within radius of position."""
        if not self._explored:
            return False
        radius = self.config.coverage_radius if radius is None else radius
        return bool(np.any(distances_from(position, self._explored) < radius))

    def coverage_ratio(self) -> float:
        """Estimated explored fraction of the exploration disk.

        Treats each recorded position as a non-overlapping disk of
        coverage_radius, so this is a stopping heuristic rather than a
        measured area. Trimming the explored list does not lower it.
        """
        explored_area = self._recorded_count * math.pi * self.config.coverage_radius ** 2
        total_area = math.pi * self.config.exploration_radius ** 2
        return min(1.0, explored_area / total_area)

    def is_complete(self) -> bool:
        return self.coverage_ratio() >= self.config.discovery_percent

    # =========================================================================
    # Frontier generation
    # =========================================================================

    def plan_frontier(self, current: Position) -> List[Position]:
        """Generate, order and install a fresh discovery set.

        Unexplored points from seed_source within exploration_radius join
        the strategy's candidates. Resets the traversal index to 0.

        Returns:
            The ordered discovery points (possibly empty)
        """
        current = as_position(current)
        strategy = self.config.frontier_strategy
        if strategy == 'grid':
            candidates = self._grid_candidates(current)
        elif strategy == 'directional':
            candidates = self._directional_candidates(current)
        else:
            candidates = self._radial_candidates(current)

        if self._seed_source is not None:
            candidates = self._limit(self._seeds(current) + candidates, current)

        self.discovery_points = self.order_points(candidates, current)
        self.discovery_index = 0
        self._logger.debug(
            f'[EXPLORE] Generated {len(self.discovery_points)} discovery points '
            f'({strategy}) around ({current[0]:.1f}, {current[1]:.1f})'
        )
        return list(self.discovery_points)

    def _seeds(self, current: Position) -> List[Position]:
        """Unexplored seed points within the exploration radius."""
        return [
            point for point in as_positions(self._seed_source())
            if distance(current, point) <= self.config.exploration_radius
            and not self.is_explored(point)
        ]

    def _radial_candidates(self, current: Position) -> List[Position]:
        candidates = [
            point for point in self._ray_samples(current)
            if not self.is_explored(point)
        ]
        return self._limit(candidates, current)

    def _grid_candidates(self, current: Position) -> List[Position]:
        radius = self.config.exploration_radius
        spacing = radius / GRID_SECTIONS_PER_SIDE
        candidates: List[Position] = []

        for x in range(-GRID_SECTIONS_PER_SIDE, GRID_SECTIONS_PER_SIDE + 1):
            for y in range(-GRID_SECTIONS_PER_SIDE, GRID_SECTIONS_PER_SIDE + 1):
                if x == 0 and y == 0:
                    continue
                point = (current[0] + x * spacing, current[1] + y * spacing)
                if GRID_MIN_DISTANCE <= distance(current, point) <= radius:
                    candidates.append(point)

        low = min(self.config.frontier_min_distance, radius)
        for _ in range(self.config.tsp_point_count // 4):
            angle = self._rng.random() * 2.0 * math.pi
            candidates.append(offset(current, angle, self._rng.uniform(low, radius)))

        candidates = [p for p in candidates if not self.is_explored(p)]
        return self._limit(candidates, current)

    def _directional_candidates(self, current: Position) -> List[Position]:
        radius = self.config.exploration_radius
        best_score = 0.0
        best_direction = None

        for direction in compass_directions(8):
            score = 0.0
            for d in self._ray_distances():
                point = (current[0] + direction[0] * d, current[1] + direction[1] * d)
                if not self.is_explored(point):
                    score += d
            if score > best_score:
                best_score = score
                best_direction = direction

        if best_direction is not None:
            step = min(DIRECTIONAL_MAX_STEP, radius * DIRECTIONAL_RADIUS_FACTOR)
            return [(current[0] + best_direction[0] * step, current[1] + best_direction[1] * step)]

        low = min(self.config.frontier_min_distance, radius)
        for _ in range(RANDOM_FALLBACK_ATTEMPTS):
            angle = self._rng.random() * 2.0 * math.pi
            point = offset(current, angle, self._rng.uniform(low, radius))
            if not self.is_explored(point):
                return [point]

        self._logger.debug('[EXPLORE] Every direction explored, no random fallback found')
        return []

    def _ray_distances(self) -> List[float]:
        distances = []
        d = self.config.frontier_min_distance
        while d <= self.config.exploration_radius:
            distances.append(d)
            d += self.config.frontier_distance_step
        return distances

    def _ray_samples(self, current: Position) -> List[Position]:
        return [
            (current[0] + dx * d, current[1] + dy * d)
            for dx, dy in compass_directions(8)
            for d in self._ray_distances()
        ]

    def _limit(self, candidates: List[Position], current: Position) -> List[Position]:
        """Keep the tsp_point_count candidates closest to current."""
        if len(candidates) <= self.config.tsp_point_count:
            return candidates
        return self.sort_by_distance(candidates, current)[:self.config.tsp_point_count]

    # =========================================================================
    # Ordering and traversal
    # =========================================================================

    @staticmethod
    def sort_by_distance(points: Sequence[Position], origin: Position) -> List[Position]:
        """Stable sort of points by distance from origin."""
        if len(points) == 0:
            return []
        order = np.argsort(distances_from(origin, points), kind='stable')
        return [as_position(points[i]) for i in order]

    def order_points(self, points: Sequence[Position], current: Position) -> List[Position]:
        """Order discovery points for traversal from current.

        Points are sorted by distance from current; with optimize_with_tsp
        and more than 3 points the result is then routed through
        optimize_route, whose tour starts at the closest point.
        """
        ordered = self.sort_by_distance(points, current)
        if self.config.optimize_with_tsp and len(ordered) > 3:
            ordered = self.engine.optimize_route(ordered)
        return ordered

    @property
    def current_target(self) -> Optional[Position]:
        if self.discovery_index < len(self.discovery_points):
            return self.discovery_points[self.discovery_index]
        return None

    @property
    def exhausted(self) -> bool:
        return self.discovery_index >= len(self.discovery_points)

    def advance(self) -> Optional[Position]:
        """Move to the next discovery point; returns it or None when exhausted."""
        if self.discovery_index < len(self.discovery_points):
            self.discovery_index += 1
        return self.current_target

    def next_discovery_target(self, current: Position, replan: bool = True) -> Optional[Position]:
        """Current exploration target, advancing and regenerating as needed.

        Advances past a target within waypoint_tolerance of current and,
        when replan is set, regenerates the discovery set once it is
        exhausted.

        Returns:
            Target position, or None if no unexplored frontier remains
        """
        current = as_position(current)
        target = self.current_target
        while target is not None and distance(current, target) <= self.config.waypoint_tolerance:
            self._logger.debug(
                f'[EXPLORE] Reached discovery point {self.discovery_index + 1}/{len(self.discovery_points)}'
            )
            target = self.advance()

        if target is None and replan:
            self.plan_frontier(current)
            target = self.current_target
            # A fresh target may already be within tolerance; skip those once
            while target is not None and distance(current, target) <= self.config.waypoint_tolerance:
                target = self.advance()

        return target
