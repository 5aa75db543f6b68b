"""AutoNavigator - navigation session driving the planning core.

This module implements the per-tick exploration routine:
- Position polling with explicit "unavailable" results
- Explored-area bookkeeping and coverage-based completion
- Door / transition interaction
- Stuck detection with avoidance or replanning
- Movement along the cropped path toward the current discovery point
- Single-slot delayed actuation and optional async route lookup
"""

import logging
import random
import time
from typing import Callable, List, Optional

from auto_navigator.actuation import ActuationScheduler
from auto_navigator.config import NavigatorConfig
from auto_navigator.errors import ActuationError, EnvironmentUnavailableError
from auto_navigator.exploration import ExplorationPlanner
from auto_navigator.geometry import distance
from auto_navigator.interfaces import Environment, RouteService
from auto_navigator.models import (
    Entity,
    EntityCategory,
    NavigatorStatus,
    OperationResult,
    OperationStatus,
    Position,
    ScreenPoint,
    StuckAction,
    TickAction,
    as_position,
)
from auto_navigator.obstacles import ObstacleInteractionTracker
from auto_navigator.pathfinding import PathfindingEngine
from auto_navigator.routing import RouteLookup
from auto_navigator.stuck_detector import StuckDetector


class AutoNavigator:
    """Owns every piece of per-session navigation state.

    Lifecycle: start() -> tick() ... -> stop(); on_area_change() stops the
    session and clears area-scoped caches.

    Attributes:
        config: Navigator configuration
        engine: Path generation and route optimization
        planner: Exploration planner
        stuck_detector: Motion pathology classifier
        obstacles: Door/transition interaction tracker
        scheduler: Single-slot delayed actuation
        route_lookup: Optional async route service wrapper
    """

    def __init__(
        self,
        environment: Environment,
        config: Optional[NavigatorConfig] = None,
        route_service: Optional[RouteService] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        scheduler: Optional[ActuationScheduler] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or NavigatorConfig()
        self.environment = environment
        self._clock = clock
        self._rng = rng or random.Random(self.config.random_seed)
        self._logger = logger or logging.getLogger(__name__)

        self.engine = PathfindingEngine(self.config)
        self.route_lookup = RouteLookup(self.engine, route_service)
        self.planner = ExplorationPlanner(
            self.engine, self.config, rng=self._rng,
            seed_source=self._frontier_seeds if self.config.frontier_seed_category else None,
        )
        self.stuck_detector = StuckDetector(self.config, clock=clock, rng=self._rng)
        self.obstacles = ObstacleInteractionTracker()
        self.scheduler = scheduler or ActuationScheduler()

        self.area_id: str = ""
        self._navigating = False
        self._start_time: float = 0.0
        self._last_action_time: Optional[float] = None
        self._full_path: List[Position] = []
        self._path_target: Optional[Position] = None
        self.last_action: TickAction = TickAction.IDLE
        self.last_waypoint: Optional[Position] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_navigating(self) -> bool:
        return self._navigating

    def start(self) -> bool:
        """Start a fresh exploration session.

        Returns:
            True if started, False if a session was already running
        """
        if self._navigating:
            return False

        self.route_lookup.cancel()
        self.scheduler.cancel()
        self.planner.reset()
        self.stuck_detector.reset()
        self._clear_path()
        self._navigating = True
        self._start_time = self._clock()
        self._last_action_time = None
        self.last_action = TickAction.IDLE

        position = self.read_position()
        if position.ok:
            self.planner.plan_frontier(position.value)

        self._logger.info(
            f'[NAV] Exploration started with {len(self.planner.discovery_points)} discovery points'
        )
        return True

    def stop(self) -> None:
        """Stop the session and cancel pending route lookups and actuation."""
        was_navigating = self._navigating
        self._navigating = False
        self.route_lookup.cancel()
        self.scheduler.cancel()
        self._clear_path()
        if was_navigating:
            self._logger.info('[NAV] Navigation stopped')

    def on_area_change(self, area_id: str) -> None:
        """Stop navigation and drop everything scoped to the previous area."""
        self.stop()
        self.engine.set_area(area_id)
        self.engine.clear_cache()
        self.obstacles.reset()
        self.area_id = area_id
        self._logger.info(f'[NAV] Area changed to {area_id!r}')

    def shutdown(self) -> None:
        self.stop()
        self.scheduler.shutdown()

    # =========================================================================
    # Environment access
    # =========================================================================

    def read_position(self) -> OperationResult[Position]:
        """Poll the agent position.

        Returns:
            OK with the position, or UNAVAILABLE when the feed has no reading
        """
        try:
            position = self.environment.current_position()
        except EnvironmentUnavailableError as e:
            return OperationResult.unavailable(e.message)
        if position is None:
            return OperationResult.unavailable('Position unknown')
        return OperationResult.success(as_position(position))

    def _frontier_seeds(self) -> List[Position]:
        return self.route_lookup.clusters(self.config.frontier_seed_category, self.config.exploration_radius)

    def _scan(self, radius: float, category: EntityCategory) -> List[Entity]:
        try:
            return list(self.environment.nearby_entities(radius, category))
        except EnvironmentUnavailableError as e:
            self._logger.debug(f'[NAV] Entity scan unavailable: {e.message}')
            return []

    # =========================================================================
    # Routes
    # =========================================================================

    async def refresh_route(self) -> OperationResult[List[Position]]:
        """Recompute the full path to the current target, awaiting the route service.

        The resulting path is used by subsequent ticks while the target stays
        the same.
        """
        position = self.read_position()
        if not position.ok:
            return OperationResult.unavailable(position.message)
        target = self.planner.current_target
        if target is None:
            return OperationResult.invalid([], 'No exploration target')

        result = await self.route_lookup.lookup(position.value, target)
        if result.ok:
            self._full_path = list(result.value)
            self._path_target = target
        return result

    def _clear_path(self) -> None:
        self._full_path = []
        self._path_target = None

    def next_waypoint(self, position: Position, target: Position) -> Position:
        """Lookahead point of the cropped path from position toward target."""
        if self._path_target == target and self._full_path:
            full_path = self._full_path
        else:
            self._clear_path()
            full_path = self.engine.get_path(position, target)
        cropped = self.engine.crop_path(full_path, position, self.config.path_crop_radius)
        return cropped[-1]

    # =========================================================================
    # Tick
    # =========================================================================

    def tick(self) -> OperationResult[TickAction]:
        """Run one iteration of the exploration routine.

        Priority order: pending actuation errors, position, run time,
        throttling, explored-area record, doors, transitions, stuck
        recovery, exploration movement.

        Returns:
            OK with the TickAction taken; UNAVAILABLE when this tick was
            skipped; ENVIRONMENT_ERROR when actuation was rejected
        """
        if not self._navigating:
            return OperationResult.success(TickAction.IDLE, 'Not navigating')

        error = self.scheduler.take_error()
        if error is not None:
            return OperationResult.environment_error(error.message)

        position_result = self.read_position()
        if not position_result.ok:
            return OperationResult.unavailable(position_result.message)
        position = position_result.value

        now = self._clock()
        if now - self._start_time > self.config.max_run_time:
            self._logger.info('[NAV] Run time exceeded, stopping exploration')
            self.stop()
            return self._done(TickAction.TIMED_OUT)

        if self._last_action_time is not None and \
                (now - self._last_action_time) * 1000.0 < self.config.movement_delay:
            return OperationResult.success(TickAction.WAIT)

        self.planner.record_visited(position)

        result = self._handle_obstacles(position, now)
        if result is not None:
            return result

        target = self.planner.next_discovery_target(position, replan=False)
        if target is None:
            # Completion is judged each time the discovery set runs out
            if self.planner.is_complete():
                self._on_finished()
                return self._done(TickAction.COMPLETED)
            self._clear_path()
            target = self.planner.next_discovery_target(position)

        if self.config.enable_stuck_detection:
            distance_to_target = distance(position, target) if target is not None else None
            stuck = self.stuck_detector.check_if_stuck(position, distance_to_target)
            if stuck.is_stuck:
                self._logger.warning(f'[STUCK] {stuck.reason} -> {stuck.recommended_action.value}')
                self.stuck_detector.reset()
                if stuck.recommended_action == StuckAction.MOVE_AROUND:
                    avoidance = self.stuck_detector.find_avoidance_point(position)
                    return self._move_to(avoidance, TickAction.RECOVER, now)
                if stuck.recommended_action == StuckAction.REGENERATE:
                    self._clear_path()
                    self.planner.plan_frontier(position)
                    return self._done(TickAction.REGENERATE)

        if target is None:
            self._logger.debug('[NAV] No unexplored frontier around the agent')
            return self._done(TickAction.IDLE)

        waypoint = self.next_waypoint(position, target)
        return self._move_to(waypoint, TickAction.MOVE, now)

    def _handle_obstacles(self, position: Position, now: float) -> Optional[OperationResult[TickAction]]:
        checks = (
            (self.config.auto_open_doors, EntityCategory.DOOR, self.config.door_detection_radius),
            (self.config.auto_use_transitions, EntityCategory.TRANSITION, self.config.transition_detection_radius),
        )
        for enabled, category, radius in checks:
            if not enabled:
                continue
            entities = self._scan(radius, category)
            result = self.obstacles.check_and_interact(entities, position, category, radius, self._interact)
            if result.status == OperationStatus.ENVIRONMENT_ERROR:
                return OperationResult.environment_error(result.message)
            if result.value is not None:
                self._last_action_time = now
                return self._done(TickAction.INTERACT)
        return None

    def _interact(self, world: Position) -> None:
        screen = self.environment.screen_projection(world)
        if screen is None:
            raise ActuationError(f'Position ({world[0]:.1f}, {world[1]:.1f}) is off-screen')
        # A pending movement click must not land after this interaction
        self.scheduler.cancel()
        self.environment.request_move(screen)
        self.environment.request_click(screen)

    def _move_to(self, world: Position, action: TickAction, now: float) -> OperationResult[TickAction]:
        screen = self.environment.screen_projection(world)
        if screen is None:
            return OperationResult.unavailable(f'Waypoint ({world[0]:.1f}, {world[1]:.1f}) is off-screen')

        delay = self.config.click_delay + self._rng.uniform(0, self.config.action_randomization)
        self.scheduler.schedule(lambda: self._actuate(screen), delay)
        self._last_action_time = now
        self.last_waypoint = world
        self._logger.debug(f'[NAV] {action.value} toward ({world[0]:.1f}, {world[1]:.1f})')
        return self._done(action)

    def _actuate(self, screen: ScreenPoint) -> None:
        self.environment.request_move(screen)
        self.environment.request_click(screen)

    def _done(self, action: TickAction) -> OperationResult[TickAction]:
        self.last_action = action
        return OperationResult.success(action)

    def _on_finished(self) -> None:
        minutes = (self._clock() - self._start_time) / 60.0
        self._logger.info(
            f'[NAV] Exploration completed! Explored {self.planner.recorded_count} areas '
            f'in {minutes:.1f} minutes (coverage {self.planner.coverage_ratio():.1%})'
        )
        self.stop()

    # =========================================================================
    # Status
    # =========================================================================

    def status(self) -> NavigatorStatus:
        """Snapshot of the session for diagnostics."""
        return NavigatorStatus(
            navigating=self._navigating,
            area_id=self.area_id,
            discovery_index=self.planner.discovery_index,
            discovery_count=len(self.planner.discovery_points),
            explored_count=self.planner.explored_count,
            coverage=self.planner.coverage_ratio(),
            current_target=self.planner.current_target,
            last_action=self.last_action.value,
            elapsed=(self._clock() - self._start_time) if self._navigating else 0.0,
        )
