"""StuckDetector - classifies motion pathologies from a rolling history.

Evaluated once per tick. Three independent checks run on every sample:

- stationary: the agent has not moved for longer than stationary_time
- stalled: distance to target has not changed for too many samples
- oscillating: the agent bounces between two close clusters of positions

When several fire, the reported one follows StuckKind order
(stationary, oscillating, stalled). This is a fixed ranking, not "last
check wins": an agent that is both stationary and stalled is moved around
rather than sent to replan.
"""

import logging
import math
import random
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from auto_navigator.config import NavigatorConfig
from auto_navigator.geometry import distance, offset
from auto_navigator.models import Position, StuckAction, StuckDetectionResult, StuckKind, as_position


REASONS = {
    StuckKind.STATIONARY: "Agent hasn't moved for {seconds:.0f} seconds",
    StuckKind.OSCILLATING: "Agent is oscillating between positions",
    StuckKind.STALLED: "Distance to target not decreasing",
}

ACTIONS = {
    StuckKind.STATIONARY: StuckAction.MOVE_AROUND,
    StuckKind.OSCILLATING: StuckAction.MOVE_AROUND,
    StuckKind.STALLED: StuckAction.REGENERATE,
}


class StuckDetector:
    """Rolling-window motion classifier.

    Attributes:
        config: Navigator configuration
        same_distance_count: Consecutive samples without progress
    """

    def __init__(
        self,
        config: Optional[NavigatorConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize StuckDetector.

        Args:
            config: Navigator configuration (defaults if omitted)
            clock: Monotonic time source in seconds
            rng: Random source for avoidance points
            logger: Logger instance (optional, creates default if not provided)
        """
        self.config = config or NavigatorConfig()
        self._clock = clock
        self._rng = rng or random.Random(self.config.random_seed)
        self._logger = logger or logging.getLogger(__name__)
        self.reset()

    def reset(self) -> None:
        """Forget the history; the next sample counts as movement."""
        self._recent_positions: Deque[Position] = deque(maxlen=self.config.history_size)
        self._last_position: Optional[Position] = None
        self._last_distance: float = math.inf
        self.same_distance_count: int = 0
        self._last_movement_time: float = self._clock()

    @property
    def recent_positions(self) -> List[Position]:
        return list(self._recent_positions)

    @property
    def seconds_since_movement(self) -> float:
        return self._clock() - self._last_movement_time

    def check_if_stuck(
        self,
        current_pos: Position,
        distance_to_target: Optional[float] = None,
    ) -> StuckDetectionResult:
        """Record a sample and classify the current motion.

        Args:
            current_pos: Agent position this tick
            distance_to_target: Distance to the current target; the progress
                check is skipped when None

        Returns:
            StuckDetectionResult with the highest precedence pathology
        """
        current_pos = as_position(current_pos)
        now = self._clock()
        self._recent_positions.append(current_pos)

        fired: List[StuckKind] = []

        if self._check_stationary(current_pos, now):
            fired.append(StuckKind.STATIONARY)
        if self._check_oscillating():
            fired.append(StuckKind.OSCILLATING)
        if distance_to_target is not None and self._check_stalled(distance_to_target):
            fired.append(StuckKind.STALLED)

        self._last_position = current_pos
        if distance_to_target is not None:
            self._last_distance = distance_to_target

        if not fired:
            return StuckDetectionResult()

        kind = min(fired, key=list(StuckKind).index)
        reason = REASONS[kind].format(seconds=self.config.stationary_time)
        self._logger.debug(f'[STUCK] {reason} at ({current_pos[0]:.1f}, {current_pos[1]:.1f})')
        return StuckDetectionResult(
            is_stuck=True,
            kind=kind,
            reason=reason,
            recommended_action=ACTIONS[kind],
            conditions=tuple(sorted(fired, key=list(StuckKind).index)),
        )

    def _check_stationary(self, current_pos: Position, now: float) -> bool:
        if self._last_position is None or \
                distance(current_pos, self._last_position) >= self.config.movement_threshold:
            self._last_movement_time = now
            return False
        return now - self._last_movement_time > self.config.stationary_time

    def _check_stalled(self, distance_to_target: float) -> bool:
        if abs(distance_to_target - self._last_distance) < self.config.progress_epsilon:
            self.same_distance_count += 1
        else:
            self.same_distance_count = 0
        return self.same_distance_count > self.config.stuck_detection_threshold

    def _check_oscillating(self) -> bool:
        if len(self._recent_positions) < 6:
            return False

        window = list(self._recent_positions)[-6:]
        radius = self.config.oscillation_radius
        for i in range(3):
            if distance(window[i], window[i + 3]) > radius:
                return False

        # Holding still is the stationary check's business
        return any(
            distance(window[i], window[i + 1]) >= self.config.movement_threshold
            for i in range(5)
        )

    def find_avoidance_point(self, current_pos: Position, radius: Optional[float] = None) -> Position:
        """Random recovery waypoint around the agent.

        Args:
            current_pos: Agent position
            radius: Maximum offset, defaults to stuck_recovery_distance

        Returns:
            Point at a uniform random heading and a distance in
            [radius / 2, radius] from current_pos
        """
        radius = self.config.stuck_recovery_distance if radius is None else radius
        angle = self._rng.random() * 2.0 * math.pi
        length = self._rng.uniform(radius / 2.0, radius)
        return offset(as_position(current_pos), angle, length)
