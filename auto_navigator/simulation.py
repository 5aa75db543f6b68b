"""Simulated environment for exercising the navigation session offline.

Provides a point agent that walks toward the last clicked location, a
camera-relative screen projection, a static entity list, and a manual
clock so whole exploration runs are deterministic.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from auto_navigator.actuation import ActuationScheduler
from auto_navigator.errors import ActuationError, EnvironmentUnavailableError
from auto_navigator.geometry import angle_to, distance, offset
from auto_navigator.interfaces import Environment
from auto_navigator.models import Entity, EntityCategory, Position, ScreenPoint, as_position


@dataclass
class ManualClock:
    """Monotonic clock advanced explicitly by the caller."""
    now: float = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class SynchronousScheduler(ActuationScheduler):
    """Scheduler that fires actions immediately, ignoring the delay."""

    def schedule(self, action: Callable[[], None], delay_ms: float) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            generation = self._generation
        self._fire(generation, action)


class SimulatedEnvironment(Environment):
    """Point agent in an open plane.

    Attributes:
        position: Agent world position
        speed: Distance covered per step()
        view_size: Screen width/height; the agent is always at its centre
        entities: Static entities in the world
        walls: Axis-aligned boxes (xmin, ymin, xmax, ymax) the agent cannot enter
        position_available: When False the position feed reports nothing
        reject_actuation: When True move/click requests raise ActuationError
    """

    def __init__(
        self,
        start: Position = (0.0, 0.0),
        speed: float = 8.0,
        view_size: Tuple[int, int] = (400, 300),
        entities: Optional[Sequence[Entity]] = None,
        walls: Optional[Sequence[Tuple[float, float, float, float]]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._logger = logger or logging.getLogger(__name__)
        self.position: Position = as_position(start)
        self.speed = speed
        self.view_size = view_size
        self.entities: List[Entity] = list(entities or [])
        self.walls = list(walls or [])
        self.position_available = True
        self.scan_available = True
        self.reject_actuation = False

        self.pointer: Optional[ScreenPoint] = None
        self.destination: Optional[Position] = None
        self.clicks: List[Position] = []
        self.moves = 0
        self.blocked_steps = 0

    # -------------------------------------------------------------------------
    # Environment
    # -------------------------------------------------------------------------

    def current_position(self) -> Optional[Position]:
        if not self.position_available:
            return None
        return self.position

    def nearby_entities(self, radius: float, category: EntityCategory) -> List[Entity]:
        if not self.scan_available:
            raise EnvironmentUnavailableError('Entity scan not ready')
        return [e for e in self.entities if distance(self.position, e.position) <= radius]

    def screen_projection(self, position: Position) -> Optional[ScreenPoint]:
        width, height = self.view_size
        sx = position[0] - self.position[0] + width / 2.0
        sy = position[1] - self.position[1] + height / 2.0
        if not (0.0 <= sx <= width and 0.0 <= sy <= height):
            return None
        return (sx, sy)

    def unproject(self, screen_point: ScreenPoint) -> Position:
        width, height = self.view_size
        return (
            screen_point[0] - width / 2.0 + self.position[0],
            screen_point[1] - height / 2.0 + self.position[1],
        )

    def request_move(self, screen_point: ScreenPoint) -> None:
        if self.reject_actuation:
            raise ActuationError('Pointer move rejected')
        self.pointer = screen_point
        self.moves += 1

    def request_click(self, screen_point: ScreenPoint) -> None:
        if self.reject_actuation:
            raise ActuationError('Click rejected')
        world = self.unproject(screen_point)
        self.clicks.append(world)
        self.destination = world

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def step(self) -> Position:
        """Advance the agent one step toward its destination."""
        if self.destination is None:
            return self.position

        remaining = distance(self.position, self.destination)
        if remaining <= self.speed:
            candidate = self.destination
        else:
            candidate = offset(self.position, angle_to(self.position, self.destination), self.speed)

        if self._blocked(candidate):
            self.blocked_steps += 1
            return self.position

        self.position = candidate
        if self.position == self.destination:
            self.destination = None
        return self.position

    def _blocked(self, point: Position) -> bool:
        x, y = point
        return any(xmin <= x <= xmax and ymin <= y <= ymax for xmin, ymin, xmax, ymax in self.walls)
