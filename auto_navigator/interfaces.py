"""Collaborator interfaces the core consumes.

Implementations live outside the core (game client, simulator, robot
bridge). Failures are reported by raising the exceptions from
auto_navigator.errors:

- EnvironmentUnavailableError when the feed is not ready this tick
- ActuationError when a move or click is rejected
- RouteServiceError when the optional route service fails
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from auto_navigator.models import Entity, EntityCategory, Position, ScreenPoint


class Environment(ABC):
    """Position feed, entity scan, projection and actuation."""

    @abstractmethod
    def current_position(self) -> Optional[Position]:
        """Agent position, or None when no reading is available."""

    @abstractmethod
    def nearby_entities(self, radius: float, category: EntityCategory) -> List[Entity]:
        """Entities within radius of the agent.

        The category is a hint; the core filters labels itself.
        """

    @abstractmethod
    def screen_projection(self, position: Position) -> Optional[ScreenPoint]:
        """Screen point for a world position, or None if off-screen."""

    @abstractmethod
    def request_move(self, screen_point: ScreenPoint) -> None:
        """Place the pointer at screen_point."""

    @abstractmethod
    def request_click(self, screen_point: ScreenPoint) -> None:
        """Click at screen_point."""


class RouteService(ABC):
    """Optional external route service."""

    @abstractmethod
    async def lookup_route(self, target: Position) -> List[Position]:
        """Waypoints from the agent to target (may be empty)."""

    @abstractmethod
    def cluster_by_category(self, category: str, radius: float) -> List[Position]:
        """Cluster centres of entities of a category within radius."""
