"""Route lookup with an optional external service.

When a RouteService is configured its answer is awaited cooperatively; the
in-flight lookup is cancelled whenever navigation starts, stops or the area
changes. Without a service, or when the service returns nothing, the
straight-line path from PathfindingEngine is used.

The service can also report cluster centres of an entity category, which
the navigator uses to seed frontier planning.
"""

import asyncio
import logging
from typing import List, Optional

from auto_navigator.errors import RouteServiceError
from auto_navigator.interfaces import RouteService
from auto_navigator.models import OperationResult, Position, as_position, as_positions
from auto_navigator.pathfinding import PathfindingEngine


class RouteLookup:
    """Awaitable, cancelable route computation."""

    def __init__(
        self,
        engine: PathfindingEngine,
        service: Optional[RouteService] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.engine = engine
        self.service = service
        self._logger = logger or logging.getLogger(__name__)
        self._task: Optional[asyncio.Task] = None
        self._cancelled_task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> bool:
        """Cancel the in-flight service lookup; returns True if one was running."""
        if not self.in_flight:
            return False
        self._task.cancel()
        self._cancelled_task = self._task
        self._logger.debug('[ROUTE] Cancelled in-flight route lookup')
        return True

    def clusters(self, category: str, radius: float) -> List[Position]:
        """Cluster centres of a category from the service; empty without one."""
        if self.service is None:
            return []
        try:
            centres = self.service.cluster_by_category(category, radius)
        except RouteServiceError as e:
            self._logger.warning(f'[ROUTE] Cluster lookup for {category!r} failed: {e.message}')
            return []
        return as_positions(centres or [])

    async def lookup(self, start: Position, target: Position) -> OperationResult[List[Position]]:
        """Compute a waypoint sequence from start to target.

        Returns:
            OK with the path; UNAVAILABLE if the lookup was cancelled;
            INVALID_INPUT with [start] when start == target
        """
        start = as_position(start)
        target = as_position(target)
        if start == target:
            return OperationResult.invalid([start], 'Start and target coincide')

        if self.service is None:
            return OperationResult.success(self.engine.get_path(start, target))

        self.cancel()
        task = asyncio.ensure_future(self.service.lookup_route(target))
        self._task = task
        try:
            route = await task
        except asyncio.CancelledError:
            # Only a cancel() from this lookup object turns into a result
            if self._cancelled_task is not task:
                raise
            return OperationResult.unavailable('Route lookup cancelled')
        except RouteServiceError as e:
            self._logger.warning(f'[ROUTE] Route service failed, using straight path: {e.message}')
            route = []
        finally:
            if self._task is task:
                self._task = None

        if not route:
            return OperationResult.success(self.engine.get_path(start, target), 'fallback')

        route = as_positions(route)
        self._logger.debug(f'[ROUTE] Service route with {len(route)} waypoints')
        return OperationResult.success(route)
