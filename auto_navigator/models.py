"""Data models for the AutoNavigator core.

This module contains the value types, enums and result containers shared by
the path engine, exploration planner, stuck detector and navigation session.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar
import time


Position = Tuple[float, float]
ScreenPoint = Tuple[float, float]

T = TypeVar('T')


class OperationStatus(Enum):
    """Outcome category of a tick-scoped operation.

    States:
        OK: Operation completed
        UNAVAILABLE: Feed not ready, skip this tick
        INVALID_INPUT: Degenerate input, a defined empty/singleton value was returned
        ENVIRONMENT_ERROR: Environment rejected the request, surfaced to the driver
    """
    OK = "OK"
    UNAVAILABLE = "UNAVAILABLE"
    INVALID_INPUT = "INVALID_INPUT"
    ENVIRONMENT_ERROR = "ENVIRONMENT_ERROR"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Typed result of a single operation.

    Attributes:
        status: Outcome category
        value: Payload (meaningful for OK and INVALID_INPUT)
        message: Human-readable detail for logs and diagnostics
    """
    status: OperationStatus
    value: Optional[T] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.OK

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> 'OperationResult[T]':
        return cls(OperationStatus.OK, value, message)

    @classmethod
    def unavailable(cls, message: str) -> 'OperationResult[T]':
        return cls(OperationStatus.UNAVAILABLE, None, message)

    @classmethod
    def invalid(cls, value: Optional[T], message: str) -> 'OperationResult[T]':
        return cls(OperationStatus.INVALID_INPUT, value, message)

    @classmethod
    def environment_error(cls, message: str) -> 'OperationResult[T]':
        return cls(OperationStatus.ENVIRONMENT_ERROR, None, message)


class StuckAction(Enum):
    """Recovery action recommended by the stuck detector."""
    CONTINUE = "CONTINUE"
    REGENERATE = "REGENERATE"
    MOVE_AROUND = "MOVE_AROUND"
    STOP = "STOP"


class StuckKind(Enum):
    """Motion pathology classes, listed in reporting precedence."""
    STATIONARY = "STATIONARY"
    OSCILLATING = "OSCILLATING"
    STALLED = "STALLED"


@dataclass(frozen=True)
class StuckDetectionResult:
    """Classification of one stuck-detector sample.

    Attributes:
        is_stuck: True if any pathology was detected
        kind: The reported (highest precedence) pathology, None when moving
        reason: Human-readable explanation
        recommended_action: What the driver should do about it
        conditions: Every pathology that fired on this sample
    """
    is_stuck: bool = False
    kind: Optional[StuckKind] = None
    reason: str = ""
    recommended_action: StuckAction = StuckAction.CONTINUE
    conditions: Tuple[StuckKind, ...] = ()


class EntityCategory(Enum):
    """Obstacle categories the interaction tracker understands."""
    DOOR = "door"
    TRANSITION = "transition"


@dataclass(frozen=True)
class Entity:
    """An entity reported by the environment feed.

    Attributes:
        entity_id: Stable identifier within the current area
        position: World position
        label: Path/category label used for substring matching
    """
    entity_id: str
    position: Position
    label: str = ""


class TickAction(Enum):
    """What the navigation session did on one tick."""
    IDLE = "IDLE"
    WAIT = "WAIT"
    MOVE = "MOVE"
    INTERACT = "INTERACT"
    RECOVER = "RECOVER"
    REGENERATE = "REGENERATE"
    COMPLETED = "COMPLETED"
    TIMED_OUT = "TIMED_OUT"


@dataclass
class NavigatorStatus:
    """Snapshot of the navigation session for diagnostics.

    Attributes:
        navigating: Whether the session is running
        area_id: Current area/context identifier
        discovery_index: Index of the current discovery target
        discovery_count: Number of discovery points in the current set
        explored_count: Number of explored-area records
        coverage: Estimated coverage ratio 0.0 - 1.0
        current_target: Current exploration target, if any
        last_action: Action taken on the most recent tick
        elapsed: Seconds since the session started
        timestamp: Status timestamp
    """
    navigating: bool = False
    area_id: str = ""
    discovery_index: int = 0
    discovery_count: int = 0
    explored_count: int = 0
    coverage: float = 0.0
    current_target: Optional[Position] = None
    last_action: str = TickAction.IDLE.value
    elapsed: float = 0.0
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            'navigating': self.navigating,
            'area_id': self.area_id,
            'discovery_index': self.discovery_index,
            'discovery_count': self.discovery_count,
            'explored_count': self.explored_count,
            'coverage': self.coverage,
            'current_target': list(self.current_target) if self.current_target is not None else None,
            'last_action': self.last_action,
            'elapsed': self.elapsed,
            'timestamp': self.timestamp,
        }


def as_position(point) -> Position:
    """Coerce any 2-sequence (tuple, list, numpy array) into a Position."""
    return (float(point[0]), float(point[1]))


def as_positions(points) -> List[Position]:
    return [as_position(p) for p in points]
