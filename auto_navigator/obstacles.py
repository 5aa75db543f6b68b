"""Door and transition interaction tracking.

Selects the nearest untouched door or transition within the detection
radius and asks the actuator to click it. Handled entity ids are
remembered until reset() (called on area change) so the same obstacle is
not triggered twice. Both doors and transitions are deduplicated.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from auto_navigator.errors import ActuationError
from auto_navigator.geometry import distance
from auto_navigator.models import Entity, EntityCategory, OperationResult, Position


# Label substrings per category (matched case-insensitively)
CATEGORY_KEYWORDS: Dict[EntityCategory, Tuple[str, ...]] = {
    EntityCategory.DOOR: ('door', 'gate'),
    EntityCategory.TRANSITION: ('transition',),
}


def matches_category(entity: Entity, category: EntityCategory) -> bool:
    label = (entity.label or '').lower()
    return any(keyword in label for keyword in CATEGORY_KEYWORDS[category])


class ObstacleInteractionTracker:
    """Deduplicated set of already-handled obstacles."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)
        self._handled: Set[str] = set()

    @property
    def handled_ids(self) -> Set[str]:
        return set(self._handled)

    def is_handled(self, entity_id: str) -> bool:
        return entity_id in self._handled

    def mark_handled(self, entity_id: str) -> None:
        self._handled.add(entity_id)

    def reset(self) -> None:
        """Forget every handled obstacle."""
        if self._handled:
            self._logger.debug(f'[OBSTACLE] Cleared {len(self._handled)} handled obstacles')
        self._handled.clear()

    def candidates(
        self,
        entities: Sequence[Entity],
        current: Position,
        category: EntityCategory,
        radius: float,
    ) -> List[Entity]:
        """Untouched entities of a category within radius, nearest first."""
        found = [
            entity for entity in entities
            if entity.position is not None
            and matches_category(entity, category)
            and entity.entity_id not in self._handled
            and distance(current, entity.position) <= radius
        ]
        return sorted(found, key=lambda e: distance(current, e.position))

    def check_and_interact(
        self,
        entities: Sequence[Entity],
        current: Position,
        category: EntityCategory,
        radius: float,
        interact: Callable[[Position], None],
    ) -> OperationResult[Entity]:
        """Interact with the nearest untouched obstacle, if any.

        Args:
            entities: Entity list from the environment
            current: Agent position
            category: Door or transition
            radius: Detection radius
            interact: Actuation callback receiving the entity position

        Returns:
            OK with the entity when an interaction was issued,
            OK with None when there was nothing to do,
            ENVIRONMENT_ERROR when the actuator rejected the request
        """
        found = self.candidates(entities, current, category, radius)
        if not found:
            return OperationResult.success(None, f'No {category.value} within {radius}')

        nearest = found[0]
        try:
            interact(nearest.position)
        except ActuationError as e:
            self._logger.warning(f'[OBSTACLE] Failed to use {category.value} {nearest.entity_id}: {e.message}')
            return OperationResult.environment_error(e.message)

        self._handled.add(nearest.entity_id)
        self._logger.info(
            f'[OBSTACLE] Used {category.value} {nearest.entity_id} at '
            f'({nearest.position[0]:.1f}, {nearest.position[1]:.1f})'
        )
        return OperationResult.success(nearest)
