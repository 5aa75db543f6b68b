"""Tests for door / transition interaction tracking."""

import sys
import os

# Add the package to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from hypothesis import given, strategies as st, settings

from auto_navigator.errors import ActuationError
from auto_navigator.models import Entity, EntityCategory, OperationStatus
from auto_navigator.obstacles import ObstacleInteractionTracker, matches_category


DOOR_A = Entity('door_a', (5.0, 0.0), 'Objects/Door/Wooden')
DOOR_B = Entity('door_b', (12.0, 0.0), 'Objects/DOOR')
GATE = Entity('gate', (3.0, 3.0), 'World/Gate/Iron')
PORTAL = Entity('portal', (4.0, 0.0), 'Areas/Transition/Cellar')
CHEST = Entity('chest', (1.0, 0.0), 'Objects/Chest')


class RecordingActuator:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def __call__(self, position):
        if self.fail:
            raise ActuationError('window lost focus')
        self.calls.append(position)


def test_label_matching_is_case_insensitive():
    assert matches_category(DOOR_B, EntityCategory.DOOR)
    assert matches_category(GATE, EntityCategory.DOOR)
    assert matches_category(PORTAL, EntityCategory.TRANSITION)
    assert not matches_category(CHEST, EntityCategory.DOOR)
    assert not matches_category(Entity('x', (0.0, 0.0)), EntityCategory.TRANSITION)


def test_nearest_door_is_used_once():
    tracker = ObstacleInteractionTracker()
    actuator = RecordingActuator()
    entities = [DOOR_B, DOOR_A, CHEST, PORTAL]

    first = tracker.check_and_interact(entities, (0.0, 0.0), EntityCategory.DOOR, 20.0, actuator)
    assert first.ok and first.value == DOOR_A

    second = tracker.check_and_interact(entities, (0.0, 0.0), EntityCategory.DOOR, 20.0, actuator)
    assert second.value == DOOR_B

    third = tracker.check_and_interact(entities, (0.0, 0.0), EntityCategory.DOOR, 20.0, actuator)
    assert third.status == OperationStatus.OK
    assert third.value is None
    assert actuator.calls == [(5.0, 0.0), (12.0, 0.0)]


def test_transitions_are_deduplicated_too():
    tracker = ObstacleInteractionTracker()
    actuator = RecordingActuator()
    for _ in range(3):
        tracker.check_and_interact([PORTAL], (0.0, 0.0), EntityCategory.TRANSITION, 25.0, actuator)
    assert actuator.calls == [(4.0, 0.0)]
    assert tracker.is_handled('portal')


def test_entities_outside_radius_are_ignored():
    tracker = ObstacleInteractionTracker()
    result = tracker.check_and_interact([DOOR_B], (0.0, 0.0), EntityCategory.DOOR, 10.0, RecordingActuator())
    assert result.ok and result.value is None


def test_rejected_actuation_is_not_recorded():
    tracker = ObstacleInteractionTracker()
    result = tracker.check_and_interact([DOOR_A], (0.0, 0.0), EntityCategory.DOOR, 20.0,
                                        RecordingActuator(fail=True))
    assert result.status == OperationStatus.ENVIRONMENT_ERROR
    assert not tracker.is_handled('door_a')


def test_reset_forgets_handled_obstacles():
    tracker = ObstacleInteractionTracker()
    tracker.mark_handled('door_a')
    tracker.reset()
    assert tracker.handled_ids == set()


# **Feature: auto-navigator, Property 11: Handled Obstacles Stay Handled**
@settings(max_examples=100)
@given(xs=st.lists(st.floats(min_value=-19.0, max_value=19.0, allow_nan=False), min_size=1, max_size=10))
def test_property_11_each_door_used_at_most_once(xs):
    """Property 11: Handled Obstacles Stay Handled

    Repeated checks over the same doors interact with each door exactly
    once, nearest first, until all are handled.
    """
    doors = [Entity(f'door_{i}', (x, 0.0), 'Door') for i, x in enumerate(xs)]
    tracker = ObstacleInteractionTracker()
    actuator = RecordingActuator()

    for _ in range(len(doors) + 2):
        tracker.check_and_interact(doors, (0.0, 0.0), EntityCategory.DOOR, 20.0, actuator)

    assert len(actuator.calls) == len(doors)
    assert tracker.handled_ids == {d.entity_id for d in doors}
    assert [abs(p[0]) for p in actuator.calls] == sorted(abs(p[0]) for p in actuator.calls)
