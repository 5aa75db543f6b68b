"""Tests for geometry helpers and shared models."""

import sys
import os
import math

# Add the package to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from hypothesis import given, strategies as st, settings

from auto_navigator.geometry import (
    angle_to, compass_directions, distance, distance_matrix, distances_from, grid_cell, lerp, offset,
    path_length,
)
from auto_navigator.models import NavigatorStatus, OperationResult, OperationStatus, StuckDetectionResult


coordinates = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False, allow_infinity=False)
positions = st.tuples(coordinates, coordinates)


# **Feature: auto-navigator, Property 12: Interpolation Endpoints**
@settings(max_examples=100)
@given(a=positions, b=positions)
def test_property_12_lerp_hits_both_ends_exactly(a, b):
    """Property 12: Interpolation Endpoints

    lerp returns a at t == 0 and b at t == 1 without rounding drift.
    """
    assert lerp(a, b, 0.0) == pytest.approx(a, abs=0.0)
    assert lerp(a, b, 1.0) == pytest.approx(b, abs=0.0)


# **Feature: auto-navigator, Property 13: Distance Matrix Symmetry**
@settings(max_examples=100)
@given(points=st.lists(positions, min_size=1, max_size=10))
def test_property_13_distance_matrix_symmetric_zero_diagonal(points):
    """Property 13: Distance Matrix Symmetry

    The pairwise matrix is symmetric, zero on the diagonal and agrees with
    distance().
    """
    dist = distance_matrix(points)
    assert dist.shape == (len(points), len(points))
    assert np.allclose(dist, dist.T)
    assert np.allclose(np.diag(dist), 0.0)
    assert dist[0, -1] == pytest.approx(distance(points[0], points[-1]))


def test_empty_inputs():
    assert distance_matrix([]).shape == (0, 0)
    assert distances_from((0.0, 0.0), []).shape == (0,)
    assert path_length([]) == 0.0


def test_compass_directions_are_unit_vectors():
    directions = compass_directions(8)
    assert len(directions) == 8
    assert directions[0] == pytest.approx((1.0, 0.0))
    assert directions[2] == pytest.approx((0.0, 1.0))
    for dx, dy in directions:
        assert math.hypot(dx, dy) == pytest.approx(1.0)


def test_offset_follows_heading():
    assert offset((1.0, 1.0), math.pi / 2, 2.0) == pytest.approx((1.0, 3.0))
    heading = angle_to((2.0, 2.0), (-1.0, -1.0))
    assert heading == pytest.approx(-3 * math.pi / 4)
    assert offset((2.0, 2.0), heading, math.sqrt(18.0)) == pytest.approx((-1.0, -1.0))


def test_grid_cells_are_unit_sized_around_the_origin():
    assert grid_cell((3.9, -3.9)) == (3, -4)
    assert grid_cell((0.5, 0.5)) == (0, 0)
    assert grid_cell((-0.5, -0.5)) == (-1, -1)
    assert grid_cell((-1.0, 2.0)) == (-1, 2)


def test_path_length_of_polyline():
    assert path_length([(0.0, 0.0), (3.0, 4.0), (3.0, 10.0)]) == pytest.approx(11.0)


def test_operation_result_constructors():
    assert OperationResult.success(5).ok
    assert OperationResult.unavailable('no feed').status == OperationStatus.UNAVAILABLE
    invalid = OperationResult.invalid([], 'empty')
    assert invalid.status == OperationStatus.INVALID_INPUT
    assert invalid.value == []
    assert not OperationResult.environment_error('rejected').ok


def test_default_stuck_result_is_not_stuck():
    result = StuckDetectionResult()
    assert not result.is_stuck
    assert result.conditions == ()


def test_status_to_dict_serializes_target():
    status = NavigatorStatus(current_target=(1.0, 2.0))
    data = status.to_dict()
    assert data['current_target'] == [1.0, 2.0]
    assert NavigatorStatus().to_dict()['current_target'] is None
