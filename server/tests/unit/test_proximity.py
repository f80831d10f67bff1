"""Unit tests for distance and proximity detection."""

from uuid import uuid4

import pytest

from guided_tours.models import KeyPoint
from guided_tours.services.proximity import (
    PROXIMITY_THRESHOLD_METERS,
    distance,
    find_first_reachable,
    is_near,
)


def _keypoint(latitude, longitude, name="kp"):
    return KeyPoint(id=uuid4(), latitude=latitude, longitude=longitude, name=name)


def test_distance_to_self_is_zero():
    assert distance(45.815, 15.9819, 45.815, 15.9819) == 0.0


def test_distance_one_degree_of_latitude():
    # 1 degree on a 6371 km sphere
    assert distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_194.93, rel=1e-6)


def test_distance_is_symmetric():
    a = (44.7866, 20.4489)
    b = (45.2671, 19.8335)
    assert distance(*a, *b) == pytest.approx(distance(*b, *a))


def test_threshold_boundary():
    """0.00045 degrees of latitude is just outside 50 m, 0.00044 just inside."""
    outside = distance(0.0, 0.0, 0.00045, 0.0)
    inside = distance(0.0, 0.0, 0.00044, 0.0)

    assert outside == pytest.approx(50.04, abs=0.01)
    assert inside == pytest.approx(48.93, abs=0.01)
    assert not is_near(outside)
    assert is_near(inside)


def test_threshold_is_inclusive():
    assert is_near(PROXIMITY_THRESHOLD_METERS)
    assert not is_near(PROXIMITY_THRESHOLD_METERS + 0.001)


def test_find_first_reachable_prefers_stored_order_over_closeness():
    """Both keypoints are in range; the first in order wins even though the second is closer."""
    first = _keypoint(0.0003, 0.0, "first")
    second = _keypoint(0.0001, 0.0, "second")

    match = find_first_reachable([first, second], set(), 0.0, 0.0)

    assert match.reached
    assert match.keypoint is first
    assert match.distance == pytest.approx(distance(0.0, 0.0, 0.0003, 0.0))


def test_find_first_reachable_skips_completed():
    first = _keypoint(0.0, 0.0, "first")
    second = _keypoint(0.0001, 0.0, "second")

    match = find_first_reachable([first, second], {first.id}, 0.0, 0.0)

    assert match.keypoint is second


def test_find_first_reachable_reports_closest_uncompleted_when_nothing_in_range():
    far = _keypoint(0.01, 0.0)
    nearer = _keypoint(0.002, 0.0)

    match = find_first_reachable([far, nearer], set(), 0.0, 0.0)

    assert not match.reached
    assert match.keypoint is None
    assert match.distance == pytest.approx(distance(0.0, 0.0, 0.002, 0.0))


def test_find_first_reachable_with_everything_completed():
    only = _keypoint(0.0, 0.0)

    match = find_first_reachable([only], {only.id}, 0.0, 0.0)

    assert not match.reached
    assert match.distance is None


def test_find_first_reachable_without_keypoints():
    match = find_first_reachable([], set(), 10.0, 10.0)

    assert not match.reached
    assert match.distance is None
