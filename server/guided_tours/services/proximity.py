"""Great-circle distance and keypoint proximity detection."""

import math
from dataclasses import dataclass
from typing import Collection, Iterable, Optional
from uuid import UUID

from ..models import KeyPoint

EARTH_RADIUS_METERS = 6_371_000.0

# A tourist is near a keypoint when the distance is at most this many meters
PROXIMITY_THRESHOLD_METERS = 50.0


def distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance in meters between two coordinates (haversine).

    Args:
        lat1, lon1: First point in decimal degrees
        lat2, lon2: Second point in decimal degrees

    Returns:
        Distance in meters over a spherical Earth
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    # Rounding can push near-antipodal points just past 1
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def is_near(distance_meters: float) -> bool:
    return distance_meters <= PROXIMITY_THRESHOLD_METERS


@dataclass(frozen=True)
class ProximityMatch:
    """Outcome of scanning a tour's keypoints from one position."""

    keypoint: Optional[KeyPoint]
    distance: Optional[float]

    @property
    def reached(self) -> bool:
        return self.keypoint is not None


def find_first_reachable(
    keypoints: Iterable[KeyPoint],
    completed_ids: Collection[UUID],
    latitude: float,
    longitude: float,
) -> ProximityMatch:
    """
    Find the first uncompleted keypoint within the proximity threshold.

    Keypoints are scanned in the order given (their stored order) and the scan
    stops at the first one in range, even when a later keypoint is closer.
    When nothing is in range, ``distance`` is the distance to the closest
    uncompleted keypoint, or None if every keypoint is already completed.
    """
    closest: Optional[float] = None

    for keypoint in keypoints:
        if keypoint.id in completed_ids:
            continue

        meters = distance(latitude, longitude, keypoint.latitude, keypoint.longitude)
        if is_near(meters):
            return ProximityMatch(keypoint=keypoint, distance=meters)

        if closest is None or meters < closest:
            closest = meters

    return ProximityMatch(keypoint=None, distance=closest)
