"""Geometry helpers: great-circle distance and centroid of a point set."""

from __future__ import annotations

import math
from collections.abc import Iterable

from squadtrack._constants import EARTH_RADIUS_M, FEET_PER_METER
from squadtrack.models.coordinate import Centroid, Coordinate


def haversine_feet(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in feet between two ``(lat, lon)`` points in degrees.

    Uses the haversine formula on a sphere of radius 6,371,000 m.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)
    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    # Rounding can push ``a`` a hair above 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c * FEET_PER_METER


def distance(p1: Coordinate | tuple[float, float], p2: Coordinate | tuple[float, float]) -> float:
    """Distance in feet between two coordinates or ``(lat, lon)`` pairs."""
    lat1, lon1 = _as_point(p1)
    lat2, lon2 = _as_point(p2)
    return haversine_feet(lat1, lon1, lat2, lon2)


def centroid(points: Iterable[Coordinate | tuple[float, float]]) -> Centroid:
    """Arithmetic mean of latitudes and longitudes, independently.

    Returns ``Centroid(0.0, 0.0)`` for an empty input.
    """
    count = 0
    sum_lat = 0.0
    sum_lon = 0.0
    for point in points:
        lat, lon = _as_point(point)
        sum_lat += lat
        sum_lon += lon
        count += 1
    if not count:
        return Centroid(0.0, 0.0)
    return Centroid(sum_lat / count, sum_lon / count)


def _as_point(value: Coordinate | tuple[float, float]) -> tuple[float, float]:
    if isinstance(value, Coordinate):
        return value.point
    lat, lon = value
    return float(lat), float(lon)
