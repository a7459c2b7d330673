"""Great-circle distance between properties.

Pure functions. No I/O.
"""

import logging
import math
from typing import Iterable

from quickoffer.models.property import GeoProperty

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in miles between two lat/lon points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distance_between(origin: GeoProperty, other: GeoProperty) -> float:
    return haversine_miles(origin.latitude, origin.longitude, other.latitude, other.longitude)


def _same_point(origin: GeoProperty, other: GeoProperty) -> bool:
    return other.latitude == origin.latitude and other.longitude == origin.longitude


def filter_within_radius(
    origin: GeoProperty,
    candidates: Iterable[GeoProperty],
    radius_miles: float,
) -> list[GeoProperty]:
    """Return candidates within radius_miles of origin, preserving input order.

    A candidate sitting exactly on the origin's coordinates is treated as the
    origin itself and dropped. Candidates without coordinates are skipped.
    """
    if not origin.has_coordinates:
        logger.warning("Origin property %s has no coordinates", origin.property_id)
        return []

    within: list[GeoProperty] = []
    skipped = 0
    for candidate in candidates:
        if not candidate.has_coordinates:
            skipped += 1
            continue
        if _same_point(origin, candidate):
            continue
        if distance_between(origin, candidate) <= radius_miles:
            within.append(candidate)

    if skipped:
        logger.debug("Skipped %d candidates without coordinates", skipped)
    return within
