"""Nearest-known-field lookup by great-circle distance.

Distances use the haversine formula on a sphere of radius 6371 km. A field
is only suggested when it lies strictly closer than the threshold (100 m by
default).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from agrivoice.location.models import Coordinate, KnownField

EARTH_RADIUS_KM = 6371.0
DEFAULT_THRESHOLD_KM = 0.1


def haversine_km(a: Coordinate, b: Coordinate, radius_km: float = EARTH_RADIUS_KM) -> float:
    """Great-circle distance between two coordinates in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can leave h just outside [0, 1] for near-antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * radius_km * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@dataclass
class ProximityMatch:
    """The nearest known field and how far away it is."""

    field: KnownField
    distance_km: float


class LocationProximityMatcher:
    """Suggest the known field the operator is standing in.

    Ties between equidistant fields go to the one enumerated first.
    """

    def __init__(
        self,
        threshold_km: float = DEFAULT_THRESHOLD_KM,
        radius_km: float = EARTH_RADIUS_KM,
    ) -> None:
        if threshold_km <= 0:
            raise ValueError(f"threshold_km must be positive: {threshold_km}")
        self.threshold_km = threshold_km
        self.radius_km = radius_km

    def distance(self, a: Coordinate, b: Coordinate) -> float:
        return haversine_km(a, b, self.radius_km)

    def nearest(self, current: Coordinate, fields: Iterable[KnownField]) -> ProximityMatch | None:
        """Nearest field regardless of threshold, or None if there are no fields."""
        best: ProximityMatch | None = None
        for field in fields:
            d = self.distance(current, field.location)
            # Strict comparison keeps the first of equidistant fields
            if best is None or d < best.distance_km:
                best = ProximityMatch(field=field, distance_km=d)
        return best

    def find_nearest(self, current: Coordinate, fields: Iterable[KnownField]) -> KnownField | None:
        """Nearest field if it is within the threshold, else None."""
        match = self.nearest(current, fields)
        if match is None or match.distance_km >= self.threshold_km:
            return None
        return match.field
