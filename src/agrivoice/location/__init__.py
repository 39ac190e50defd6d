"""Field-name suggestion from the operator's position.

This module provides:
- Coordinate / KnownField: position fixes and named plots
- FieldRegistry: persistent name -> location store
- LocationProximityMatcher: haversine nearest-field lookup
- LocationHistory: bounded log of work locations with statistics
- LocationProvider implementations for acquiring fixes
"""

from agrivoice.location.history import LocationHistory
from agrivoice.location.matcher import (
    EARTH_RADIUS_KM,
    LocationProximityMatcher,
    ProximityMatch,
    haversine_km,
)
from agrivoice.location.models import (
    Coordinate,
    KnownField,
    LocationRecord,
    LocationStatistics,
    format_coordinate,
    is_location_accurate,
)
from agrivoice.location.provider import (
    CachedLocationProvider,
    FixedLocationProvider,
    LocationProvider,
)
from agrivoice.location.registry import FieldRegistry

__all__ = [
    "CachedLocationProvider",
    "Coordinate",
    "EARTH_RADIUS_KM",
    "FieldRegistry",
    "FixedLocationProvider",
    "KnownField",
    "LocationHistory",
    "LocationProvider",
    "LocationProximityMatcher",
    "LocationRecord",
    "LocationStatistics",
    "ProximityMatch",
    "format_coordinate",
    "haversine_km",
    "is_location_accurate",
]
