"""Pydantic models for coordinates and known fields."""

from datetime import datetime

from pydantic import BaseModel, Field


class Coordinate(BaseModel):
    """A position fix from the location-acquisition collaborator.

    Attributes:
        latitude: Degrees, -90..90
        longitude: Degrees, -180..180
        accuracy_meters: Reported horizontal accuracy, if known
        timestamp: When the fix was taken, if known
    """

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    accuracy_meters: float | None = Field(default=None, ge=0.0)
    timestamp: datetime | None = None


class KnownField(BaseModel):
    """A named plot and the coordinate it was last confirmed at."""

    name: str = Field(..., min_length=1, description="Field name as the operator confirmed it")
    location: Coordinate


class LocationRecord(BaseModel):
    """One entry of the location history."""

    location: Coordinate
    work_type: str | None = None
    recorded_at: datetime = Field(default_factory=datetime.now)


class LocationStatistics(BaseModel):
    """Summary of the location history."""

    total_records: int = 0
    work_types_by_location: dict[str, list[str | None]] = Field(default_factory=dict)
    average_accuracy: float = 0.0


def is_location_accurate(location: Coordinate, required_accuracy_meters: float = 50.0) -> bool:
    """True when the fix is at least as precise as required.

    A fix without a reported accuracy is never considered accurate.
    """
    if location.accuracy_meters is None:
        return False
    return location.accuracy_meters <= required_accuracy_meters


def format_coordinate(location: Coordinate | None) -> str:
    """Human-readable coordinate for notifications."""
    if location is None:
        return "位置情報なし"
    return f"緯度: {location.latitude:.6f}, 経度: {location.longitude:.6f}"
