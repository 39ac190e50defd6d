"""Location-acquisition collaborators.

The inference core only consumes Coordinates. These classes model how a
fix is obtained: a one-shot request bounded by a timeout, with a recent
fix reused while it is younger than the staleness window.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta

from agrivoice.errors import UnsupportedCapabilityError
from agrivoice.location.models import Coordinate

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAXIMUM_AGE_SECONDS = 300.0


def _aware(moment: datetime) -> datetime:
    """Naive datetimes are taken as local time."""
    return moment if moment.tzinfo is not None else moment.astimezone()


class LocationProvider(ABC):
    """Abstract base class for coordinate sources."""

    @abstractmethod
    def acquire(self, timeout_seconds: float) -> Coordinate:
        """Request a fresh fix.

        Args:
            timeout_seconds: Give up after this long

        Returns:
            The current coordinate

        Raises:
            LocationFailure: permission denied, position unavailable or timeout
            UnsupportedCapabilityError: no location hardware/service
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider can produce fixes on the current host."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for display."""
        ...


class FixedLocationProvider(LocationProvider):
    """Always reports the same coordinate (manual entry, tests)."""

    def __init__(self, coordinate: Coordinate | None) -> None:
        self.coordinate = coordinate

    def acquire(self, timeout_seconds: float) -> Coordinate:
        if self.coordinate is None:
            raise UnsupportedCapabilityError("location")
        return self.coordinate.model_copy(update={"timestamp": datetime.now()})

    def is_available(self) -> bool:
        return self.coordinate is not None

    @property
    def name(self) -> str:
        return "fixed"


class CachedLocationProvider(LocationProvider):
    """Reuse a recent fix instead of asking the wrapped provider again."""

    def __init__(
        self,
        provider: LocationProvider,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        maximum_age_seconds: float = DEFAULT_MAXIMUM_AGE_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.provider = provider
        self.timeout_seconds = timeout_seconds
        self.maximum_age = timedelta(seconds=maximum_age_seconds)
        self._clock = clock
        self._cached: Coordinate | None = None

    @property
    def cached(self) -> Coordinate | None:
        return self._cached

    def _is_fresh(self, coordinate: Coordinate) -> bool:
        if coordinate.timestamp is None:
            return False
        return _aware(self._clock()) - _aware(coordinate.timestamp) < self.maximum_age

    def current_position(self) -> Coordinate:
        """Cached fix if still fresh, otherwise a new one within the timeout."""
        return self.acquire(self.timeout_seconds)

    def acquire(self, timeout_seconds: float) -> Coordinate:
        if self._cached is not None and self._is_fresh(self._cached):
            logger.debug(f"Reusing cached fix from {self._cached.timestamp}")
            return self._cached

        coordinate = self.provider.acquire(timeout_seconds)
        if coordinate.timestamp is None:
            coordinate = coordinate.model_copy(update={"timestamp": self._clock()})
        self._cached = coordinate
        return coordinate

    def is_available(self) -> bool:
        return self.provider.is_available()

    @property
    def name(self) -> str:
        return f"cached({self.provider.name})"
