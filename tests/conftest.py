"""Pytest fixtures for AgriVoice tests."""

import math
import os
import tempfile

# Keep config, locks and logs out of the real home directory
os.environ.setdefault("AGRIVOICE_HOME", tempfile.mkdtemp(prefix="agrivoice-test-"))

import pytest  # noqa: E402

from agrivoice.config import AgriVoiceConfig  # noqa: E402
from agrivoice.dictionary import TermNormalizer, default_dictionary  # noqa: E402
from agrivoice.inference import FieldInferenceEngine  # noqa: E402
from agrivoice.location import (  # noqa: E402
    EARTH_RADIUS_KM,
    Coordinate,
    FieldRegistry,
    LocationProximityMatcher,
)

BASE_LAT = 35.6812
BASE_LNG = 139.7671


def offset_north(origin: Coordinate, meters: float) -> Coordinate:
    """Coordinate `meters` due north of origin on the haversine sphere."""
    degrees = math.degrees(meters / (EARTH_RADIUS_KM * 1000))
    return Coordinate(latitude=origin.latitude + degrees, longitude=origin.longitude)


@pytest.fixture
def origin() -> Coordinate:
    return Coordinate(latitude=BASE_LAT, longitude=BASE_LNG, accuracy_meters=10.0)


@pytest.fixture
def normalizer() -> TermNormalizer:
    """Normalizer over the built-in vocabulary."""
    return TermNormalizer(default_dictionary())


@pytest.fixture
def engine() -> FieldInferenceEngine:
    return FieldInferenceEngine()


@pytest.fixture
def matcher() -> LocationProximityMatcher:
    return LocationProximityMatcher()


@pytest.fixture
def registry_path(tmp_path):
    return tmp_path / "fields.json"


@pytest.fixture
def registry(registry_path) -> FieldRegistry:
    """Empty registry persisted under tmp_path."""
    return FieldRegistry(registry_path)


@pytest.fixture
def config(tmp_path) -> AgriVoiceConfig:
    """Config with every file under tmp_path."""
    return AgriVoiceConfig(
        fields_file=tmp_path / "fields.json",
        history_file=tmp_path / "history.json",
        logs_dir=tmp_path / "logs",
    )
