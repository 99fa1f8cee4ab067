"""
Pytest configuration and fixtures for landmark locator tests.

Provides the Yatap Station map extent, landmark, a simulated provider and
ready-made trackers and surfaces.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from constants import MAP_WIDTH, MAP_HEIGHT
from drawing_surface import RecordingSurface
from geo import GeoBoundingBox, GeoCoordinate, Landmark, SurfaceSize
from location_sources import SimulatedLocationProvider
from tracker import PositionTracker


@pytest.fixture
def bounds():
    """Map extent around Yatap Station (~1.1 km x 0.9 km)."""
    return GeoBoundingBox(north=37.415, south=37.405, east=127.135, west=127.125)


@pytest.fixture
def landmark():
    """Yatap Station at the center of the map."""
    return Landmark(coordinate=GeoCoordinate(latitude=37.41, longitude=127.13), label="Yatap Station")


@pytest.fixture
def surface_size():
    return SurfaceSize(width=MAP_WIDTH, height=MAP_HEIGHT)


@pytest.fixture
def provider():
    return SimulatedLocationProvider()


@pytest.fixture
def tracker(provider):
    tracker = PositionTracker(provider)
    yield tracker
    tracker.dispose()


@pytest.fixture
def recording_surface():
    return RecordingSurface(MAP_WIDTH, MAP_HEIGHT)


@pytest.fixture
def sample_track():
    """Short walk from the northwest of the station toward it."""
    return [
        (37.4125, 127.1275),
        (37.4120, 127.1280),
        (37.4110, 127.1290),
        (37.4101, 127.1299),
    ]
