"""
Tests for LocationMap: reactive re-rendering, readout and disposal.
"""

import pytest
from unittest.mock import MagicMock

from drawing_surface import RecordingSurface
from geo import GeoBoundingBox, GeoCoordinate, Landmark
from location_map import LocationMap, default_bounds, default_landmark
from location_provider import PositionErrorCode, TrackingOptions
from location_sources import SimulatedLocationProvider
from tracker import ErrorKind, Failed, Tracking


@pytest.fixture
def location_map(provider):
    location_map = LocationMap(provider, RecordingSurface())
    yield location_map
    location_map.dispose()


def has_position_marker(surface):
    return len(surface.of_kind("circle")) > 1


class TestDefaults:
    """Tests for the default map configuration."""

    def test_default_bounds(self):
        bounds = default_bounds()
        assert (bounds.north, bounds.south, bounds.east, bounds.west) == (37.415, 37.405, 127.135, 127.125)

    def test_default_landmark(self):
        landmark = default_landmark()
        assert landmark.coordinate == GeoCoordinate(latitude=37.41, longitude=127.13)
        assert landmark.label == "Yatap Station"


class TestRendering:
    """Tests for when the map re-renders."""

    def test_draws_on_creation(self, location_map):
        assert location_map.render_count == 1
        assert location_map.surface.kinds()[0] == "clear"

    def test_start_alone_does_not_render(self, location_map):
        location_map.start()
        assert location_map.render_count == 1

    def test_fix_renders_marker(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.4125, 127.1275, accuracy=20.0)

        assert location_map.render_count == 2
        assert has_position_marker(location_map.surface)

    def test_identical_fix_does_not_render(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.4125, 127.1275, accuracy=20.0)
        provider.push_fix(37.4125, 127.1275, accuracy=20.0)

        assert location_map.render_count == 2

    def test_accuracy_change_renders(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.4125, 127.1275, accuracy=20.0)
        provider.push_fix(37.4125, 127.1275, accuracy=30.0)

        assert location_map.render_count == 3

    def test_stop_clears_marker(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.4125, 127.1275)
        location_map.stop()

        assert location_map.render_count == 3
        assert not has_position_marker(location_map.surface)

    def test_failure_before_fix_does_not_render(self, location_map, provider):
        location_map.start()
        provider.push_error(PositionErrorCode.TIMEOUT)

        assert isinstance(location_map.tracker.state, Failed)
        assert location_map.render_count == 1

    def test_render_listener_receives_surface(self, location_map, provider):
        listener = MagicMock()
        location_map.add_render_listener(listener)
        location_map.start()
        provider.push_fix(37.41, 127.13)

        listener.assert_called_once_with(location_map.surface)

    def test_custom_landmark_and_bounds(self, provider):
        landmark = Landmark(coordinate=GeoCoordinate(latitude=10.5, longitude=20.5), label="Fountain")
        bounds = GeoBoundingBox(north=11.0, south=10.0, east=21.0, west=20.0)
        with LocationMap(provider, RecordingSurface(), landmark=landmark, bounds=bounds) as location_map:
            label = location_map.surface.of_kind("text")[0].args
            assert label["text"] == "Fountain"
            assert label["position"] == pytest.approx((412.0, 305.0))


class TestReadout:
    """Tests for the text readout."""

    def test_idle_readout(self, location_map):
        readout = location_map.readout()

        assert readout.coordinates is None
        assert readout.distance is None
        assert readout.accuracy is None
        assert readout.error is None
        assert readout.tracking is False
        assert readout.control_label == "Start tracking"

    def test_tracking_readout(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.405, 127.13, accuracy=14.6)
        readout = location_map.readout()

        assert readout.coordinates == "lat 37.405000, lon 127.130000"
        assert readout.distance == "556m"
        assert readout.accuracy == "±15m"
        assert readout.tracking is True
        assert readout.control_label == "Stop tracking"

    def test_distance_in_kilometers(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.42, 127.13)
        assert location_map.readout().distance == "1.11km"

    def test_unsupported_platform_readout(self):
        with LocationMap(SimulatedLocationProvider(available=False), RecordingSurface()) as location_map:
            location_map.start()
            readout = location_map.readout()

        assert readout.error == "Location services are not supported on this platform"
        assert readout.control_label == "Start tracking"

    def test_error_readout_keeps_last_position(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.4125, 127.1275)
        provider.push_error(PositionErrorCode.PERMISSION_DENIED)
        readout = location_map.readout()

        assert readout.error == ErrorKind.PERMISSION_DENIED.message
        assert readout.coordinates == "lat 37.412500, lon 127.127500"
        assert readout.tracking is False
        assert readout.control_label == "Start tracking"

    def test_surface_point(self, location_map, provider):
        assert location_map.surface_point is None
        location_map.start()
        provider.push_fix(37.4125, 127.1275)

        point = location_map.surface_point
        assert point.x == pytest.approx(200.0)
        assert point.y == pytest.approx(150.0)

    def test_distance_to_landmark_zero_at_landmark(self, location_map, provider):
        location_map.start()
        provider.push_fix(37.41, 127.13)
        assert location_map.distance_to_landmark == 0.0


class TestDispose:
    """Tests for teardown."""

    def test_dispose_releases_subscription(self, provider):
        location_map = LocationMap(provider, RecordingSurface())
        location_map.start()
        provider.push_fix(37.41, 127.13)

        location_map.dispose()

        assert provider.active_subscriptions == 0
        provider.push_fix(37.412, 127.131)
        assert location_map.render_count == 2

    def test_context_manager(self, provider):
        with LocationMap(provider, RecordingSurface(),
                         options=TrackingOptions(timeout_ms=500)) as location_map:
            location_map.start()
            assert provider.requested_options[0].timeout_ms == 500
        assert provider.active_subscriptions == 0
        assert location_map.tracker.disposed
