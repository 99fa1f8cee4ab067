"""
Live location map: tracker, renderer and surface wired together.

LocationMap is what a host application holds. It starts and stops the
tracker, re-renders the surface when the tracked position or accuracy
changes, and produces the text readout (coordinates, distance to the
landmark, accuracy, error message).
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from constants import (
    MAP_NORTH, MAP_SOUTH, MAP_EAST, MAP_WEST,
    LANDMARK_LATITUDE, LANDMARK_LONGITUDE, LANDMARK_LABEL,
)
from drawing_surface import DrawingSurface
from geo import (
    GeoBoundingBox,
    GeoCoordinate,
    Landmark,
    SurfacePoint,
    distance,
    format_accuracy,
    format_coordinate,
    format_distance,
)
from location_provider import LocationProvider, TrackingOptions
from map_renderer import MapRenderer
from projection import project
from tracker import PositionTracker, Tracking, TrackingState

logger = logging.getLogger(__name__)


def default_bounds() -> GeoBoundingBox:
    return GeoBoundingBox(north=MAP_NORTH, south=MAP_SOUTH, east=MAP_EAST, west=MAP_WEST)


def default_landmark() -> Landmark:
    return Landmark(
        coordinate=GeoCoordinate(latitude=LANDMARK_LATITUDE, longitude=LANDMARK_LONGITUDE),
        label=LANDMARK_LABEL,
    )


@dataclass(frozen=True)
class MapReadout:
    """Text shown next to the map.

    Attributes:
        coordinates: Last known position, or None before the first fix
        distance: Distance to the landmark, or None before the first fix
        accuracy: Last reported accuracy, or None
        error: Message for the last failure, or None
        tracking: Whether tracking is active (Requesting or Tracking)
        control_label: Label for the start/stop control
    """
    coordinates: Optional[str]
    distance: Optional[str]
    accuracy: Optional[str]
    error: Optional[str]
    tracking: bool
    control_label: str


RenderListener = Callable[[DrawingSurface], None]


class LocationMap:
    """
    Keeps a drawing surface in sync with a position tracker.

    The surface is drawn once on creation and then re-rendered exactly when
    the (position, accuracy) of the tracking state changes. Non-Tracking
    states count as having neither.

    Usage:
        with LocationMap(provider, PillowSurface()) as location_map:
            location_map.start()
            ...
            print(location_map.readout().distance)

    Args:
        provider: Source of position fixes
        surface: Surface to draw on
        landmark: Reference point (default: Yatap Station)
        bounds: Visible extent (default: Yatap Station area)
        options: Tracking request options
        renderer: Renderer to use (default: MapRenderer())
    """

    def __init__(self, provider: LocationProvider, surface: DrawingSurface,
                 landmark: Optional[Landmark] = None,
                 bounds: Optional[GeoBoundingBox] = None,
                 options: Optional[TrackingOptions] = None,
                 renderer: Optional[MapRenderer] = None):
        self.surface = surface
        self.landmark = landmark if landmark is not None else default_landmark()
        self.bounds = bounds if bounds is not None else default_bounds()
        self.renderer = renderer if renderer is not None else MapRenderer()
        self.tracker = PositionTracker(provider, options)
        self.render_count = 0
        self._render_listeners: List[RenderListener] = []

        self._rendered_key = self._render_key(self.tracker.state)
        self.tracker.add_listener(self._on_state_change)
        self.redraw()

    @staticmethod
    def _render_key(state: TrackingState):
        if isinstance(state, Tracking):
            return (state.position, state.accuracy)
        return (None, None)

    def add_render_listener(self, listener: RenderListener) -> None:
        """Register a callable invoked with the surface after every render."""
        self._render_listeners.append(listener)

    def start(self) -> None:
        self.tracker.start()

    def stop(self) -> None:
        self.tracker.stop()

    def redraw(self) -> None:
        """Render the current state unconditionally."""
        self.renderer.render(self.surface, self.tracker.state, self.landmark, self.bounds)
        self.render_count += 1
        for listener in list(self._render_listeners):
            listener(self.surface)

    def _on_state_change(self, state: TrackingState) -> None:
        key = self._render_key(state)
        if key == self._rendered_key:
            return
        self._rendered_key = key
        self.redraw()

    @property
    def surface_point(self) -> Optional[SurfacePoint]:
        """Last known position projected onto the surface."""
        if self.tracker.position is None:
            return None
        return project(self.tracker.position, self.bounds, self.surface.size)

    @property
    def distance_to_landmark(self) -> Optional[float]:
        """Meters from the last known position to the landmark."""
        if self.tracker.position is None:
            return None
        return distance(self.tracker.position, self.landmark.coordinate)

    def readout(self) -> MapReadout:
        position = self.tracker.position
        meters = self.distance_to_landmark
        tracking = self.tracker.is_tracking

        return MapReadout(
            coordinates=format_coordinate(position) if position is not None else None,
            distance=format_distance(meters) if meters is not None else None,
            accuracy=format_accuracy(self.tracker.accuracy),
            error=self.tracker.error_message,
            tracking=tracking,
            control_label="Stop tracking" if tracking else "Start tracking",
        )

    def dispose(self) -> None:
        """Release the tracker's subscription; the map stops updating."""
        self.tracker.dispose()
        self._render_listeners.clear()
        logger.debug("LocationMap disposed")

    def __enter__(self) -> "LocationMap":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()
