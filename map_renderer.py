"""
Location map renderer.

Draws the landmark map and the tracked position onto a DrawingSurface.
Every call redraws the full surface from scratch through an ordered layer
stack:

1. background gradient
2. fixed-spacing grid
3. road overlay (two crossing lines, not geographic)
4. landmark marker and label
5. current position (accuracy disk, marker, center dot), Tracking only
"""

import logging
from dataclasses import dataclass
from typing import Optional

from constants import (
    COLORS,
    GRID_SPACING, GRID_LINE_WIDTH, ROAD_WIDTH,
    LANDMARK_RADIUS, LANDMARK_LABEL_OFFSET, LABEL_FONT_SIZE,
    POSITION_RADIUS, POSITION_BORDER_WIDTH, POSITION_DOT_RADIUS,
    ACCURACY_DIVISOR, ACCURACY_MAX_RADIUS,
)
from drawing_surface import DrawingSurface
from geo import GeoBoundingBox, Landmark, SurfaceSize
from layers import Layer, LayerStack
from projection import project
from tracker import Tracking, TrackingState

logger = logging.getLogger(__name__)


def accuracy_radius(accuracy_m: float) -> float:
    """Surface radius of the accuracy disk.

    A display heuristic (meters / 10, capped at 50), not derived from the
    bounding box scale.
    """
    return min(accuracy_m / ACCURACY_DIVISOR, ACCURACY_MAX_RADIUS)


@dataclass(frozen=True)
class Scene:
    """Everything a layer needs to draw one frame."""
    size: SurfaceSize
    state: TrackingState
    landmark: Landmark
    box: GeoBoundingBox


class BackgroundLayer(Layer):
    """Clears the surface and fills it with a top-to-bottom gradient."""

    def draw(self, surface: DrawingSurface, scene: Scene) -> None:
        w, h = scene.size.width, scene.size.height
        surface.clear()
        surface.fill_linear_gradient(0, 0, w, h, start=(0, 0), end=(0, h),
                                     stops=[(0.0, COLORS.MEADOW_LIGHT), (1.0, COLORS.MEADOW_DARK)])


class GridLayer(Layer):
    """Vertical and horizontal lines every `spacing` units, both edges included."""

    def __init__(self, spacing: float = GRID_SPACING, **kwargs):
        super().__init__(**kwargs)
        if spacing <= 0:
            raise ValueError(f"Grid spacing must be positive, got {spacing}")
        self.spacing = spacing

    def draw(self, surface: DrawingSurface, scene: Scene) -> None:
        w, h = scene.size.width, scene.size.height

        x = 0.0
        while x <= w:
            surface.line((x, 0), (x, h), COLORS.GRID, width=GRID_LINE_WIDTH)
            x += self.spacing

        y = 0.0
        while y <= h:
            surface.line((0, y), (w, y), COLORS.GRID, width=GRID_LINE_WIDTH)
            y += self.spacing


class RoadLayer(Layer):
    """Decorative crossroads through the surface center."""

    def draw(self, surface: DrawingSurface, scene: Scene) -> None:
        w, h = scene.size.width, scene.size.height
        surface.line((0, h / 2), (w, h / 2), COLORS.ROAD, width=ROAD_WIDTH)
        surface.line((w / 2, 0), (w / 2, h), COLORS.ROAD, width=ROAD_WIDTH)


class LandmarkLayer(Layer):

    def draw(self, surface: DrawingSurface, scene: Scene) -> None:
        point = project(scene.landmark.coordinate, scene.box, scene.size)
        surface.circle((point.x, point.y), LANDMARK_RADIUS, fill=COLORS.LANDMARK)

        dx, dy = LANDMARK_LABEL_OFFSET
        surface.text((point.x + dx, point.y + dy), scene.landmark.label,
                     COLORS.LABEL, font_size=LABEL_FONT_SIZE)


class PositionLayer(Layer):
    """Current position marker; draws nothing unless the state is Tracking."""

    def draw(self, surface: DrawingSurface, scene: Scene) -> None:
        state = scene.state
        if not isinstance(state, Tracking):
            return

        point = project(state.position, scene.box, scene.size)
        center = (point.x, point.y)

        # A zero accuracy is treated like a missing one
        if state.accuracy:
            surface.circle(center, accuracy_radius(state.accuracy), fill=COLORS.ACCURACY)

        surface.circle(center, POSITION_RADIUS, fill=COLORS.POSITION,
                       outline=COLORS.POSITION_BORDER, width=POSITION_BORDER_WIDTH)
        surface.circle(center, POSITION_DOT_RADIUS, fill=COLORS.POSITION_DOT)


class MapRenderer:
    """Renders tracking state onto a drawing surface.

    Stateless between calls apart from its layer configuration. Additional
    layers can be registered on `layers`, on top or beneath a named layer
    such as "position".

    Args:
        grid_spacing: Distance between grid lines in surface units
    """

    def __init__(self, grid_spacing: float = GRID_SPACING):
        self.layers = LayerStack()
        self.layers.register("background", BackgroundLayer())
        self.layers.register("grid", GridLayer(spacing=grid_spacing))
        self.layers.register("roads", RoadLayer())
        self.layers.register("landmark", LandmarkLayer())
        self.layers.register("position", PositionLayer())

    def render(self, surface: DrawingSurface, state: TrackingState,
               landmark: Landmark, box: GeoBoundingBox,
               size: Optional[SurfaceSize] = None) -> None:
        """
        Redraw the whole surface.

        Args:
            surface: Target surface (fully overwritten)
            state: Current tracking state
            landmark: Fixed reference point
            box: Visible map extent
            size: Logical size to draw at (defaults to the surface size)
        """
        scene = Scene(size=size or surface.size, state=state, landmark=landmark, box=box)
        self.layers.draw_all(surface, scene)
        logger.debug(f"Rendered map ({type(state).__name__})")
