"""
Constants for the landmark locator map.

Centralized definitions for surface dimensions, colors, map extent and
tracking defaults.
"""

from typing import Tuple
from dataclasses import dataclass


# =============================================================================
# Drawing Surface
# =============================================================================

MAP_WIDTH = 800
MAP_HEIGHT = 600
MAP_SIZE = (MAP_WIDTH, MAP_HEIGHT)


# =============================================================================
# Colors (RGB / RGBA format for Pillow)
# =============================================================================

@dataclass(frozen=True)
class Colors:
    """Map palette in RGB format (RGBA where translucent)."""
    WHITE: Tuple[int, int, int] = (255, 255, 255)
    BLACK: Tuple[int, int, int] = (0, 0, 0)

    # Background gradient (top -> bottom)
    MEADOW_LIGHT: Tuple[int, int, int] = (232, 245, 232)   # #e8f5e8
    MEADOW_DARK: Tuple[int, int, int] = (212, 237, 218)    # #d4edda

    GRID: Tuple[int, int, int] = (195, 195, 195)           # #c3c3c3
    ROAD: Tuple[int, int, int] = (102, 102, 102)           # #666

    LANDMARK: Tuple[int, int, int] = (255, 68, 68)         # #ff4444
    LABEL: Tuple[int, int, int] = (0, 0, 0)

    POSITION: Tuple[int, int, int] = (74, 144, 226)        # #4a90e2
    POSITION_BORDER: Tuple[int, int, int] = (255, 255, 255)
    POSITION_DOT: Tuple[int, int, int] = (255, 255, 255)
    ACCURACY: Tuple[int, int, int, int] = (74, 144, 226, 51)  # 20% alpha


COLORS = Colors()


# =============================================================================
# Map Layers
# =============================================================================

GRID_SPACING = 50
GRID_LINE_WIDTH = 1
ROAD_WIDTH = 4

LANDMARK_RADIUS = 8
LANDMARK_LABEL_OFFSET = (12, 5)
LABEL_FONT_SIZE = 14

POSITION_RADIUS = 10
POSITION_BORDER_WIDTH = 3
POSITION_DOT_RADIUS = 3

# Accuracy disk: meters / divisor, capped (display heuristic, not to scale)
ACCURACY_DIVISOR = 10.0
ACCURACY_MAX_RADIUS = 50.0


# =============================================================================
# Map Extent & Landmark (Yatap Station area)
# =============================================================================

MAP_NORTH = 37.415
MAP_SOUTH = 37.405
MAP_WEST = 127.125
MAP_EAST = 127.135

LANDMARK_LATITUDE = 37.41
LANDMARK_LONGITUDE = 127.13
LANDMARK_LABEL = "Yatap Station"


# =============================================================================
# Tracking Defaults (passed through to the location provider)
# =============================================================================

DEFAULT_HIGH_ACCURACY = True
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_MAX_CACHED_AGE_MS = 60000


# =============================================================================
# Conversion Constants
# =============================================================================

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_KILOMETER = 1000.0
