"""
Geographic data models and great-circle distance.

Pydantic models for coordinates, the visible bounding box and the landmark,
plus the haversine distance and the readout formatters used by the map.
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from constants import (
    EARTH_RADIUS_M,
    METERS_PER_KILOMETER,
    MAP_WIDTH, MAP_HEIGHT,
)


class GeoCoordinate(BaseModel):
    """WGS84 position in degrees."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, description="Latitude in degrees")
    longitude: float = Field(ge=-180.0, le=180.0, description="Longitude in degrees")


class GeoBoundingBox(BaseModel):
    """
    Rectangular map extent in degrees.

    Defined once at configuration time; north must lie above south and east
    to the right of west.
    """
    model_config = ConfigDict(frozen=True)

    north: float = Field(ge=-90.0, le=90.0)
    south: float = Field(ge=-90.0, le=90.0)
    east: float = Field(ge=-180.0, le=180.0)
    west: float = Field(ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def _check_orientation(self) -> "GeoBoundingBox":
        if self.north <= self.south:
            raise ValueError(f"north ({self.north}) must be greater than south ({self.south})")
        if self.east <= self.west:
            raise ValueError(f"east ({self.east}) must be greater than west ({self.west})")
        return self

    @property
    def center(self) -> GeoCoordinate:
        return GeoCoordinate(
            latitude=(self.north + self.south) / 2.0,
            longitude=(self.east + self.west) / 2.0,
        )

    def contains(self, coord: GeoCoordinate) -> bool:
        """True if the coordinate lies inside the box (edges included)."""
        return (self.south <= coord.latitude <= self.north and
                self.west <= coord.longitude <= self.east)


class Landmark(BaseModel):
    """The fixed reference point distances are measured against."""
    model_config = ConfigDict(frozen=True)

    coordinate: GeoCoordinate
    label: str = Field(description="Text drawn next to the landmark marker")


class SurfaceSize(BaseModel):
    """Logical size of a drawing surface."""
    model_config = ConfigDict(frozen=True)

    width: float = Field(default=MAP_WIDTH, gt=0)
    height: float = Field(default=MAP_HEIGHT, gt=0)


class SurfacePoint(BaseModel):
    """Point in surface units, produced by projection.project()."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


def distance(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """
    Great-circle distance between two coordinates using the haversine formula.

    Args:
        a: First coordinate
        b: Second coordinate

    Returns:
        Distance in meters
    """
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = (math.sin(d_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2)
    h = min(h, 1.0)  # rounding can push h a hair above 1

    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(meters: float) -> str:
    """Format a distance as whole meters below 1 km, otherwise kilometers."""
    if meters < METERS_PER_KILOMETER:
        return f"{_round_half_up(meters)}m"
    return f"{meters / METERS_PER_KILOMETER:.2f}km"


def format_accuracy(meters: Optional[float]) -> Optional[str]:
    """Format an accuracy radius, or None when the provider reported none."""
    if meters is None:
        return None
    return f"±{_round_half_up(meters)}m"


def format_coordinate(coord: GeoCoordinate) -> str:
    return f"lat {coord.latitude:.6f}, lon {coord.longitude:.6f}"
