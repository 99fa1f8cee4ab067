"""Linear (equirectangular) mapping from the map's bounding box onto a drawing surface.

Valid only for boxes spanning a few hundred meters; no curvature correction
is applied.
"""

from geo import GeoBoundingBox, GeoCoordinate, SurfacePoint, SurfaceSize


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def project(coord: GeoCoordinate, box: GeoBoundingBox, surface: SurfaceSize) -> SurfacePoint:
    """Project a coordinate onto the surface.

    Longitude grows to the right, latitude grows upward (so y grows southward).
    Coordinates outside the box are pinned to the nearest edge on each axis.
    """
    x = (coord.longitude - box.west) / (box.east - box.west) * surface.width
    y = (box.north - coord.latitude) / (box.north - box.south) * surface.height

    return SurfacePoint(
        x=_clamp(x, 0.0, surface.width),
        y=_clamp(y, 0.0, surface.height),
    )
