"""Geographic utility functions for the viewer."""

import math

EARTH_RADIUS_M = 6378137.0  # WGS84 semi-major axis, as used by Web Mercator
MERCATOR_MAX_LAT = 85.05112878


def is_valid_coordinates(lat: float, lon: float) -> bool:
    """Check if latitude and longitude are valid.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees

    Returns:
        True if coordinates are valid, False otherwise
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180


def meters_per_pixel(lat: float, zoom: float, tile_size: int = 256) -> float:
    """Ground resolution of a Web Mercator map at a latitude and zoom level."""
    return math.cos(math.radians(lat)) * 2 * math.pi * EARTH_RADIUS_M / (tile_size * 2 ** zoom)


def mercator_xy(lat: float, lon: float) -> tuple[float, float]:
    """Project a coordinate to Web Mercator metres (x east, y north)."""
    lat = max(-MERCATOR_MAX_LAT, min(MERCATOR_MAX_LAT, lat))
    x = EARTH_RADIUS_M * math.radians(lon)
    y = EARTH_RADIUS_M * math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))
    return x, y


def local_offset(lat: float, lon: float, origin_lat: float, origin_lon: float) -> tuple[float, float]:
    """East/north offset in ground metres of a point from an origin.

    Mercator distances are scaled by cos(origin latitude) to get true metres,
    which is accurate at the distances a single map view spans.
    """
    x0, y0 = mercator_xy(origin_lat, origin_lon)
    x1, y1 = mercator_xy(lat, lon)
    scale = math.cos(math.radians(origin_lat))
    return (x1 - x0) * scale, (y1 - y0) * scale
