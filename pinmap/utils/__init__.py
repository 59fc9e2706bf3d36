"""Utility modules for the viewer."""

from pinmap.utils.geo import (
    is_valid_coordinates,
    local_offset,
    mercator_xy,
    meters_per_pixel,
)
from pinmap.utils.http import HTTPError, RateLimitError, download_with_retry
from pinmap.utils.logging import setup_logging

__all__ = [
    # HTTP utilities
    "HTTPError",
    "RateLimitError",
    "download_with_retry",
    # Logging
    "setup_logging",
    # Geographic utilities
    "is_valid_coordinates",
    "local_offset",
    "mercator_xy",
    "meters_per_pixel",
]
