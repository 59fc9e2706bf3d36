"""Mapping SDK boundary: loader, geocoder and the headless host."""

from pinmap.maps.geocoding import GeocodeResponse, GeocodeResult, GoogleGeocoder
from pinmap.maps.headless import HeadlessMapsLibrary, HeadlessMapView, HeadlessOverlayView
from pinmap.maps.host import CoordinateTransformer, MapsLibrary, MapView, OverlayHooks, OverlayView
from pinmap.maps.loader import LibraryLoadError, MapsLibraryLoader
from pinmap.maps.transformer import MercatorTransformer

__all__ = [
    "GeocodeResponse",
    "GeocodeResult",
    "GoogleGeocoder",
    "HeadlessMapsLibrary",
    "HeadlessMapView",
    "HeadlessOverlayView",
    "CoordinateTransformer",
    "MapsLibrary",
    "MapView",
    "OverlayHooks",
    "OverlayView",
    "LibraryLoadError",
    "MapsLibraryLoader",
    "MercatorTransformer",
]
