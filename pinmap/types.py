"""
Data models shared by the viewer components.

Defines the fetched map configuration, geographic coordinates, map
construction options and the bootstrap states.
"""

from dataclasses import dataclass
from enum import Enum


class BootstrapState(str, Enum):
    """Lifecycle of the map bootstrapper."""

    UNINITIALIZED = "uninitialized"
    LIBRARY_LOADING = "library_loading"
    LIBRARY_FAILED = "library_failed"  # terminal
    MAP_READY = "map_ready"
    GEOCODING = "geocoding"
    POSITIONED = "positioned"
    GEOCODE_FAILED = "geocode_failed"  # terminal


class GestureHandling(str, Enum):
    """How the map reacts to scroll and touch gestures."""

    COOPERATIVE = "cooperative"
    GREEDY = "greedy"
    NONE = "none"
    AUTO = "auto"


@dataclass(frozen=True)
class MapConfig:
    """Runtime credentials fetched from the backend."""

    map_id: str
    api_key: str

    @classmethod
    def from_dict(cls, data: dict) -> "MapConfig":
        """Build from the backend's JSON body (camelCase keys)."""
        map_id = data["mapId"]
        api_key = data["apiKey"]
        if not isinstance(map_id, str) or not isinstance(api_key, str):
            raise ValueError("mapId and apiKey must be strings")
        return cls(map_id=map_id, api_key=api_key)


@dataclass(frozen=True)
class LatLng:
    """A geographic coordinate in degrees."""

    latitude: float
    longitude: float

    @property
    def lat(self) -> float:
        return self.latitude

    @property
    def lng(self) -> float:
        return self.longitude


# The geocoded marker position
TargetCoordinate = LatLng


@dataclass
class MapOptions:
    """Map construction options handed to the mapping SDK."""

    center: LatLng
    zoom: float
    map_id: str
    tilt: float = 0.0
    heading: float = 0.0
    gesture_handling: GestureHandling = GestureHandling.AUTO
    disable_default_ui: bool = False
