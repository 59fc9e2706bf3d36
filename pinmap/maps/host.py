"""
Mapping SDK boundary.

The map host owns the map view, the geocoder, the frame scheduler and the
WebGL overlay extension point. The viewer only talks to it through these
interfaces, so the browser SDK and the headless host are interchangeable.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol

from pinmap.gl import GLContext
from pinmap.maps.geocoding import GeocodeResponse
from pinmap.types import LatLng, MapOptions


class CoordinateTransformer(Protocol):
    """Per-frame camera transform supplied to ``on_draw``."""

    def from_lat_lng_altitude(self, lat: float, lng: float, altitude: float = 0.0) -> list[float]:
        """Column-major 4x4 model-view-projection matrix for a point."""
        ...


class OverlayHooks(ABC):
    """
    Lifecycle hooks of a WebGL overlay, invoked by the host.

    Host guarantees: ``on_add`` once when the overlay is put on a map;
    ``on_context_restored`` once the GL context is available; ``on_draw``
    zero or more times after that; ``on_remove`` at most once.
    """

    @abstractmethod
    def on_add(self) -> None:
        """Overlay was added to a map; build non-GL state."""

    @abstractmethod
    def on_context_restored(self, gl: GLContext) -> None:
        """The host GL context is ready."""

    @abstractmethod
    def on_draw(self, gl: GLContext, transformer: CoordinateTransformer) -> None:
        """Render one frame inside the host's render pass."""

    @abstractmethod
    def on_remove(self) -> None:
        """Overlay was removed from its map; release everything."""


class OverlayView(Protocol):
    def set_map(self, map_view: Optional["MapView"]) -> None:
        ...

    def request_redraw(self) -> None:
        ...


class MapView(Protocol):
    options: MapOptions

    @property
    def center(self) -> LatLng:
        ...

    @property
    def zoom(self) -> float:
        ...

    def set_center(self, center: LatLng) -> None:
        ...

    def set_zoom(self, zoom: float) -> None:
        ...


class Geocoder(Protocol):
    async def geocode(self, address: str) -> GeocodeResponse:
        ...


class MapsLibrary(Protocol):
    """A loaded mapping SDK."""

    def create_map(self, options: MapOptions) -> MapView:
        ...

    def create_geocoder(self) -> Geocoder:
        ...

    def create_overlay_view(self, hooks: OverlayHooks) -> OverlayView:
        ...

    def request_animation_frame(self, callback: Callable[[], None]) -> Any:
        ...

    def cancel_animation_frame(self, handle: Any) -> None:
        ...
