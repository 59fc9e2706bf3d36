"""
Headless map host.

An asyncio implementation of the mapping SDK surface the viewer relies on:
a map view with a camera, frame scheduling, and a WebGL overlay view that
drives the overlay hooks in the same order a browser map does.
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger

from pinmap.gl import GL_DEFAULT_STATE, Canvas, HeadlessGLContext
from pinmap.maps.host import Geocoder, OverlayHooks
from pinmap.maps.transformer import MercatorTransformer
from pinmap.types import LatLng, MapOptions


class HeadlessMapView:
    def __init__(self, options: MapOptions, width: int, height: int):
        self.options = options
        self.width = width
        self.height = height
        self._center = options.center
        self._zoom = options.zoom

    @property
    def map_id(self) -> str:
        return self.options.map_id

    @property
    def center(self) -> LatLng:
        return self._center

    @property
    def zoom(self) -> float:
        return self._zoom

    def set_center(self, center: LatLng) -> None:
        self._center = center

    def set_zoom(self, zoom: float) -> None:
        self._zoom = zoom

    def transformer(self) -> MercatorTransformer:
        """Camera transform for the current frame."""
        return MercatorTransformer(
            center=self._center,
            zoom=self._zoom,
            tilt=self.options.tilt,
            heading=self.options.heading,
            width=self.width,
            height=self.height,
        )


class OverlayState(str, Enum):
    DETACHED = "detached"
    ADDED = "added"
    READY = "ready"
    REMOVED = "removed"


class HeadlessOverlayView:
    """
    WebGL overlay extension point.

    ``set_map(map)`` calls ``on_add`` immediately and ``on_context_restored``
    on the next loop iteration. Redraw requests are coalesced into a single
    ``on_draw`` per loop iteration. ``set_map(None)`` calls ``on_remove``
    once; no hook runs after that.
    """

    def __init__(self, hooks: OverlayHooks):
        self.hooks = hooks
        self.state = OverlayState.DETACHED
        self.map: Optional[HeadlessMapView] = None
        self.gl: Optional[HeadlessGLContext] = None
        self.frames_drawn = 0
        self.leaked_state_frames = 0
        self._redraw_handle: Optional[asyncio.Handle] = None

    def set_map(self, map_view: Optional[HeadlessMapView]) -> None:
        if map_view is None:
            self._detach()
            return

        if self.state is not OverlayState.DETACHED:
            raise RuntimeError(f"Overlay can't be added in state {self.state.value}")

        self.map = map_view
        self.gl = HeadlessGLContext(Canvas(map_view.width, map_view.height))
        self.state = OverlayState.ADDED
        self.hooks.on_add()
        asyncio.get_running_loop().call_soon(self._restore_context)

    def _restore_context(self) -> None:
        if self.state is not OverlayState.ADDED:
            return
        self.hooks.on_context_restored(self.gl)
        self.state = OverlayState.READY
        self.request_redraw()

    def request_redraw(self) -> None:
        if self.state is not OverlayState.READY or self._redraw_handle is not None:
            return
        self._redraw_handle = asyncio.get_running_loop().call_soon(self._draw)

    def _draw(self) -> None:
        self._redraw_handle = None
        if self.state is not OverlayState.READY:
            return

        self.hooks.on_draw(self.gl, self.map.transformer())
        self.frames_drawn += 1

        if not self.gl.is_default_state():
            self.leaked_state_frames += 1
            logger.warning("Overlay left GL state modified after draw; resetting")
            self.gl.state.clear()
            self.gl.state.update(GL_DEFAULT_STATE)

    def _detach(self) -> None:
        if self.state in (OverlayState.DETACHED, OverlayState.REMOVED):
            return
        if self._redraw_handle is not None:
            self._redraw_handle.cancel()
            self._redraw_handle = None
        self.state = OverlayState.REMOVED
        self.hooks.on_remove()
        self.map = None


class HeadlessMapsLibrary:
    """Loaded headless mapping SDK."""

    def __init__(
        self,
        geocoder: Geocoder,
        width: int = 1280,
        height: int = 720,
        frame_interval: float = 1 / 60,
    ):
        self.geocoder = geocoder
        self.width = width
        self.height = height
        self.frame_interval = frame_interval
        self.maps: list[HeadlessMapView] = []

    def create_map(self, options: MapOptions) -> HeadlessMapView:
        view = HeadlessMapView(options, self.width, self.height)
        self.maps.append(view)
        logger.debug(f"Map created: mapId={options.map_id} center={options.center} zoom={options.zoom}")
        return view

    def create_geocoder(self) -> Geocoder:
        return self.geocoder

    def create_overlay_view(self, hooks: OverlayHooks) -> HeadlessOverlayView:
        return HeadlessOverlayView(hooks)

    def request_animation_frame(self, callback: Callable[[], None]) -> Any:
        return asyncio.get_running_loop().call_later(self.frame_interval, callback)

    def cancel_animation_frame(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()
