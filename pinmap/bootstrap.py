"""
Map bootstrapper and application startup.

Startup is linear: fetch credentials, load the mapping library, build the
map, geocode the target address, then attach the marker overlay. Every fatal
failure ends in a blocking alert; the session is left in a terminal state.
"""

from typing import Callable, Optional

import httpx
from loguru import logger

from pinmap.config import Settings
from pinmap.fetcher import fetch_map_config
from pinmap.maps.loader import MapsLibraryLoader
from pinmap.overlay import MarkerOverlay
from pinmap.scene.loader import GLTFLoader
from pinmap.session import SessionState
from pinmap.types import BootstrapState, GestureHandling, LatLng, MapOptions, TargetCoordinate

GENERIC_FAILURE_ALERT = "Failed to load map. Please check the console for details."

Alert = Callable[[str], None]

# Allowed transitions of the bootstrap state machine
TRANSITIONS = {
    BootstrapState.UNINITIALIZED: {BootstrapState.LIBRARY_LOADING},
    BootstrapState.LIBRARY_LOADING: {BootstrapState.MAP_READY, BootstrapState.LIBRARY_FAILED},
    BootstrapState.MAP_READY: {BootstrapState.GEOCODING},
    BootstrapState.GEOCODING: {BootstrapState.POSITIONED, BootstrapState.GEOCODE_FAILED},
    BootstrapState.POSITIONED: set(),
    BootstrapState.GEOCODE_FAILED: set(),
    BootstrapState.LIBRARY_FAILED: set(),
}


class BootstrapError(Exception):
    """Raised on an operation that the bootstrap state does not allow."""


class MapBootstrapper:
    def __init__(
        self,
        session: SessionState,
        settings: Settings,
        library_loader: MapsLibraryLoader,
        alert: Alert,
        model_loader: Optional[GLTFLoader] = None,
    ):
        self.session = session
        self.settings = settings
        self.library_loader = library_loader
        self.alert = alert
        self.model_loader = model_loader or GLTFLoader()

    @property
    def state(self) -> BootstrapState:
        return self.session.state

    def _transition(self, new_state: BootstrapState) -> None:
        current = self.session.state
        if new_state not in TRANSITIONS[current]:
            raise BootstrapError(f"Illegal transition {current.value} -> {new_state.value}")
        logger.debug(f"Bootstrap state: {current.value} -> {new_state.value}")
        self.session.state = new_state

    def notify(self, message: str) -> None:
        self.session.alerts.append(message)
        self.alert(message)

    async def load_mapping_library(self, api_key: str) -> None:
        """Load the mapping SDK; raises ``LibraryLoadError`` on failure."""
        self._transition(BootstrapState.LIBRARY_LOADING)
        try:
            self.session.library = await self.library_loader.load(api_key)
        except Exception:
            self._transition(BootstrapState.LIBRARY_FAILED)
            raise

    def initialize_map(self, map_id: str):
        """Build the map view around the default region."""
        if self.session.library is None:
            raise BootstrapError("Mapping library is not loaded")

        viewer = self.settings.viewer
        options = MapOptions(
            center=LatLng(viewer.initial_lat, viewer.initial_lng),
            zoom=viewer.zoom,
            map_id=map_id,
            tilt=viewer.tilt,
            heading=viewer.heading,
            gesture_handling=GestureHandling(viewer.gesture_handling),
            disable_default_ui=viewer.disable_default_ui,
        )
        self.session.map = self.session.library.create_map(options)
        self._transition(BootstrapState.MAP_READY)
        logger.info(f"Map initialized (mapId={map_id})")
        return self.session.map

    async def geocode(self, address: str) -> Optional[TargetCoordinate]:
        """
        Resolve ``address`` and position the map on it.

        On success the overlay is started. On failure an alert naming the
        address is raised and the session stays in ``GEOCODE_FAILED``.
        """
        self._transition(BootstrapState.GEOCODING)
        geocoder = self.session.library.create_geocoder()
        response = await geocoder.geocode(address)

        if not response.ok:
            logger.error(f"Geocode was not successful for the following reason: {response.status}")
            self._transition(BootstrapState.GEOCODE_FAILED)
            self.notify(f"Could not find coordinates for: {address}")
            return None

        target = response.results[0].location
        logger.info(f"Geocoded address: {address} -> {target.latitude}, {target.longitude}")
        self.session.target = target
        self.session.map.set_center(target)
        self.session.map.set_zoom(self.settings.viewer.zoom)
        self._transition(BootstrapState.POSITIONED)

        self.start_overlay()
        return target

    def start_overlay(self) -> MarkerOverlay:
        if self.session.state is not BootstrapState.POSITIONED or self.session.target is None:
            raise BootstrapError("Overlay can only start once the target is positioned")
        if self.session.overlay is not None:
            return self.session.overlay

        overlay = MarkerOverlay(self.session, self.settings.marker, self.model_loader)
        self.session.overlay = overlay
        self.session.overlay_view = self.session.library.create_overlay_view(overlay)
        self.session.overlay_view.set_map(self.session.map)
        return overlay

    def teardown(self) -> None:
        """Detach the overlay and drop all session references."""
        if self.session.overlay_view is not None:
            self.session.overlay_view.set_map(None)
        self.session.reset()


async def initialize_app(
    settings: Settings,
    library_loader: MapsLibraryLoader,
    alert: Alert,
    client: httpx.AsyncClient,
    model_loader: Optional[GLTFLoader] = None,
) -> tuple[SessionState, MapBootstrapper]:
    """Run the whole startup sequence for one session."""
    session = SessionState()
    bootstrapper = MapBootstrapper(session, settings, library_loader, alert, model_loader)

    try:
        config = await fetch_map_config(client, settings.viewer.config_url)
        if config is None:
            raise RuntimeError("Could not load map configuration")
        session.config = config

        await bootstrapper.load_mapping_library(config.api_key)
        bootstrapper.initialize_map(config.map_id)
    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        bootstrapper.notify(GENERIC_FAILURE_ALERT)
        return session, bootstrapper

    await bootstrapper.geocode(settings.viewer.target_address)
    return session, bootstrapper
