# SPDX-License-Identifier: MIT
"""Tests for map bootstrapping and application startup."""

import httpx
import pytest

from pinmap.bootstrap import GENERIC_FAILURE_ALERT, BootstrapError, MapBootstrapper, initialize_app
from pinmap.maps.geocoding import GoogleGeocoder
from pinmap.maps.headless import HeadlessMapsLibrary, OverlayState
from pinmap.maps.loader import MapsLibraryLoader
from pinmap.session import SessionState
from pinmap.types import BootstrapState, GestureHandling, LatLng
from tests.conftest import FakeGeocoder, pump

pytestmark = pytest.mark.anyio

ADDRESS = "4975 NE 14th Pl, Portland, OR 97211"
GEOCODED = {"lat": 45.5591, "lng": -122.6513}


def backend(config=None, config_status=200, maps_status=200, geocode_status="OK", geocode_body=None,
            requests=None):
    """Mock transport answering the config endpoint, the SDK script and the geocoder."""
    config = config if config is not None else {"mapId": "abc", "apiKey": "key1"}

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if request.url.path == "/api/map-config.js":
            return httpx.Response(config_status, json=config)
        if request.url.path == "/maps/api/js":
            return httpx.Response(maps_status, text="/* sdk */")
        if request.url.path == "/maps/api/geocode/json":
            if geocode_body is not None:
                return httpx.Response(200, json=geocode_body)
            results = [{"geometry": {"location": GEOCODED}}] if geocode_status == "OK" else []
            return httpx.Response(200, json={"status": geocode_status, "results": results})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


async def start(settings, transport, fake_model_loader):
    alerts = []
    client = httpx.AsyncClient(transport=transport)

    def factory(api_key):
        return HeadlessMapsLibrary(GoogleGeocoder(api_key, client), width=640, height=480, frame_interval=0.001)

    loader = MapsLibraryLoader(factory, client)
    session, bootstrapper = await initialize_app(settings, loader, alerts.append, client, fake_model_loader)
    return session, bootstrapper, loader, alerts, client


class TestStartupScenario:
    async def test_config_to_positioned_overlay(self, settings, fake_model_loader):
        requests = []
        session, bootstrapper, _, alerts, client = await start(
            settings, backend(requests=requests), fake_model_loader
        )

        sdk_request = next(r for r in requests if r.url.path == "/maps/api/js")
        assert sdk_request.url.params["key"] == "key1"

        options = session.library.maps[0].options
        assert options.map_id == "abc"
        assert options.center == LatLng(45.558, -122.651)
        assert options.zoom == 20
        assert options.tilt == 45
        assert options.heading == 0
        assert options.gesture_handling is GestureHandling.GREEDY
        assert options.disable_default_ui is False

        expected = LatLng(GEOCODED["lat"], GEOCODED["lng"])
        assert session.state is BootstrapState.POSITIONED
        assert session.target == expected
        assert session.map.center == expected
        assert session.map.zoom == 20
        assert session.overlay_view.state is OverlayState.ADDED
        assert alerts == []

        await pump()
        assert session.overlay_view.frames_drawn > 0
        bootstrapper.teardown()
        await client.aclose()

    @pytest.mark.parametrize("map_id", ["abc", "8e0a97af9386fef", "map id with spaces"])
    async def test_map_uses_fetched_map_id(self, settings, fake_model_loader, map_id):
        session, bootstrapper, _, _, client = await start(
            settings, backend(config={"mapId": map_id, "apiKey": "k"}), fake_model_loader
        )
        assert session.map.options.map_id == map_id
        bootstrapper.teardown()
        await client.aclose()

    async def test_zero_results_never_attaches_overlay(self, settings, fake_model_loader):
        session, _, _, alerts, client = await start(
            settings, backend(geocode_status="ZERO_RESULTS"), fake_model_loader
        )

        assert session.state is BootstrapState.GEOCODE_FAILED
        assert len(alerts) == 1
        assert ADDRESS in alerts[0]
        assert session.overlay is None
        assert session.overlay_view is None
        assert session.target is None
        assert fake_model_loader.calls == []
        await client.aclose()

    @pytest.mark.parametrize("body", [["not", "an", "object"], {"status": "OK", "results": 5}])
    async def test_malformed_geocode_body_fails_with_alert(self, settings, fake_model_loader, body):
        session, _, _, alerts, client = await start(
            settings, backend(geocode_body=body), fake_model_loader
        )

        assert session.state is BootstrapState.GEOCODE_FAILED
        assert alerts == [f"Could not find coordinates for: {ADDRESS}"]
        assert session.overlay_view is None
        assert fake_model_loader.calls == []
        await client.aclose()

    async def test_config_failure_aborts(self, settings, fake_model_loader):
        session, _, loader, alerts, client = await start(
            settings, backend(config_status=500), fake_model_loader
        )

        assert alerts == [GENERIC_FAILURE_ALERT]
        assert loader.started is False
        assert session.state is BootstrapState.UNINITIALIZED
        assert session.map is None
        await client.aclose()

    async def test_library_failure_aborts(self, settings, fake_model_loader):
        session, _, _, alerts, client = await start(
            settings, backend(maps_status=404), fake_model_loader
        )

        assert alerts == [GENERIC_FAILURE_ALERT]
        assert session.state is BootstrapState.LIBRARY_FAILED
        assert session.map is None
        await client.aclose()


class TestMapBootstrapper:
    def make(self, settings, fake_model_loader, geocoder=None):
        library = HeadlessMapsLibrary(geocoder or FakeGeocoder(), frame_interval=0.001)
        session = SessionState()
        alerts = []
        bootstrapper = MapBootstrapper(session, settings, library_loader=None, alert=alerts.append,
                                       model_loader=fake_model_loader)
        return bootstrapper, session, library, alerts

    def test_map_requires_library(self, settings, fake_model_loader):
        bootstrapper, _, _, _ = self.make(settings, fake_model_loader)
        with pytest.raises(BootstrapError):
            bootstrapper.initialize_map("abc")

    async def test_geocode_requires_map(self, settings, fake_model_loader):
        bootstrapper, session, library, _ = self.make(settings, fake_model_loader)
        session.library = library
        with pytest.raises(BootstrapError):
            await bootstrapper.geocode(ADDRESS)

    def test_overlay_requires_positioned(self, settings, fake_model_loader):
        bootstrapper, _, _, _ = self.make(settings, fake_model_loader)
        with pytest.raises(BootstrapError):
            bootstrapper.start_overlay()

    async def test_geocode_is_terminal(self, settings, fake_model_loader):
        bootstrapper, session, library, _ = self.make(settings, fake_model_loader)
        session.library = library
        session.state = BootstrapState.LIBRARY_LOADING
        bootstrapper.initialize_map("abc")

        await bootstrapper.geocode(ADDRESS)
        assert session.state is BootstrapState.POSITIONED
        with pytest.raises(BootstrapError):
            await bootstrapper.geocode(ADDRESS)
        bootstrapper.teardown()

    async def test_target_equals_geocoder_result(self, settings, fake_model_loader):
        geocoder = FakeGeocoder()
        bootstrapper, session, library, _ = self.make(settings, fake_model_loader, geocoder)
        session.library = library
        session.state = BootstrapState.LIBRARY_LOADING
        bootstrapper.initialize_map("abc")

        target = await bootstrapper.geocode(ADDRESS)
        expected = geocoder.response.results[0].location
        assert target is expected
        assert session.target is expected
        assert session.map.center is expected
        assert geocoder.addresses == [ADDRESS]
        bootstrapper.teardown()

    async def test_teardown_detaches_and_resets(self, settings, fake_model_loader):
        bootstrapper, session, library, _ = self.make(settings, fake_model_loader)
        session.library = library
        session.state = BootstrapState.LIBRARY_LOADING
        bootstrapper.initialize_map("abc")
        await bootstrapper.geocode(ADDRESS)
        await pump()

        view = session.overlay_view
        token = session.animation
        bootstrapper.teardown()

        assert view.state is OverlayState.REMOVED
        assert token.cancelled
        assert session.state is BootstrapState.UNINITIALIZED
        assert session.overlay_view is None
        assert session.target is None
