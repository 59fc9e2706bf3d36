# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for pinmap tests."""

import asyncio
import os
from typing import Generator

import numpy as np
import pytest

# Set test environment variables before importing the app
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DISABLE_LOGGING", "1")
os.environ.setdefault("API_ASSETS_DIR", os.path.join(os.path.dirname(__file__), ".assets"))

TARGET = (45.5590, -122.6510)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio for async tests."""
    return "asyncio"


@pytest.fixture
def test_client() -> Generator:
    """Create a test client for the FastAPI application."""
    from fastapi.testclient import TestClient
    from api.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def log_messages() -> Generator:
    """Capture loguru messages at WARNING and above."""
    from loguru import logger

    messages = []
    handler_id = logger.add(lambda message: messages.append(str(message)), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def settings():
    """Default settings pointed at a test host."""
    from pinmap.config import MarkerSettings, Settings, ViewerSettings

    return Settings(
        viewer=ViewerSettings(config_url="http://test/api/map-config.js", frame_interval=0.001),
        marker=MarkerSettings(url="marker.glb"),
    )


@pytest.fixture
def glb_bytes() -> bytes:
    """A unit cube exported as GLB."""
    import trimesh

    box = trimesh.creation.box(extents=(1.0, 1.0, 1.0))
    return trimesh.Scene(box).export(file_type="glb")


@pytest.fixture
def glb_path(tmp_path, glb_bytes):
    path = tmp_path / "marker.glb"
    path.write_bytes(glb_bytes)
    return path


def make_model(materials: int = 1):
    """A one-mesh model; ``materials > 1`` puts a material list on the mesh."""
    from pinmap.scene.graph import BufferGeometry, Group, Mesh, MeshStandardMaterial

    vertices = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float)
    faces = np.array([[0, 1, 2], [0, 1, 3], [0, 2, 3], [1, 2, 3]])
    if materials > 1:
        material = [MeshStandardMaterial(name=f"m{i}") for i in range(materials)]
    else:
        material = MeshStandardMaterial(name="m0")
    model = Group(name="marker")
    model.add(Mesh(BufferGeometry(vertices, faces), material, name="pin"))
    return model


class FakeGeocoder:
    def __init__(self, response=None):
        from pinmap.maps.geocoding import GeocodeResponse, GeocodeResult
        from pinmap.types import LatLng

        self.response = response or GeocodeResponse(
            status="OK",
            results=[GeocodeResult(location=LatLng(*TARGET))],
        )
        self.addresses = []

    async def geocode(self, address):
        self.addresses.append(address)
        return self.response


class FakeModelLoader:
    """Model loader whose completion is driven by the test."""

    def __init__(self):
        self.calls = []
        self.future = None

    def load(self, url, on_load, on_progress=None, on_error=None):
        self.calls.append(url)
        self.on_load = on_load
        self.on_error = on_error
        self.future = asyncio.get_running_loop().create_future()
        return self.future

    def complete(self, model):
        self.future.set_result(None)
        self.on_load(model)

    def fail(self, error):
        self.future.set_result(None)
        self.on_error(error)


@pytest.fixture
def fake_model_loader():
    return FakeModelLoader()


@pytest.fixture
def make_session():
    """Build a positioned session on a headless host."""
    from pinmap.maps.headless import HeadlessMapsLibrary
    from pinmap.session import SessionState
    from pinmap.types import BootstrapState, LatLng, MapOptions

    def _make(target=TARGET):
        library = HeadlessMapsLibrary(FakeGeocoder(), width=640, height=480, frame_interval=0.001)
        coordinate = LatLng(*target) if target else None
        session = SessionState(
            state=BootstrapState.POSITIONED,
            library=library,
            target=coordinate,
        )
        session.map = library.create_map(MapOptions(
            center=coordinate or LatLng(45.558, -122.651),
            zoom=20,
            map_id="abc",
            tilt=45,
        ))
        return session

    return _make


@pytest.fixture
def attach_overlay(settings):
    """Attach a marker overlay to a session's map through its host view."""
    from pinmap.overlay import MarkerOverlay

    def _attach(session, loader):
        overlay = MarkerOverlay(session, settings.marker, loader)
        session.overlay = overlay
        session.overlay_view = session.library.create_overlay_view(overlay)
        session.overlay_view.set_map(session.map)
        return overlay

    return _attach


async def pump(seconds: float = 0.03) -> None:
    """Let the event loop run host callbacks for a while."""
    await asyncio.sleep(seconds)
