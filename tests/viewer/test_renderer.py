# SPDX-License-Identifier: MIT
"""Tests for the headless renderer."""

import pytest

from pinmap.gl import Canvas, HeadlessGLContext
from pinmap.maps.transformer import MercatorTransformer
from pinmap.scene.graph import AmbientLight, DirectionalLight, Group, PerspectiveCamera, Scene
from pinmap.scene.renderer import RendererDisposedError, WebGLRenderer
from pinmap.types import LatLng
from tests.conftest import make_model


@pytest.fixture
def gl():
    return HeadlessGLContext(Canvas(640, 480))


@pytest.fixture
def camera():
    center = LatLng(45.559, -122.651)
    camera = PerspectiveCamera()
    transformer = MercatorTransformer(center, zoom=20, tilt=45, heading=0, width=640, height=480)
    camera.set_projection_from_array(transformer.from_lat_lng_altitude(center.lat, center.lng, 15))
    return camera


@pytest.fixture
def scene():
    scene = Scene()
    scene.add(AmbientLight(), DirectionalLight())
    return scene


class TestWebGLRenderer:
    def test_lights_only(self, gl, scene, camera):
        renderer = WebGLRenderer(gl.canvas, gl)
        info = renderer.render(scene, camera)
        assert info.lights == 2
        assert info.calls == 0
        assert info.triangles == 0

    def test_mesh_in_view(self, gl, scene, camera):
        model = make_model()
        model.scale.set(20, 20, 20)
        scene.add(model)

        info = WebGLRenderer(gl.canvas, gl).render(scene, camera)
        assert info.calls == 1
        assert info.triangles == 4
        assert info.vertices_in_view > 0

    def test_hidden_mesh_skipped(self, gl, scene, camera):
        model = make_model()
        model.visible = False
        scene.add(model)
        assert WebGLRenderer(gl.canvas, gl).render(scene, camera).calls == 0

    def test_hidden_group_hides_nested_meshes(self, gl, scene, camera):
        outer = Group(name="outer")
        outer.add(make_model())
        outer.visible = False
        scene.add(outer, make_model())

        info = WebGLRenderer(gl.canvas, gl).render(scene, camera)
        assert info.calls == 1
        assert info.triangles == 4

    def test_render_mutates_then_reset_restores(self, gl, scene, camera):
        scene.add(make_model())
        renderer = WebGLRenderer(gl.canvas, gl)
        renderer.render(scene, camera)
        assert not gl.is_default_state()
        renderer.reset_state()
        assert gl.is_default_state()

    def test_auto_clear(self, gl, scene, camera):
        renderer = WebGLRenderer(gl.canvas, gl)
        renderer.render(scene, camera)
        renderer.auto_clear = False
        renderer.render(scene, camera)
        assert gl.clear_count == 1

    def test_frame_counter(self, gl, scene, camera):
        renderer = WebGLRenderer(gl.canvas, gl)
        renderer.render(scene, camera)
        assert renderer.render(scene, camera).frame == 2

    def test_disposed_renderer_refuses_to_draw(self, gl, scene, camera):
        renderer = WebGLRenderer(gl.canvas, gl)
        renderer.dispose()
        assert renderer.disposed
        with pytest.raises(RendererDisposedError):
            renderer.render(scene, camera)

    def test_context_attributes_kept(self, gl):
        attributes = {**gl.get_context_attributes(), "alpha": True, "antialias": True}
        renderer = WebGLRenderer(canvas=gl.canvas, context=gl, **attributes)
        assert renderer.alpha is True
        assert renderer.context_attributes["depth"] is True
