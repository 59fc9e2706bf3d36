"""
Headless WebGL-style renderer.

Draws into a context owned by someone else (the map host). Rendering
projects every visible mesh through the camera with numpy and records what
a GPU renderer would have submitted. Like a real GL renderer it leaves its
own program, buffers and capabilities bound on the shared context until
``reset_state()`` is called.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from loguru import logger

from pinmap.gl import GL_DEFAULT_STATE, GLContext
from pinmap.scene.graph import Light, Mesh, Object3D, PerspectiveCamera, Scene


class ShadowMapType(str, Enum):
    BASIC = "basic"
    PCF = "pcf"
    PCF_SOFT = "pcf_soft"
    VSM = "vsm"


@dataclass
class ShadowMap:
    enabled: bool = False
    type: ShadowMapType = ShadowMapType.PCF


@dataclass
class RenderInfo:
    """Statistics of the most recent ``render()`` call."""

    frame: int = 0
    calls: int = 0
    triangles: int = 0
    vertices_in_view: int = 0
    lights: int = 0
    shadow_casters: int = 0


class RendererDisposedError(RuntimeError):
    """Raised when a disposed renderer is asked to draw."""


class WebGLRenderer:
    def __init__(
        self,
        canvas,
        context: GLContext,
        alpha: bool = False,
        antialias: bool = False,
        **context_attributes: Any,
    ):
        self.canvas = canvas
        self.context = context
        self.alpha = alpha
        self.antialias = antialias
        self.context_attributes = context_attributes
        self.auto_clear = True
        self.shadow_map = ShadowMap()
        self.info = RenderInfo()
        self._frame = 0
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def render(self, scene: Scene, camera: PerspectiveCamera) -> RenderInfo:
        """Draw ``scene`` as seen by ``camera`` into the shared context."""
        if self._disposed:
            raise RendererDisposedError("render() called on a disposed renderer")

        if self.auto_clear:
            self.context.clear()

        self._frame += 1
        info = RenderInfo(frame=self._frame)
        view_projection = camera.projection_matrix

        # Bind our own state on the shared context
        state = self.context.state
        state["viewport"] = (0, 0, self.canvas.width, self.canvas.height)
        state["depth_test"] = True
        state["depth_mask"] = True
        state["cull_face"] = True
        state["blend"] = self.alpha

        for obj in scene.iter_visible_nodes():
            if isinstance(obj, Light):
                info.lights += 1
                continue
            if isinstance(obj, Mesh):
                self._draw_mesh(obj, view_projection, info)

        self.info = info
        return info

    def _draw_mesh(self, mesh: Mesh, view_projection: np.ndarray, info: RenderInfo) -> None:
        geometry = mesh.geometry
        if geometry is None or geometry.disposed or len(geometry.vertices) == 0:
            return

        state = self.context.state
        state["program"] = f"standard:{id(mesh.materials[0])}"
        state["array_buffer"] = id(geometry)

        mvp = view_projection @ mesh.world_matrix()
        homogeneous = np.hstack([geometry.vertices, np.ones((len(geometry.vertices), 1))])
        clip = homogeneous @ mvp.T
        w = clip[:, 3:4]
        inside = (w[:, 0] > 0) & np.all(np.abs(clip[:, :3]) <= w, axis=1)

        info.calls += 1
        info.triangles += geometry.triangle_count
        info.vertices_in_view += int(inside.sum())
        if self.shadow_map.enabled and mesh.cast_shadow:
            info.shadow_casters += 1

    def reset_state(self) -> None:
        """Restore the shared context's global state to GL defaults."""
        self.context.state.clear()
        self.context.state.update(GL_DEFAULT_STATE)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.info = RenderInfo()
        logger.debug("Renderer disposed")


def count_meshes(root: Object3D) -> int:
    return sum(1 for obj in root.iter_nodes() if isinstance(obj, Mesh))
