"""3D scene graph, GLB loading and rendering."""

from pinmap.scene.graph import (
    AmbientLight,
    BufferGeometry,
    DirectionalLight,
    Euler,
    Group,
    Mesh,
    MeshStandardMaterial,
    Object3D,
    PerspectiveCamera,
    Scene,
    Vector3,
    dispose_tree,
)
from pinmap.scene.loader import GLTFLoader, LoadProgress, parse_glb
from pinmap.scene.renderer import RenderInfo, ShadowMapType, WebGLRenderer

__all__ = [
    "AmbientLight",
    "BufferGeometry",
    "DirectionalLight",
    "Euler",
    "Group",
    "Mesh",
    "MeshStandardMaterial",
    "Object3D",
    "PerspectiveCamera",
    "Scene",
    "Vector3",
    "dispose_tree",
    "GLTFLoader",
    "LoadProgress",
    "parse_glb",
    "RenderInfo",
    "ShadowMapType",
    "WebGLRenderer",
]
