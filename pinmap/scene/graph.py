"""
Scene graph primitives.

A small three.js-style object model: nodes carry a position, an XYZ Euler
rotation and a scale; meshes carry GPU-side resources (geometry, materials)
that must be released explicitly with ``dispose()``.
"""

import math
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

import numpy as np


@dataclass
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def set(self, x: float, y: float, z: float) -> "Vector3":
        self.x, self.y, self.z = x, y, z
        return self

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass
class Euler:
    """Rotation in radians, applied in XYZ order."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_matrix(self) -> np.ndarray:
        cx, sx = math.cos(self.x), math.sin(self.x)
        cy, sy = math.cos(self.y), math.sin(self.y)
        cz, sz = math.cos(self.z), math.sin(self.z)
        rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
        ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
        rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
        return rx @ ry @ rz


class Object3D:
    """Base node of the scene graph."""

    type = "Object3D"

    def __init__(self, name: str = ""):
        self.name = name
        self.position = Vector3()
        self.rotation = Euler()
        self.scale = Vector3(1.0, 1.0, 1.0)
        self.visible = True
        self.parent: Optional["Object3D"] = None
        self.children: list["Object3D"] = []

    def add(self, *objects: "Object3D") -> "Object3D":
        for obj in objects:
            if obj is self:
                raise ValueError("An object can't be added as a child of itself")
            if obj.parent is not None:
                obj.parent.remove(obj)
            obj.parent = self
            self.children.append(obj)
        return self

    def remove(self, *objects: "Object3D") -> "Object3D":
        for obj in objects:
            if obj in self.children:
                self.children.remove(obj)
                obj.parent = None
        return self

    def traverse(self, callback: Callable[["Object3D"], None]) -> None:
        """Call ``callback`` on this node and every descendant, depth first."""
        for obj in self.iter_nodes():
            callback(obj)

    def iter_nodes(self) -> Iterator["Object3D"]:
        yield self
        for child in list(self.children):
            yield from child.iter_nodes()

    def iter_visible_nodes(self) -> Iterator["Object3D"]:
        """Like ``iter_nodes`` but skips the whole subtree of a hidden node."""
        if not self.visible:
            return
        yield self
        for child in list(self.children):
            yield from child.iter_visible_nodes()

    def local_matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.rotation.to_matrix() @ np.diag(self.scale.to_array())
        m[:3, 3] = self.position.to_array()
        return m

    def world_matrix(self) -> np.ndarray:
        m = self.local_matrix()
        node = self.parent
        while node is not None:
            m = node.local_matrix() @ m
            node = node.parent
        return m

    def __repr__(self):
        return f"<{self.type} name={self.name!r} children={len(self.children)}>"


class Group(Object3D):
    type = "Group"


class Scene(Object3D):
    type = "Scene"


class BufferGeometry:
    """Vertex and triangle index buffers."""

    def __init__(self, vertices: np.ndarray, faces: np.ndarray):
        self.vertices = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        self.faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
        self.disposed = False

    @property
    def triangle_count(self) -> int:
        return 0 if self.disposed else len(self.faces)

    def dispose(self) -> None:
        self.vertices = np.empty((0, 3), dtype=np.float32)
        self.faces = np.empty((0, 3), dtype=np.int64)
        self.disposed = True


class MeshStandardMaterial:
    def __init__(self, name: str = "", color: int = 0xFFFFFF):
        self.name = name
        self.color = color
        self.disposed = False

    def dispose(self) -> None:
        self.disposed = True


MaterialSlot = Union[MeshStandardMaterial, list[MeshStandardMaterial]]


class Mesh(Object3D):
    type = "Mesh"

    def __init__(self, geometry: BufferGeometry, material: MaterialSlot, name: str = ""):
        super().__init__(name)
        self.geometry = geometry
        self.material = material
        self.cast_shadow = False
        self.receive_shadow = False

    @property
    def materials(self) -> list[MeshStandardMaterial]:
        """The material slot as a list, whether it holds one material or many."""
        if isinstance(self.material, (list, tuple)):
            return list(self.material)
        return [self.material]


class Light(Object3D):
    type = "Light"

    def __init__(self, color: int = 0xFFFFFF, intensity: float = 1.0):
        super().__init__()
        self.color = color
        self.intensity = intensity


class AmbientLight(Light):
    type = "AmbientLight"


class DirectionalLight(Light):
    type = "DirectionalLight"

    def __init__(self, color: int = 0xFFFFFF, intensity: float = 1.0):
        super().__init__(color, intensity)
        # Lights the origin from above by default
        self.position.set(0.0, 1.0, 0.0)
        self.cast_shadow = False


class PerspectiveCamera(Object3D):
    """Camera whose projection matrix is supplied from outside each frame."""

    type = "PerspectiveCamera"

    def __init__(self, fov: float = 50.0, aspect: float = 1.0, near: float = 0.1, far: float = 2000.0):
        super().__init__()
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.projection_matrix = np.eye(4)

    def set_projection_from_array(self, values) -> None:
        """Load a column-major 16 element array as the projection matrix."""
        arr = np.asarray(values, dtype=float)
        if arr.size != 16:
            raise ValueError(f"Expected 16 matrix elements, got {arr.size}")
        self.projection_matrix = arr.reshape((4, 4), order="F")


def dispose_object(obj: Object3D) -> None:
    """Release the geometry and every material held by a node."""
    geometry = getattr(obj, "geometry", None)
    if geometry is not None:
        geometry.dispose()

    material = getattr(obj, "material", None)
    if material is not None:
        if isinstance(material, (list, tuple)):
            for m in material:
                m.dispose()
        else:
            material.dispose()


def dispose_tree(root: Object3D) -> None:
    """Release resources of every node reachable from ``root``."""
    root.traverse(dispose_object)
