"""
glTF binary (GLB) model loader.

Reads a model from a local path or an http(s) URL and converts it into a
scene graph fragment. Fetching and parsing run in worker threads; the
success, progress and error callbacks are always invoked on the event loop.
"""

import asyncio
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np
import trimesh
from loguru import logger

from pinmap.scene.graph import BufferGeometry, Group, Mesh, MeshStandardMaterial
from pinmap.utils.http import DEFAULT_CHUNK_SIZE, RateLimitError, download_with_retry


@dataclass
class LoadProgress:
    loaded: int
    total: int

    @property
    def percent(self) -> float:
        if not self.total:
            return 0.0
        return self.loaded / self.total * 100


OnLoad = Callable[[Group], None]
OnProgress = Callable[[LoadProgress], None]
OnError = Callable[[BaseException], None]


def _is_remote(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def parse_glb(data: bytes, name: str = "model") -> Group:
    """Convert GLB bytes into a group of meshes.

    Node transforms are baked into the vertex buffers so every mesh sits
    directly under the returned group.
    """
    loaded = trimesh.load(io.BytesIO(data), file_type="glb", force="scene")

    root = Group(name=name)
    for node_name in loaded.graph.nodes_geometry:
        transform, geometry_name = loaded.graph[node_name]
        geom = loaded.geometry.get(geometry_name)
        if not isinstance(geom, trimesh.Trimesh):
            # Point clouds and paths have nothing to shade
            continue

        vertices = trimesh.transformations.transform_points(geom.vertices, transform)
        material = _material_for(geom)
        mesh = Mesh(BufferGeometry(np.asarray(vertices), np.asarray(geom.faces)), material, name=node_name)
        mesh.cast_shadow = True
        root.add(mesh)

    logger.debug(f"Parsed GLB '{name}': {len(root.children)} meshes")
    return root


def _material_for(geom: "trimesh.Trimesh") -> MeshStandardMaterial:
    visual_material = getattr(geom.visual, "material", None)
    name = getattr(visual_material, "name", None) or ""
    return MeshStandardMaterial(name=name)


class GLTFLoader:
    """Asynchronous GLB loader with a success/progress/error callback triad."""

    def __init__(self, base_path: Optional[Path] = None, transport=None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.base_path = Path(base_path) if base_path else Path.cwd()
        self.chunk_size = chunk_size
        self._transport = transport

    def load(
        self,
        url: str,
        on_load: OnLoad,
        on_progress: Optional[OnProgress] = None,
        on_error: Optional[OnError] = None,
    ) -> asyncio.Task:
        """
        Start loading ``url``.

        Returns the task driving the load so callers can cancel it. Exactly one
        of ``on_load`` or ``on_error`` is called unless the task is cancelled.
        """
        return asyncio.get_running_loop().create_task(
            self._load(url, on_load, on_progress, on_error)
        )

    async def _load(self, url, on_load, on_progress, on_error) -> None:
        try:
            data = await self._read(url, on_progress)
            fragment = await asyncio.to_thread(parse_glb, data, Path(url).stem)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if isinstance(e, RateLimitError):
                logger.warning(f"Asset host rate limited {url}, retry after {e.retry_after}s")
            if on_error is None:
                logger.error(f"Error loading model {url}: {e}")
                return
            on_error(e)
            return

        on_load(fragment)

    async def _read(self, url: str, on_progress: Optional[OnProgress]) -> bytes:
        if _is_remote(url):
            return await asyncio.to_thread(
                download_with_retry,
                url,
                on_progress=self._threadsafe_progress(on_progress),
                chunk_size=self.chunk_size,
                transport=self._transport,
            )

        path = Path(url)
        if not path.is_absolute():
            path = self.base_path / path
        data = await asyncio.to_thread(path.read_bytes)
        if on_progress:
            on_progress(LoadProgress(loaded=len(data), total=len(data)))
        return data

    @staticmethod
    def _threadsafe_progress(on_progress: Optional[OnProgress]):
        """Wrap ``on_progress`` so a worker thread can report on the event loop."""
        if on_progress is None:
            return None
        loop = asyncio.get_running_loop()

        def report(loaded: int, total: int) -> None:
            loop.call_soon_threadsafe(on_progress, LoadProgress(loaded=loaded, total=total))

        return report
