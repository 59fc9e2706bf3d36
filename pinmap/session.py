"""
Session state.

Everything one viewing session owns lives in a single ``SessionState`` that
is passed by reference to the fetcher, bootstrapper and overlay.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

from pinmap.scene.graph import Group, PerspectiveCamera, Scene
from pinmap.scene.renderer import WebGLRenderer
from pinmap.types import BootstrapState, MapConfig, TargetCoordinate


@dataclass
class AnimationToken:
    """Cancellation token for the per-frame animation loop."""

    cancelled: bool = False
    handle: Any = None
    frames: int = 0

    def cancel(self, library=None) -> None:
        self.cancelled = True
        if library is not None and self.handle is not None:
            library.cancel_animation_frame(self.handle)
        self.handle = None


@dataclass
class SceneState:
    scene: Optional[Scene] = None
    camera: Optional[PerspectiveCamera] = None
    renderer: Optional[WebGLRenderer] = None
    model: Optional[Group] = None
    # Loaded before the renderer existed; inserted at context-ready
    pending_model: Optional[Group] = None
    load_task: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        return self.scene is not None and self.camera is not None and self.renderer is not None

    def clear(self) -> None:
        self.scene = None
        self.camera = None
        self.renderer = None
        self.model = None
        self.pending_model = None
        self.load_task = None


@dataclass
class SessionState:
    state: BootstrapState = BootstrapState.UNINITIALIZED
    config: Optional[MapConfig] = None
    library: Any = None
    map: Any = None
    target: Optional[TargetCoordinate] = None
    overlay: Any = None
    overlay_view: Any = None
    scene: SceneState = field(default_factory=SceneState)
    animation: Optional[AnimationToken] = None
    alerts: list[str] = field(default_factory=list)

    def reset(self) -> None:
        """Drop every reference the session holds."""
        if self.animation is not None:
            self.animation.cancel(self.library)
        self.scene.clear()
        self.state = BootstrapState.UNINITIALIZED
        self.config = None
        self.library = None
        self.map = None
        self.target = None
        self.overlay = None
        self.overlay_view = None
        self.animation = None
