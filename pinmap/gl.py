"""
Rendering context shared between the map host and the 3D renderer.

The host owns the context and its canvas; the overlay's renderer draws into
it and must hand the global state back untouched.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


# Global state of a freshly created GL context
GL_DEFAULT_STATE: dict[str, Any] = {
    "program": None,
    "array_buffer": None,
    "framebuffer": None,
    "depth_test": False,
    "blend": False,
    "cull_face": False,
    "depth_mask": True,
    "color_mask": (True, True, True, True),
    "viewport": None,
}


@dataclass
class Canvas:
    """Drawing surface dimensions."""

    width: int
    height: int


class GLContext(Protocol):
    """Capabilities the renderer needs from the host's rendering context."""

    canvas: Canvas
    state: dict[str, Any]

    def get_context_attributes(self) -> dict[str, Any]:
        ...

    def clear(self) -> None:
        ...


@dataclass
class HeadlessGLContext:
    """In-memory GL context used by the headless host."""

    canvas: Canvas
    attributes: dict[str, Any] = field(default_factory=lambda: {
        "alpha": True,
        "antialias": True,
        "depth": True,
        "stencil": True,
        "premultiplied_alpha": True,
        "preserve_drawing_buffer": False,
    })
    state: dict[str, Any] = field(default_factory=lambda: dict(GL_DEFAULT_STATE))
    clear_count: int = 0

    def get_context_attributes(self) -> dict[str, Any]:
        return dict(self.attributes)

    def clear(self) -> None:
        self.clear_count += 1

    def is_default_state(self) -> bool:
        """True when no global state leaked out of the last render."""
        return self.state == GL_DEFAULT_STATE
