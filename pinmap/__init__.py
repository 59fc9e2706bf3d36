"""
pinmap: a single 3D marker on a map.

Fetches map credentials, loads the mapping SDK, geocodes a fixed address and
keeps a rotating 3D pin anchored there through a WebGL overlay.

Run with:
    pinmap serve
    pinmap view
"""

from pinmap.bootstrap import MapBootstrapper, initialize_app
from pinmap.overlay import MarkerOverlay
from pinmap.session import SessionState

__version__ = "1.0.0"

__all__ = ["MapBootstrapper", "MarkerOverlay", "SessionState", "initialize_app"]
