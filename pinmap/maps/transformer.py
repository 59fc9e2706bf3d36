"""
Camera transform for the headless host.

Builds the model-view-projection matrix that places a lat/lng/altitude in
clip space for the current map camera. The model frame at the point is in
metres with x east, y up and z south.
"""

import math

import numpy as np

from pinmap.types import LatLng
from pinmap.utils.geo import local_offset, meters_per_pixel

# Vertical field of view that puts the camera 1.5 viewport-heights from the
# ground, matching the vector map's default perspective.
FOV_Y = 2 * math.atan(0.5 / 1.5)


def perspective(fov_y: float, aspect: float, near: float, far: float) -> np.ndarray:
    f = 1.0 / math.tan(fov_y / 2)
    return np.array([
        [f / aspect, 0, 0, 0],
        [0, f, 0, 0],
        [0, 0, (far + near) / (near - far), 2 * far * near / (near - far)],
        [0, 0, -1, 0],
    ])


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    forward = target - eye
    forward /= np.linalg.norm(forward)
    side = np.cross(forward, up)
    side /= np.linalg.norm(side)
    true_up = np.cross(side, forward)

    view = np.eye(4)
    view[0, :3] = side
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[:3, 3] = -view[:3, :3] @ eye
    return view


class MercatorTransformer:
    """Snapshot of the map camera for one frame."""

    def __init__(
        self,
        center: LatLng,
        zoom: float,
        tilt: float,
        heading: float,
        width: int,
        height: int,
    ):
        self.center = center
        self.zoom = zoom
        self.tilt = tilt
        self.heading = heading
        self.width = width
        self.height = height
        self._view_projection = self._build_view_projection()

    def _build_view_projection(self) -> np.ndarray:
        mpp = meters_per_pixel(self.center.latitude, self.zoom)
        viewport_height_m = mpp * self.height
        distance = (viewport_height_m / 2) / math.tan(FOV_Y / 2)

        tilt = math.radians(self.tilt)
        heading = math.radians(self.heading)
        world_up = np.array([0.0, 1.0, 0.0])
        # Direction the camera faces on the ground plane; north is -z
        forward = np.array([math.sin(heading), 0.0, -math.cos(heading)])

        eye = distance * (math.cos(tilt) * world_up - math.sin(tilt) * forward)
        up_hint = math.cos(tilt) * forward + math.sin(tilt) * world_up

        view = look_at(eye, np.zeros(3), up_hint)
        projection = perspective(FOV_Y, self.width / self.height, distance / 100, distance * 100)
        return projection @ view

    def model_matrix(self, lat: float, lng: float, altitude: float) -> np.ndarray:
        east, north = local_offset(lat, lng, self.center.latitude, self.center.longitude)
        model = np.eye(4)
        model[:3, 3] = [east, altitude, -north]
        return model

    def from_lat_lng_altitude(self, lat: float, lng: float, altitude: float = 0.0) -> list[float]:
        mvp = self._view_projection @ self.model_matrix(lat, lng, altitude)
        return mvp.flatten(order="F").tolist()
