"""
Orthographic projection and additive point splatting.
"""

from typing import Tuple

import numba
import numpy as np

from attractorscope.core.integrator import ParticleSet
from attractorscope.core.stats import rotate_xz
from attractorscope.experiment.camera import CameraState
from attractorscope.experiment.colorgrade import depth_fade, heatmap


@numba.njit(cache=True)
def _splat_kernel(accum, pixel_index, rgb):
    """Add rgb[i] into flat pixel pixel_index[i] (serial, so no update is lost)."""
    for i in range(pixel_index.shape[0]):
        p = pixel_index[i]
        accum[p, 0] += rgb[i, 0]
        accum[p, 1] += rgb[i, 1]
        accum[p, 2] += rgb[i, 2]


class AccumulationBuffer:
    """(H, W, 3) float32 buffer that only supports clearing and summing.

    `accumulate` is the single write path: contributions landing on the same
    pixel within one call are all summed.
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"invalid buffer size {width}x{height}")
        self.width = width
        self.height = height
        self._data = np.zeros((height, width, 3), dtype=np.float32)
        self._flat = self._data.reshape(-1, 3)

    @property
    def data(self) -> np.ndarray:
        return self._data

    def clear(self) -> None:
        self._data.fill(0.0)

    def accumulate(self, pixel_index: np.ndarray, rgb: np.ndarray) -> None:
        """Add `rgb[i]` to flat pixel `pixel_index[i]` for every i."""
        if len(pixel_index) != len(rgb):
            raise ValueError(f"{len(pixel_index)} pixels but {len(rgb)} colors")
        if len(pixel_index) == 0:
            return
        _splat_kernel(
            self._flat,
            np.ascontiguousarray(pixel_index, dtype=np.int64),
            np.ascontiguousarray(rgb, dtype=np.float32),
        )


def project(
    positions: np.ndarray,
    theta: float,
    camera: CameraState,
    width: int,
    height: int,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Orthographic projection into integer pixel coordinates.

    Returns (px, py, rotated_z); px/py are int64 and may fall outside the frame.
    """
    rx, ry, rz = rotate_xz(positions, theta)
    with np.errstate(invalid="ignore", over="ignore"):
        sx = (rx - camera.center_x) * camera.scale + width / 2
        sy = (ry - camera.center_y) * camera.scale + height / 2
        # Clip before the integer cast; anything out here is discarded anyway
        sx = np.nan_to_num(np.clip(sx, -1.0, width), nan=-1.0)
        sy = np.nan_to_num(np.clip(sy, -1.0, height), nan=-1.0)
    return np.floor(sx).astype(np.int64), np.floor(sy).astype(np.int64), rz


def rasterize(
    particles: ParticleSet,
    theta: float,
    camera: CameraState,
    buffer: AccumulationBuffer,
) -> None:
    """Splat every particle's heatmap color into `buffer`.

    Color comes from speed normalized by the camera's smoothed peak speed,
    dimmed by depth. Particles projecting outside the frame are dropped.
    """
    W, H = buffer.width, buffer.height
    px, py, rz = project(particles.positions, theta, camera, W, H)
    inside = (px >= 0) & (px < W) & (py >= 0) & (py < H)
    if not inside.any():
        return
    speed = particles.speeds()[inside]
    rgb = heatmap(speed / camera.smoothed_max_speed)
    rgb *= depth_fade(rz[inside])[:, np.newaxis]
    buffer.accumulate(py[inside] * W + px[inside], rgb)
