"""
Strided statistics over the particle cloud, used for autoframing.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numba
import numpy as np

from attractorscope.core.integrator import ParticleSet
from attractorscope.core.parallel import (
    BLOCK_SIZE,
    MAX,
    SUM,
    block_count,
    merge_blocks,
    partial_buffer,
)

SAMPLE_STRIDE = 100
ORBIT_RATE = 0.005


@dataclass(frozen=True)
class FrameStats:
    """Spread of the cloud in the rotated view frame."""

    center_x: float
    center_y: float
    mad_x: float
    mad_y: float
    max_speed: float
    samples: int


def orbit_angle(frame: int) -> float:
    """Viewing angle around the y axis for `frame`."""
    return frame * ORBIT_RATE


def rotate_xz(
    positions: np.ndarray, theta: float
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Rotate (x, z) by theta. Returns (rotated_x, y, rotated_z)."""
    cos_t = np.float32(math.cos(theta))
    sin_t = np.float32(math.sin(theta))
    x, y, z = positions[:, 0], positions[:, 1], positions[:, 2]
    return x * cos_t - z * sin_t, y, x * sin_t + z * cos_t


@numba.njit(parallel=True, cache=True)
def _centroid_speed_kernel(pos, vel, stride, cos_t, sin_t, block, init, out):
    """Per-block [sum rx, sum y, max speed] over every `stride`-th particle."""
    n = (pos.shape[0] + stride - 1) // stride
    for b in numba.prange(out.shape[0]):
        sx = init[0]
        sy = init[1]
        vmax = init[2]
        lo = np.int64(b) * block
        for k in range(lo, min(lo + block, n)):
            i = k * stride
            sx += pos[i, 0] * cos_t - pos[i, 2] * sin_t
            sy += pos[i, 1]
            vx = np.float64(vel[i, 0])
            vy = np.float64(vel[i, 1])
            vz = np.float64(vel[i, 2])
            speed = math.sqrt(vx * vx + vy * vy + vz * vz)
            if speed > vmax:
                vmax = speed
        out[b, 0] = sx
        out[b, 1] = sy
        out[b, 2] = vmax


@numba.njit(parallel=True, cache=True)
def _deviation_kernel(pos, stride, cos_t, sin_t, center_x, center_y, block, init, out):
    """Per-block [sum |rx - cx|, sum |y - cy|] over every `stride`-th particle."""
    n = (pos.shape[0] + stride - 1) // stride
    for b in numba.prange(out.shape[0]):
        dx = init[0]
        dy = init[1]
        lo = np.int64(b) * block
        for k in range(lo, min(lo + block, n)):
            i = k * stride
            dx += abs(pos[i, 0] * cos_t - pos[i, 2] * sin_t - center_x)
            dy += abs(pos[i, 1] - center_y)
        out[b, 0] = dx
        out[b, 1] = dy


def compute_frame_stats(
    particles: ParticleSet,
    theta: float,
    stride: int = SAMPLE_STRIDE,
    block_size: int = BLOCK_SIZE,
) -> FrameStats:
    """Two-pass centroid and mean absolute deviation plus peak speed.

    Only every `stride`-th particle is sampled, so the cost is independent of
    the full particle count.
    """
    pos, vel = particles.positions, particles.velocities
    n = block_count(len(particles), stride)
    cos_t, sin_t = math.cos(theta), math.sin(theta)

    first = (SUM, SUM, MAX)
    init, partials = partial_buffer(n, first, block_size)
    _centroid_speed_kernel(pos, vel, stride, cos_t, sin_t, block_size, init, partials)
    sum_x, sum_y, max_speed = merge_blocks(partials, first)
    center_x = sum_x / n
    center_y = sum_y / n

    second = (SUM, SUM)
    init, partials = partial_buffer(n, second, block_size)
    _deviation_kernel(pos, stride, cos_t, sin_t, center_x, center_y, block_size, init, partials)
    dist_x, dist_y = merge_blocks(partials, second)
    return FrameStats(
        center_x=center_x,
        center_y=center_y,
        mad_x=dist_x / n,
        mad_y=dist_y / n,
        max_speed=max(max_speed, 0.0),
        samples=n,
    )
