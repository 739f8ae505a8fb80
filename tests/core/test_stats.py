"""Tests for strided cloud statistics."""

import math

import numpy as np
import pytest

from attractorscope.core.integrator import ParticleSet
from attractorscope.core.stats import compute_frame_stats, orbit_angle, rotate_xz


def _cloud(positions, velocities=None) -> ParticleSet:
    positions = np.asarray(positions, dtype=np.float32)
    if velocities is None:
        velocities = np.zeros_like(positions)
    return ParticleSet(positions, np.asarray(velocities, dtype=np.float32))


class TestRotation:
    def test_quarter_turn(self):
        pts = np.array([[1.0, 2.0, 0.0]], dtype=np.float32)
        rx, ry, rz = rotate_xz(pts, math.pi / 2)
        assert rx[0] == pytest.approx(0.0, abs=1e-6)
        assert ry[0] == 2.0
        assert rz[0] == pytest.approx(1.0)

    def test_orbit_angle(self):
        assert orbit_angle(0) == 0.0
        assert orbit_angle(200) == pytest.approx(1.0)


class TestFrameStats:
    def test_samples_every_hundredth(self):
        positions = np.zeros((1000, 3), dtype=np.float32)
        positions[::100, 0] = 10.0  # only sampled particles moved
        stats = compute_frame_stats(_cloud(positions), theta=0.0)
        assert stats.samples == 10
        assert stats.center_x == pytest.approx(10.0)
        assert stats.mad_x == pytest.approx(0.0)

    def test_two_pass_mad(self):
        positions = [[-1.0, 0.0, 0.0], [1.0, 4.0, 0.0], [3.0, 8.0, 0.0]]
        stats = compute_frame_stats(_cloud(positions), theta=0.0, stride=1)
        assert stats.center_x == pytest.approx(1.0)
        assert stats.center_y == pytest.approx(4.0)
        assert stats.mad_x == pytest.approx(4.0 / 3.0)
        assert stats.mad_y == pytest.approx(8.0 / 3.0)

    def test_rotation_applied(self):
        positions = [[0.0, 0.0, 2.0], [0.0, 0.0, 4.0]]
        stats = compute_frame_stats(_cloud(positions), theta=math.pi / 2, stride=1)
        # x' = x cos - z sin = -z
        assert stats.center_x == pytest.approx(-3.0, abs=1e-5)

    def test_max_speed(self):
        positions = np.zeros((3, 3))
        velocities = [[1.0, 0.0, 0.0], [0.0, 3.0, 4.0], [0.0, 0.0, -2.0]]
        stats = compute_frame_stats(_cloud(positions, velocities), 0.0, stride=1)
        assert stats.max_speed == pytest.approx(5.0)

    def test_degenerate_single_point(self):
        positions = np.full((500, 3), 1.5)
        stats = compute_frame_stats(_cloud(positions), 0.3)
        assert stats.mad_x == pytest.approx(0.0, abs=1e-12)
        assert stats.mad_y == pytest.approx(0.0, abs=1e-12)
        assert stats.max_speed == 0.0

    @pytest.mark.parametrize("block_size", [1, 7, 4096])
    def test_independent_of_block_size(self, block_size, rng):
        cloud = ParticleSet.random_box(50_000, rng)
        cloud.velocities[:] = rng.normal(size=cloud.velocities.shape)
        reference = compute_frame_stats(cloud, 0.7, block_size=500)
        stats = compute_frame_stats(cloud, 0.7, block_size=block_size)
        assert stats.samples == reference.samples == 500
        assert stats.center_x == pytest.approx(reference.center_x, rel=1e-9, abs=1e-12)
        assert stats.mad_y == pytest.approx(reference.mad_y, rel=1e-9)
        assert stats.max_speed == reference.max_speed
