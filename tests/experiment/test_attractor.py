"""End-to-end tests for the attractor frame pipeline."""

from dataclasses import replace

import numpy as np
import pytest

from attractorscope.core.fields import AttractorType, ParameterSet, evaluate
from attractorscope.core.integrator import DT, MAX_COORD, ParticleSet
from attractorscope.core.parallel import set_workers
from attractorscope.core.scheduler import TRANSITION_FRAMES
from attractorscope.experiment.attractor import AttractorConfig, AttractorRenderer


class TestAttractorConfig:
    def test_defaults(self):
        cfg = AttractorConfig()
        assert (cfg.width, cfg.height, cfg.fps) == (1920, 1080, 60)
        assert cfg.num_particles == 2_000_000
        assert cfg.total_frames == 20 * 300
        assert cfg.frame_bytes == 1920 * 1080 * 3

    def test_start_type_coerced(self):
        assert AttractorConfig(start_type=3).start_type is AttractorType.HALVORSEN

    @pytest.mark.parametrize("kwargs", [
        {"num_particles": 0},
        {"frames_per_fragment": 0},
        {"width": 0},
        {"fps": 0},
        {"start_type": 9},
        {"workers": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            AttractorConfig(**kwargs)


class TestAttractorRenderer:
    def test_single_frame(self, small_config):
        renderer = AttractorRenderer(small_config, seed=1)
        frame = renderer.render_frame(0)
        assert frame.shape == (48, 64, 3)
        assert frame.dtype == np.uint8
        assert frame.any()

    def test_first_frame_is_plain_euler_step(self, lorenz_params, rng):
        cfg = AttractorConfig(
            width=64, height=48, num_particles=1000,
            frames_per_fragment=300, start_type=AttractorType.LORENZ,
        )
        cloud = ParticleSet.random_box(1000, rng)
        old = cloud.positions.astype(np.float64)
        r = AttractorRenderer(cfg, seed=3, particles=cloud, initial_params=lorenz_params)
        assert r.scheduler.blend == 1.0
        r.update(0)
        assert r.scheduler.current == lorenz_params
        d = np.column_stack(
            evaluate(AttractorType.LORENZ, old[:, 0], old[:, 1], old[:, 2], lorenz_params)
        )
        np.testing.assert_allclose(cloud.positions, old + DT * d, rtol=1e-4, atol=1e-4)

    def test_injected_escapee_respawns(self, small_config, lorenz_params):
        positions = np.zeros((200, 3), dtype=np.float32)
        positions[:, 0] = 1.0
        positions[7] = (1000.0, 0.0, 0.0)
        cloud = ParticleSet(positions, np.zeros_like(positions))
        r = AttractorRenderer(small_config, particles=cloud, initial_params=lorenz_params)
        r.update(0)
        x, y, z = cloud.positions[7]
        assert x == y == z
        assert -2.0 <= x <= 2.0
        assert r.respawned == 1
        assert r.progress_line().endswith("| Respawned: 1")

    def test_buffer_cleared_every_frame(self, small_config):
        r = AttractorRenderer(small_config, seed=5)
        r.update(0)
        first = r.get_raw_field().sum()
        r.update(1)
        second = r.get_raw_field().sum()
        # Both frames splat the whole cloud once; a stale buffer would double
        assert second < first * 1.5

    def test_type_cycles_over_full_run(self):
        cfg = AttractorConfig(
            width=32, height=24, num_particles=500,
            fragments=7, frames_per_fragment=20, start_type=AttractorType.CHEN,
        )
        events = []
        r = AttractorRenderer(cfg, seed=7)
        r.add_transition_listener(lambda f, kind, p: events.append((f, kind, p)))
        frames = list(r.render_frames(cfg.total_frames))
        assert r.scheduler.transition.steps == cfg.total_frames - 100
        assert len(frames) == cfg.total_frames
        assert [(f, k) for f, k, _ in events] == [(100, AttractorType.AIZAWA)]
        assert events[0][2].d == pytest.approx(3.5, abs=0.5)

    def test_blend_settles_after_window(self):
        fpf = 40
        cfg = AttractorConfig(
            width=32, height=24, num_particles=300,
            fragments=20, frames_per_fragment=fpf, start_type=AttractorType.THOMAS,
        )
        r = AttractorRenderer(cfg, seed=2)
        for frame in range(6 * fpf + TRANSITION_FRAMES):
            r.update(frame)
        assert r.scheduler.type_changes == 1
        assert r.scheduler.blend == 1.0
        assert r.scheduler.previous_type == AttractorType.THOMAS
        assert r.scheduler.current_type == AttractorType.LORENZ

    def test_state_stays_bounded(self, small_config):
        r = AttractorRenderer(small_config, seed=11)
        for frame in range(small_config.total_frames):
            r.update(frame)
            assert np.isfinite(r.particles.positions).all()
            assert np.abs(r.particles.positions).max() <= MAX_COORD
            cam = r.camera.state
            assert small_config.framing.min_zoom <= cam.scale <= small_config.framing.max_zoom

    def test_progress_line(self, small_config):
        r = AttractorRenderer(small_config, seed=1)
        r.update(0)
        line = r.progress_line()
        assert line.startswith("Fr 0 | Type: Lorenz->Lorenz | Blend: 1.00 | Scale: ")
        assert line.endswith(f"| Respawned: {r.respawned}")

    def test_thread_count_does_not_change_frames(self, small_config):
        before = set_workers()
        try:
            a = AttractorRenderer(replace(small_config, workers=1), seed=9)
            frames_a = [a.render_frame(i) for i in range(5)]
            b = AttractorRenderer(replace(small_config, workers=4), seed=9)
            frames_b = [b.render_frame(i) for i in range(5)]
        finally:
            set_workers(before)
        np.testing.assert_array_equal(a.particles.positions, b.particles.positions)
        for fa, fb in zip(frames_a, frames_b):
            assert np.abs(fa.astype(int) - fb.astype(int)).max() <= 1
