"""
Cinematic strange attractor renderer.

Integrates a large particle cloud under one of five chaotic vector fields,
cycling attractor families with a cross-fade, and renders it through an
autoframing orthographic camera.

Per-frame pipeline (each pass completes before the next starts):
  1. scheduler   -> parameter low-pass, type cycling, blend advance
  2. clear       -> accumulation buffer zeroed
  3. integrate   -> Euler step under blended field, divergent particles respawned
  4. statistics  -> strided centroid / mean abs deviation / peak speed
  5. camera      -> target zoom and pan from the statistics, smoothed
  6. rasterize   -> heatmap-colored additive splat
  7. tone map    -> logarithmic compression to uint8 (in render_frame)
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from attractorscope.core.fields import AttractorType, ParameterSet
from attractorscope.core.integrator import DT, MAX_COORD, Integrator, ParticleSet
from attractorscope.core.parallel import set_workers
from attractorscope.core.scheduler import TransitionScheduler
from attractorscope.core.stats import (
    SAMPLE_STRIDE,
    compute_frame_stats,
    orbit_angle,
)
from attractorscope.experiment.base import BaseConfig, BaseVisualizer
from attractorscope.experiment.camera import CinematicCamera
from attractorscope.experiment.colorgrade import EXPOSURE, tone_map_log
from attractorscope.experiment.config import FramingConfig
from attractorscope.experiment.rasterizer import AccumulationBuffer, rasterize

TransitionListener = Callable[[int, AttractorType, ParameterSet], None]


@dataclass
class AttractorConfig(BaseConfig):
    """Configuration for the attractor renderer."""

    num_particles: int = 2_000_000
    fragments: int = 20
    frames_per_fragment: int = 300
    start_type: AttractorType = AttractorType.AIZAWA

    # Simulation
    dt: float = DT
    max_coord: float = MAX_COORD
    sample_stride: int = SAMPLE_STRIDE

    # Output
    exposure: float = EXPOSURE

    # Parallel kernel threads; None keeps numba's default
    workers: Optional[int] = None

    framing: FramingConfig = field(default_factory=FramingConfig)

    def __post_init__(self):
        super().__post_init__()
        if self.num_particles < 1:
            raise ValueError(f"num_particles must be >= 1, got {self.num_particles}")
        if self.fragments < 0:
            raise ValueError(f"fragments must be >= 0, got {self.fragments}")
        if self.frames_per_fragment < 1:
            raise ValueError(
                f"frames_per_fragment must be >= 1, got {self.frames_per_fragment}"
            )
        if self.sample_stride < 1:
            raise ValueError(f"sample_stride must be >= 1, got {self.sample_stride}")
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        self.start_type = AttractorType(self.start_type)

    @property
    def total_frames(self) -> int:
        return self.fragments * self.frames_per_fragment


class AttractorRenderer(BaseVisualizer):
    """
    Particle-cloud strange attractor renderer.

    Owns the particle arrays and the accumulation buffer. Parallel kernels
    run on numba's thread pool, capped at `config.workers`.
    """

    def __init__(
        self,
        config: Optional[AttractorConfig] = None,
        seed: Optional[int] = None,
        particles: Optional[ParticleSet] = None,
        initial_params: Optional[ParameterSet] = None,
    ):
        super().__init__(config or AttractorConfig(), seed)
        cfg: AttractorConfig = self.cfg

        set_workers(cfg.workers)
        if particles is None:
            particles = ParticleSet.random_box(cfg.num_particles, self.rng)
        self.particles = particles
        self.buffer = AccumulationBuffer(cfg.width, cfg.height)

        self.scheduler = TransitionScheduler(
            cfg.start_type,
            cfg.frames_per_fragment,
            rng=self.rng,
            initial_params=initial_params,
        )
        self.integrator = Integrator(self.particles, dt=cfg.dt, max_coord=cfg.max_coord)
        self.camera = CinematicCamera(cfg.framing, cfg.width, cfg.height, cfg.start_type)

        self.frame_index = -1
        self.respawned = 0
        self._listeners: List[TransitionListener] = []

    # ------------------------------------------------------------------
    # Transition notifications
    # ------------------------------------------------------------------

    def add_transition_listener(self, listener: TransitionListener) -> None:
        """Call `listener(frame, new_type, target_params)` on every type change."""
        self._listeners.append(listener)

    def _notify(self, frame_index: int) -> None:
        for listener in self._listeners:
            listener(frame_index, self.scheduler.current_type, self.scheduler.target)

    # ------------------------------------------------------------------
    # BaseVisualizer interface
    # ------------------------------------------------------------------

    def update(self, frame_index: int) -> None:
        """Advance simulation by one frame: schedule, integrate, frame, splat."""
        cfg: AttractorConfig = self.cfg
        sched = self.scheduler

        if sched.update(frame_index):
            self._notify(frame_index)
        self.camera.track_attractor(sched.current_type)

        self.buffer.clear()
        theta = orbit_angle(frame_index)

        self.respawned = self.integrator.step(
            sched.current_type, sched.previous_type, sched.current, sched.blend
        )
        stats = compute_frame_stats(self.particles, theta, stride=cfg.sample_stride)
        self.camera.update(stats, sched.fragment_progress(frame_index))
        rasterize(self.particles, theta, self.camera.state, self.buffer)

        self.frame_index = frame_index

    def get_raw_field(self) -> np.ndarray:
        return self.buffer.data

    def tone_map(self, field: np.ndarray) -> np.ndarray:
        return tone_map_log(field, exposure=self.cfg.exposure)

    def progress_line(self) -> str:
        """One-line status: frame, type transition, blend, camera scale, respawns."""
        sched = self.scheduler
        return (
            f"Fr {self.frame_index} | Type: {sched.previous_type.label}->"
            f"{sched.current_type.label} | Blend: {sched.blend:.2f} | "
            f"Scale: {self.camera.state.scale:.1f} | Respawned: {self.respawned}"
        )
