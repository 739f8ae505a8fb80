"""
Cinematic autoframing camera.

The camera never jumps: every quantity chases a per-frame target through its
own first-order low-pass. Scale reacts slower than the attractor parameters
so fast morphs do not turn into zoom jitter.
"""

import math
from dataclasses import dataclass

from attractorscope.core.fields import AttractorType
from attractorscope.core.stats import FrameStats
from attractorscope.experiment.config import FramingConfig

CAMERA_LERP = 0.005
MULTIPLIER_LERP = 0.02
MIN_EXTENT = 1.0
DYNAMIC_FACTOR_RANGE = (0.85, 1.15)


@dataclass
class CameraState:
    scale: float
    center_x: float = 0.0
    center_y: float = 0.0
    smoothed_max_speed: float = 1.0
    smoothed_base_multiplier: float = 1.0


def _clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


class CinematicCamera:
    """Derives zoom and pan targets from cloud statistics and smooths toward them."""

    def __init__(
        self,
        framing: FramingConfig,
        width: int,
        height: int,
        start_type: AttractorType,
    ):
        self.framing = framing
        self.width = width
        self.height = height
        self.state = CameraState(
            scale=_clamp(framing.start_scale, framing.min_zoom, framing.max_zoom),
            smoothed_base_multiplier=framing.base_multiplier(start_type),
        )
        self.target_scale = self.state.scale

    def track_attractor(self, kind: AttractorType) -> None:
        """Ease the framing multiplier toward the active attractor's."""
        s = self.state
        target = self.framing.base_multiplier(kind)
        s.smoothed_base_multiplier += (target - s.smoothed_base_multiplier) * MULTIPLIER_LERP

    def dynamic_factor(self, max_speed: float) -> float:
        ratio = max_speed / self.state.smoothed_max_speed
        factor = 1.0 + (ratio - 1.0) * self.framing.dynamic_adjustment
        return _clamp(factor, *DYNAMIC_FACTOR_RANGE)

    def sinusoidal_factor(self, fragment_progress: float) -> float:
        wave = math.sin(fragment_progress * 2.0 * math.pi)
        return 1.0 + wave * self.framing.zoom_oscillation

    def compute_target_scale(self, stats: FrameStats, fragment_progress: float) -> float:
        cfg = self.framing
        multiplier = (
            self.state.smoothed_base_multiplier
            * self.dynamic_factor(stats.max_speed)
            * self.sinusoidal_factor(fragment_progress)
        )
        extent_x = max(stats.mad_x * multiplier, MIN_EXTENT)
        extent_y = max(stats.mad_y * multiplier, MIN_EXTENT)
        scale = min(
            self.width * cfg.screen_fill_factor / extent_x,
            self.height * cfg.screen_fill_factor / extent_y,
        )
        return _clamp(scale, cfg.min_zoom, cfg.max_zoom)

    def update(self, stats: FrameStats, fragment_progress: float) -> CameraState:
        """Advance the camera one frame from this frame's statistics."""
        s = self.state
        cfg = self.framing
        self.target_scale = self.compute_target_scale(stats, fragment_progress)

        s.scale += (self.target_scale - s.scale) * CAMERA_LERP
        s.scale = _clamp(s.scale, cfg.min_zoom, cfg.max_zoom)
        s.center_x += (stats.center_x - s.center_x) * CAMERA_LERP
        s.center_y += (stats.center_y - s.center_y) * CAMERA_LERP

        peak = max(stats.max_speed, 1.0)
        s.smoothed_max_speed += (peak - s.smoothed_max_speed) * CAMERA_LERP
        return s
