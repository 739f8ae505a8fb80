"""
Framing configuration and its permissive `key = value` file format.

Example file:

    # per-attractor zoom multipliers
    lorenz = 2.2
    chen = 2.8
    screen_fill_factor = 0.08
    min_zoom = 50
"""

import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Union

from attractorscope.core.fields import AttractorType

logger = logging.getLogger(__name__)

DEFAULT_BASE_MULTIPLIERS: Dict[AttractorType, float] = {
    AttractorType.AIZAWA: 0.8,  # range ~±2
    AttractorType.THOMAS: 0.8,
    AttractorType.LORENZ: 2.5,  # range ~±20-30
    AttractorType.HALVORSEN: 1.2,
    AttractorType.CHEN: 2.5,
}

DEFAULT_CAM_SCALE = 100.0

_GLOBAL_KEYS = (
    "screen_fill_factor",
    "min_zoom",
    "max_zoom",
    "zoom_oscillation",
    "dynamic_adjustment",
    "initial_cam_scale",
)


@dataclass(frozen=True)
class FramingConfig:
    """Camera framing settings. Built once at startup, never mutated."""

    base_multipliers: Dict[AttractorType, float] = field(
        default_factory=lambda: dict(DEFAULT_BASE_MULTIPLIERS)
    )
    screen_fill_factor: float = 0.07
    min_zoom: float = 60.0
    max_zoom: float = 2000.0
    zoom_oscillation: float = 0.0  # breathing zoom, off by default
    dynamic_adjustment: float = 0.0  # speed-driven zoom, off by default
    initial_cam_scale: Optional[float] = None

    def __post_init__(self):
        if self.min_zoom > self.max_zoom:
            raise ValueError(
                f"min_zoom ({self.min_zoom}) must not exceed max_zoom ({self.max_zoom})"
            )
        missing = set(AttractorType) - set(self.base_multipliers)
        if missing:
            names = ", ".join(sorted(t.label for t in missing))
            raise ValueError(f"missing base multipliers for: {names}")

    def base_multiplier(self, kind: AttractorType) -> float:
        return self.base_multipliers[AttractorType(kind)]

    @property
    def start_scale(self) -> float:
        if self.initial_cam_scale is not None and self.initial_cam_scale > 0:
            return self.initial_cam_scale
        return DEFAULT_CAM_SCALE


def parse_framing_lines(lines, base: Optional[FramingConfig] = None) -> FramingConfig:
    """Apply `key = value` overrides from `lines` on top of `base`.

    Comments, blank lines, unknown keys and unparseable values are skipped.
    """
    base = base or FramingConfig()
    multipliers = dict(base.base_multipliers)
    overrides: Dict[str, float] = {}
    by_name = {t.name.lower(): t for t in AttractorType}

    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        try:
            number = float(value.split()[0])
        except (ValueError, IndexError):
            continue
        if not math.isfinite(number):
            continue
        if key in by_name:
            multipliers[by_name[key]] = number
        elif key in _GLOBAL_KEYS:
            overrides[key] = number

    try:
        return replace(base, base_multipliers=multipliers, **overrides)
    except ValueError as e:
        logger.warning("Ignoring zoom range overrides: %s", e)
        zoom_keys = ("min_zoom", "max_zoom")
        kept = {k: v for k, v in overrides.items() if k not in zoom_keys}
        return replace(base, base_multipliers=multipliers, **kept)


def load_framing_config(path: Union[str, Path, None]) -> FramingConfig:
    """Load a framing config file, falling back to defaults if unreadable."""
    if path is None:
        return FramingConfig()
    path = Path(path)
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            cfg = parse_framing_lines(f)
    except OSError as e:
        logger.warning("Could not open config file '%s' (%s), using defaults", path, e)
        return FramingConfig()

    logger.info(
        "Loaded config from '%s': multipliers %s",
        path,
        " ".join(f"{t.name.lower()}={cfg.base_multiplier(t):.2f}" for t in AttractorType),
    )
    logger.info(
        "  screen_fill=%.3f min_zoom=%.1f max_zoom=%.1f",
        cfg.screen_fill_factor,
        cfg.min_zoom,
        cfg.max_zoom,
    )
    return cfg
