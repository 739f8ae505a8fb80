"""
Color grading.

Maps normalized particle speed to a heatmap color and compresses the
additive accumulation buffer into 8-bit RGB with a logarithmic curve.
"""

import numpy as np

EXPOSURE = 2.5
TONE_GAIN = 45.0

# Heatmap segment breakpoints
_T1, _T2, _T3 = 0.2, 0.5, 0.8


def heatmap(t: np.ndarray) -> np.ndarray:
    """
    Map normalized speed to RGB through four linear segments.

    blue -> cyan (t < 0.2), cyan -> green (t < 0.5),
    green -> yellow (t < 0.8), yellow -> magenta-white (t <= 1).

    Args:
        t: Array of values; clamped to [0, 1].

    Returns:
        (N, 3) float32 RGB array in [0, 1].
    """
    t = np.clip(np.asarray(t, dtype=np.float32), 0.0, 1.0)
    rgb = np.zeros(t.shape + (3,), dtype=np.float32)

    seg1 = t < _T1
    seg2 = (t >= _T1) & (t < _T2)
    seg3 = (t >= _T2) & (t < _T3)
    seg4 = t >= _T3

    rgb[seg1, 1] = t[seg1] / _T1
    rgb[seg1, 2] = 1.0

    rgb[seg2, 1] = 1.0
    rgb[seg2, 2] = 1.0 - (t[seg2] - _T1) / (_T2 - _T1)

    rgb[seg3, 0] = (t[seg3] - _T2) / (_T3 - _T2)
    rgb[seg3, 1] = 1.0

    rgb[seg4, 0] = 1.0
    rgb[seg4, 1] = 1.0 - (t[seg4] - _T3) / (1.0 - _T3)
    rgb[seg4, 2] = (t[seg4] - _T3) / (1.0 - _T3)
    return rgb


def depth_fade(rotated_z: np.ndarray) -> np.ndarray:
    """Brightness falloff with distance from the view plane."""
    return 1.0 / (1.0 + np.abs(rotated_z) * 0.01)


def tone_map_log(
    accum: np.ndarray,
    exposure: float = EXPOSURE,
    gain: float = TONE_GAIN,
) -> np.ndarray:
    """
    Logarithmic tone map of an additive float buffer.

    out = clamp(ln(1 + accum * exposure) * gain, 0, 255), truncated.

    Args:
        accum: (H, W, 3) float accumulation buffer.
        exposure: Pre-log multiplier.
        gain: Post-log multiplier.

    Returns:
        (H, W, 3) uint8 RGB array.
    """
    mapped = np.log1p(np.maximum(accum, 0.0) * exposure) * gain
    return np.clip(mapped, 0.0, 255.0).astype(np.uint8)
