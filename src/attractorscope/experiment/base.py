"""
Base classes shared by the attractorscope renderers.
"""

import abc
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import numpy as np


@dataclass
class BaseConfig:
    """Output geometry shared by all renderers."""
    width: int = 1920
    height: int = 1080
    fps: int = 60

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"invalid frame size {self.width}x{self.height}")
        if self.fps < 1:
            raise ValueError(f"fps must be >= 1, got {self.fps}")

    @property
    def frame_bytes(self) -> int:
        """Size of one RGB24 frame."""
        return self.width * self.height * 3


class BaseVisualizer(abc.ABC):
    """
    Abstract frame source.

    Subclasses advance their simulation in `update` and expose the additive
    float field in `get_raw_field`; `render_frame` turns that into uint8 RGB.
    """

    def __init__(self, config: Optional[BaseConfig] = None, seed: Optional[int] = None):
        self.cfg = config or BaseConfig()
        self.rng = np.random.default_rng(seed)

    @abc.abstractmethod
    def update(self, frame_index: int):
        """Advance the simulation state by one frame."""
        pass

    @abc.abstractmethod
    def get_raw_field(self) -> np.ndarray:
        """Returns the (H, W, 3) float32 field accumulated by the last update."""
        pass

    @abc.abstractmethod
    def tone_map(self, field: np.ndarray) -> np.ndarray:
        """Convert the raw field to a (H, W, 3) uint8 frame."""
        pass

    def render_frame(self, frame_index: int) -> np.ndarray:
        """Advance one frame and return it as (H, W, 3) uint8 RGB."""
        self.update(frame_index)
        return self.tone_map(self.get_raw_field())

    def render_frames(
        self,
        total_frames: int,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Iterator[np.ndarray]:
        """Yield `total_frames` frames in order."""
        for i in range(total_frames):
            frame = self.render_frame(i)
            if progress_callback:
                progress_callback(i + 1, total_frames)
            yield frame
