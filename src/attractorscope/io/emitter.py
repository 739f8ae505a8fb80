"""
Frame output boundary.

Frames leave the process as raw RGB24: R, G, B per pixel, row-major, no
padding, no header and no delimiter. The consumer must know the frame size.
"""

import sys
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union

import numpy as np
from PIL import Image


class FrameEmitter:
    """Writes frames, in order, to a binary stream (stdout by default)."""

    def __init__(self, width: int, height: int, stream: Optional[BinaryIO] = None):
        self.width = width
        self.height = height
        self.stream = stream if stream is not None else sys.stdout.buffer
        self.frames_written = 0

    @property
    def frame_bytes(self) -> int:
        return self.width * self.height * 3

    def emit(self, frame: np.ndarray) -> None:
        """Write one (H, W, 3) uint8 frame."""
        if frame.shape != (self.height, self.width, 3) or frame.dtype != np.uint8:
            raise ValueError(
                f"expected ({self.height}, {self.width}, 3) uint8 frame, "
                f"got {frame.shape} {frame.dtype}"
            )
        self.stream.write(np.ascontiguousarray(frame).tobytes())
        self.frames_written += 1

    def emit_all(self, frames: Iterable[np.ndarray]) -> int:
        for frame in frames:
            self.emit(frame)
        self.flush()
        return self.frames_written

    def flush(self) -> None:
        self.stream.flush()


def save_snapshot(frame: np.ndarray, path: Union[str, Path]) -> Path:
    """Save a single (H, W, 3) uint8 frame as an image (format from suffix)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(frame)).save(path)
    return path
