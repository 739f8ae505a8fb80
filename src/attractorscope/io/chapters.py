"""
Chapter log: one `MM:SS <Attractor> <params>` line per attractor change.
"""

import logging
from pathlib import Path
from typing import Optional, TextIO, Union

from attractorscope.core.fields import AttractorType, ParameterSet, format_parameters

logger = logging.getLogger(__name__)


def format_timestamp(frame: int, fps: int) -> str:
    total_seconds = frame // fps
    return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}"


def format_chapter(frame: int, fps: int, kind: AttractorType, params: ParameterSet) -> str:
    return f"{format_timestamp(frame, fps)} {kind.label} {format_parameters(kind, params)}"


class ChapterLog:
    """Append-only chapter file. A file that cannot be opened disables logging."""

    def __init__(self, path: Union[str, Path], fps: int = 60):
        self.path = Path(path)
        self.fps = fps
        self.entries = 0
        self._file: Optional[TextIO] = None
        try:
            self._file = open(self.path, "w", encoding="utf-8")
        except OSError as e:
            logger.warning("Could not open %s for writing (%s)", self.path, e)

    @property
    def enabled(self) -> bool:
        return self._file is not None

    def record(self, frame: int, kind: AttractorType, params: ParameterSet) -> None:
        if self._file is None:
            return
        self._file.write(format_chapter(frame, self.fps, kind, params) + "\n")
        self._file.flush()
        self.entries += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.info("Chapter log written to %s", self.path)

    def __enter__(self) -> "ChapterLog":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
