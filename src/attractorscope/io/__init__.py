"""Output boundaries: raw frame stream, snapshots and chapter log."""

from attractorscope.io.chapters import ChapterLog
from attractorscope.io.emitter import FrameEmitter, save_snapshot
