"""
FFmpeg video encoder.

Pipes raw RGB frames to ffmpeg via stdin. No intermediate files: frames go
straight from numpy arrays to the encoder.
"""

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Iterator

PRESETS = (
    "ultrafast", "superfast", "veryfast", "faster", "fast",
    "medium", "slow", "slower", "veryslow",
)


def ffmpeg_available() -> bool:
    return shutil.which("ffmpeg") is not None


def build_command(
    output_path: Path,
    width: int,
    height: int,
    fps: int,
    crf: int = 18,
    preset: str = "fast",
) -> list:
    if preset not in PRESETS:
        raise ValueError(f"unknown x264 preset {preset!r}")
    return [
        "ffmpeg", "-y",
        # Raw video input from pipe
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "pipe:0",
        # Video encoding
        # Long GOP and no scene-cut detection: cross-fades must not force keyframes
        "-c:v", "libx264",
        "-preset", preset,
        "-crf", str(crf),
        "-g", "300",
        "-keyint_min", "60",
        "-x264-params", "scenecut=0:rc-lookahead=60",
        "-tune", "animation",
        "-pix_fmt", "yuv420p",
        str(output_path),
    ]


def encode_video(
    frame_iterator: Iterator,
    output_path: Path,
    width: int = 1920,
    height: int = 1080,
    fps: int = 60,
    crf: int = 18,
    preset: str = "fast",
) -> Path:
    """
    Encode frames to an H.264 MP4.

    Args:
        frame_iterator: Yields (H, W, 3) uint8 numpy arrays.
        output_path: Output MP4 path.
        width: Frame width.
        height: Frame height.
        fps: Frames per second.
        crf: x264 constant rate factor (0-51, lower is better).
        preset: x264 speed preset.

    Returns:
        Path to the output file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = build_command(output_path, width, height, fps, crf, preset)
    # stderr goes to a temp file so a chatty ffmpeg can never block the pipe
    err_log = tempfile.TemporaryFile()
    proc = subprocess.Popen(
        cmd,
        stdin=subprocess.PIPE,
        stdout=subprocess.DEVNULL,
        stderr=err_log,
    )

    try:
        for frame in frame_iterator:
            proc.stdin.write(frame.tobytes())
    except BrokenPipeError:
        pass
    finally:
        if proc.stdin:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass

    proc.wait()
    err_log.seek(0)
    stderr = err_log.read().decode("utf-8", errors="replace")
    err_log.close()

    if proc.returncode != 0:
        # Filter out common non-error ffmpeg messages
        error_lines = [
            line for line in stderr.split("\n")
            if "error" in line.lower() or "invalid" in line.lower()
        ]
        error_msg = "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]
        raise RuntimeError(
            f"ffmpeg exited with code {proc.returncode}: {error_msg}"
        )

    return output_path
