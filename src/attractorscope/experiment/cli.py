"""
CLI entry point for the cinematic attractor renderer.

Usage:
    attractorscope [options] | ffmpeg -f rawvideo -pixel_format rgb24 \
        -video_size 1920x1080 -framerate 60 -i - out.mp4
    attractorscope -o out.mp4 [options]
    python -m attractorscope [options]
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from attractorscope.core.fields import AttractorType, ParameterSet
from attractorscope.experiment.attractor import AttractorConfig, AttractorRenderer
from attractorscope.experiment.config import load_framing_config
from attractorscope.experiment.encoder import PRESETS, encode_video, ffmpeg_available
from attractorscope.io.chapters import ChapterLog
from attractorscope.io.emitter import FrameEmitter, save_snapshot

PROGRESS_EVERY = 60


def _progress_printer(renderer: AttractorRenderer):
    """Build a progress callback that prints a status line to stderr."""
    end = "\r" if sys.stderr.isatty() else "\n"

    def callback(current: int, total: int):
        if (current - 1) % PROGRESS_EVERY == 0 or current >= total:
            sys.stderr.write(renderer.progress_line() + end)
            sys.stderr.flush()
        if current >= total and end == "\r":
            sys.stderr.write("\n")

    return callback


def _announce(frame: int, kind: AttractorType, params: ParameterSet):
    print(f"\nFrame {frame}: switching to {kind.label}", file=sys.stderr)


def _silence_stdout():
    """Point stdout at /dev/null so interpreter shutdown does not re-raise EPIPE."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attractorscope",
        description="Cinematic strange attractor renderer (raw RGB24 frames on stdout)",
    )

    # Timeline
    parser.add_argument("-n", "--fragments", type=int, default=20,
                        help="Number of fragments (default: 20)")
    parser.add_argument("-f", "--frames", type=int, default=300,
                        help="Frames per fragment (default: 300)")
    parser.add_argument(
        "-s", "--start-type", type=int, default=0,
        help="Starting attractor: 0=Aizawa 1=Thomas 2=Lorenz 3=Halvorsen 4=Chen",
    )

    # Simulation
    parser.add_argument("-p", "--particles", type=int, default=2_000_000,
                        help="Number of particles (default: 2000000)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Threads for the parallel particle kernels (default: all cores)",
    )

    # Resolution
    parser.add_argument("--width", type=int, default=1920, help="Frame width")
    parser.add_argument("--height", type=int, default=1080, help="Frame height")
    parser.add_argument("--fps", type=int, default=60,
                        help="Frame rate for chapter timestamps and encoding")

    # Config & side outputs
    parser.add_argument("-c", "--config", type=Path, default=None,
                        help="Framing config file (key = value lines)")
    parser.add_argument("--chapters", type=Path, default=Path("chapters.txt"),
                        help="Chapter log path (default: chapters.txt)")
    parser.add_argument("--no-chapters", action="store_true", help="Disable the chapter log")
    parser.add_argument("--snapshot", type=Path, default=None,
                        help="Save the final frame as an image (e.g. last.png)")

    # Encoding
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Encode to this MP4 via ffmpeg instead of writing to stdout")
    parser.add_argument("--crf", type=int, default=18, help="x264 CRF (default: 18)")
    parser.add_argument("--preset", type=str, default="fast", choices=PRESETS,
                        help="x264 preset (default: fast)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    if args.output is None and sys.stdout.isatty():
        print("Error: refusing to write raw video to a terminal; pipe stdout or use -o",
              file=sys.stderr)
        sys.exit(1)
    if args.output is not None and not ffmpeg_available():
        print("Error: ffmpeg not found. Please install ffmpeg.", file=sys.stderr)
        sys.exit(1)

    framing = load_framing_config(args.config)
    start_type = AttractorType(args.start_type % len(AttractorType))

    try:
        config = AttractorConfig(
            width=args.width,
            height=args.height,
            fps=args.fps,
            num_particles=args.particles,
            fragments=args.fragments,
            frames_per_fragment=args.frames,
            start_type=start_type,
            workers=args.workers,
            framing=framing,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        renderer = AttractorRenderer(config, seed=args.seed)
    except MemoryError:
        print(
            f"Error: could not allocate {config.num_particles} particles at "
            f"{config.width}x{config.height}",
            file=sys.stderr,
        )
        sys.exit(1)

    total_frames = config.total_frames
    print(
        f"Rendering {total_frames} frames ({config.fragments} x {config.frames_per_fragment}) "
        f"at {config.width}x{config.height}, {config.num_particles} particles, "
        f"starting with {start_type.label}",
        file=sys.stderr,
    )

    chapters = None
    if not args.no_chapters:
        chapters = ChapterLog(args.chapters, fps=config.fps)
        chapters.record(0, start_type, renderer.scheduler.target)
        renderer.add_transition_listener(chapters.record)
    renderer.add_transition_listener(_announce)

    last_frame = None

    def frames():
        nonlocal last_frame
        for frame in renderer.render_frames(
            total_frames, progress_callback=_progress_printer(renderer)
        ):
            last_frame = frame
            yield frame

    try:
        if args.output is not None:
            encode_video(
                frames(),
                output_path=args.output,
                width=config.width,
                height=config.height,
                fps=config.fps,
                crf=args.crf,
                preset=args.preset,
            )
            print(f"\nOutput: {args.output}", file=sys.stderr)
        else:
            FrameEmitter(config.width, config.height).emit_all(frames())
    except BrokenPipeError:
        _silence_stdout()
        print("\nDownstream closed the pipe; stopping", file=sys.stderr)
    finally:
        if chapters is not None:
            chapters.close()

    if args.snapshot is not None and last_frame is not None:
        save_snapshot(last_frame, args.snapshot)
        print(f"Snapshot: {args.snapshot}", file=sys.stderr)


if __name__ == "__main__":
    main()
