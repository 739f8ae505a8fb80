"""Tests for the command-line entry point."""

import sys

import pytest
from PIL import Image

from attractorscope.experiment.cli import build_parser, main


def _args(tmp_path, *extra):
    return [
        "-n", "1", "-f", "3", "-p", "500",
        "--width", "32", "--height", "24", "--fps", "30",
        "--seed", "7", "--workers", "1",
        "--chapters", str(tmp_path / "chapters.txt"),
        *extra,
    ]


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.fragments == 20
        assert args.frames == 300
        assert args.start_type == 0
        assert args.particles == 2_000_000
        assert (args.width, args.height, args.fps) == (1920, 1080, 60)
        assert args.output is None
        assert args.preset == "fast"

    def test_rejects_unknown_preset(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--preset", "warp9"])


class TestMain:
    def test_streams_raw_frames(self, tmp_path, capsysbinary):
        main(_args(tmp_path))
        out = capsysbinary.readouterr().out
        assert len(out) == 32 * 24 * 3 * 3

    def test_writes_chapters_and_snapshot(self, tmp_path, capsysbinary):
        main(_args(tmp_path, "-s", "2", "--snapshot", str(tmp_path / "last.png")))
        capsysbinary.readouterr()
        lines = (tmp_path / "chapters.txt").read_text().splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("00:00 Lorenz sigma=")
        with Image.open(tmp_path / "last.png") as img:
            assert img.size == (32, 24)

    def test_no_chapters(self, tmp_path, capsysbinary):
        main(_args(tmp_path, "--no-chapters"))
        capsysbinary.readouterr()
        assert not (tmp_path / "chapters.txt").exists()

    def test_invalid_config_exits_2(self, tmp_path, capsysbinary):
        with pytest.raises(SystemExit) as exc:
            main(_args(tmp_path, "-p", "0"))
        assert exc.value.code == 2
        assert capsysbinary.readouterr().out == b""

    def test_refuses_terminal_stdout(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setattr(sys.stdout, "isatty", lambda: True)
        with pytest.raises(SystemExit) as exc:
            main(_args(tmp_path))
        assert exc.value.code == 1
        assert "terminal" in capsys.readouterr().err
