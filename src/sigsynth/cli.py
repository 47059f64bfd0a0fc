"""Command line entry point for the synthesiser."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_CONFIG_PATH


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline signal-graph synthesiser")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to configuration file")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help=(
            "Path to write rendered audio. Paths ending in .wav are written as"
            " 16-bit WAV; other suffixes receive raw float32 frames"
            " (little-endian). A .json metadata file is written alongside."
        ),
    )
    parser.add_argument(
        "--play",
        action="store_true",
        help="Play the rendered buffer through the default output device",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print the graph summary without rendering",
    )
    parser.add_argument("--duration", type=float, help="Override the render duration in seconds")
    parser.add_argument("--bpm", type=float, help="Override the melody tempo")
    parser.add_argument("--volume", type=float, help="Override the master volume")
    parser.add_argument("--pan", type=float, help="Override the stereo position (-1 left, 1 right)")
    parser.add_argument("--sample-rate", type=int, help="Override the render sample rate")
    parser.add_argument(
        "--sample-file",
        type=str,
        help="PCM WAV file for the percussion voice (empty string disables it)",
    )
    parser.add_argument(
        "--log-render",
        action="store_true",
        help="Append render diagnostics to a log file",
    )
    parser.add_argument("--log-path", type=Path, help="Render log location (default logs/render.log)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    from .app import run as run_app

    return run_app(
        config_path=str(args.config),
        output=str(args.output) if args.output else None,
        play_audio=args.play,
        summary_only=args.summary,
        duration=args.duration,
        bpm=args.bpm,
        volume=args.volume,
        pan=args.pan,
        sample_rate=args.sample_rate,
        sample_file=args.sample_file,
        log_render=args.log_render,
        log_path=str(args.log_path) if args.log_path else None,
    )


__all__ = ["main", "build_parser"]
