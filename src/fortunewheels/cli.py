"""
CLI entry point.

Usage:
    fortunewheels [audio_file] [options]
    fortunewheels <audio_file> --render out.mp4 [options]
    python -m fortunewheels ...
"""

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from fortunewheels.core.interaction import RESTORE_MATCH_MODES
from fortunewheels.core.spectrum import SpectrumAnalyzer
from fortunewheels.io.encoder import QUALITY_PRESETS
from fortunewheels.scene import SceneConfig, load_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fortunewheels",
        description="Audio-reactive wheel composition with reversible dispersal",
    )

    parser.add_argument(
        "audio",
        type=Path,
        nargs="?",
        default=None,
        help="Audio file to play and react to (wav, mp3, flac, ogg)",
    )

    # Canvas
    parser.add_argument("--width", type=int, default=1280, help="Canvas width (default: 1280)")
    parser.add_argument("--height", type=int, default=720, help="Canvas height (default: 720)")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (default: 60)")

    # Layout
    parser.add_argument("-w", "--wheels", type=int, default=None, help="Target wheel count (default: 25)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the layout")
    parser.add_argument(
        "--restore-match", type=str, default=None, choices=RESTORE_MATCH_MODES,
        help="How restore finds a wheel's particles (default: proximity)",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="JSON config file with layout/particles/interaction/audio/render sections",
    )

    # Analysis cache
    parser.add_argument("--no-cache", action="store_true", help="Force re-analysis of audio")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the analysis cache before running")

    # Offline export
    parser.add_argument("--render", type=Path, default=None, help="Write an MP4 instead of opening a window")
    parser.add_argument("--max-duration", type=float, default=None, help="Limit export to N seconds")
    parser.add_argument(
        "-q", "--quality", type=str, default="medium", choices=sorted(QUALITY_PRESETS),
        help="Encoding quality (default: medium)",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _resolve_config(args: argparse.Namespace) -> SceneConfig:
    config = load_config(args.config) if args.config else SceneConfig()
    # replace() re-runs validation
    if args.wheels is not None:
        config.layout = replace(config.layout, target_count=args.wheels)
    if args.fps is not None:
        config.audio = replace(config.audio, fps=args.fps)
    if args.restore_match is not None:
        config.interaction = replace(config.interaction, restore_match=args.restore_match)
    config.validate()
    return config


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.audio is not None and not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)
    if args.config is not None and not args.config.exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    if args.render is not None and args.audio is None:
        print("Error: --render needs an audio file", file=sys.stderr)
        sys.exit(1)
    if args.width <= 0 or args.height <= 0:
        print(f"Error: Canvas size must be positive, got {args.width}x{args.height}", file=sys.stderr)
        sys.exit(1)

    try:
        config = _resolve_config(args)
    except ValueError as e:
        print(f"Error: Invalid config: {e}", file=sys.stderr)
        sys.exit(1)

    analyzer = SpectrumAnalyzer(config.audio)
    if args.clear_cache:
        print("Clearing analysis cache...")
        analyzer.clear_cache()

    if args.render is not None:
        from fortunewheels.render_video import render_video

        print(f"Rendering {args.audio} at {args.width}x{args.height} @ {config.audio.fps}fps")
        t0 = time.time()
        output = render_video(
            audio_path=args.audio,
            output_path=args.render,
            width=args.width,
            height=args.height,
            config=config,
            seed=args.seed,
            max_duration=args.max_duration,
            quality=args.quality,
            use_cache=not args.no_cache,
        )
        file_size_mb = output.stat().st_size / 1024 / 1024
        print(f"\nDone! {file_size_mb:.1f} MB in {time.time() - t0:.1f}s")
        print(f"  Output: {output}")
        return

    from fortunewheels.app import LiveApp

    spectra = None
    if args.audio is not None:
        print(f"Analyzing audio: {args.audio}")
        t0 = time.time()
        spectra = analyzer.analyze_file(args.audio, use_cache=not args.no_cache)
        print(f"  Duration: {spectra.duration:.1f}s, {spectra.n_frames} frames")
        print(f"  Analysis took {time.time() - t0:.1f}s")

    app = LiveApp(
        width=args.width,
        height=args.height,
        config=config,
        audio_path=args.audio,
        spectra=spectra,
        seed=args.seed,
    )
    app.run()


if __name__ == "__main__":
    main()
