"""
CLI entry point for Tilebloom.

Usage:
    tilebloom play <audio_file> [options]
    tilebloom render <audio_file> [-o out.mp4] [options]
    tilebloom still [--seed N] [-o out.png] [options]
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from tilebloom.config import VARIANTS, MosaicConfig, load_config
from tilebloom.errors import ConfigError, EncodeError, PlaybackError
from tilebloom.pipeline import SpectrumPipeline


def _progress_bar(current: int, total: int, width: int = 35):
    """Print a progress bar to stdout."""
    pct = current / max(total, 1) * 100
    filled = int(width * current / max(total, 1))
    bar = "#" * filled + "-" * (width - filled)
    if sys.stdout.isatty():
        sys.stdout.write(f"\r[{bar}] {pct:5.1f}%  frame {current}/{total}")
        sys.stdout.flush()
        if current >= total:
            sys.stdout.write("\n")
    else:
        if current % max(1, total // 20) == 0 or current >= total:
            print(f"{pct:5.1f}%  frame {current}/{total}", flush=True)


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _add_common(parser: argparse.ArgumentParser):
    parser.add_argument("--width", type=int, default=None, help="Viewport width")
    parser.add_argument("--height", type=int, default=None, help="Viewport height")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second")
    parser.add_argument("--seed", type=int, default=None, help="Pattern seed (default: random)")
    parser.add_argument(
        "--variant", type=str, default=None, choices=list(VARIANTS),
        help="hybrid: bloom then beat-driven swaps; simple: bloom with onset swaps",
    )
    parser.add_argument("--bg-color", type=str, default=None, help="Background color")
    parser.add_argument("--cream-color", type=str, default=None, help="Base light ink")
    parser.add_argument("--haldi-color", type=str, default=None, help="Accent ink")
    parser.add_argument("--black-color", type=str, default=None, help="Stitch-line ink")
    parser.add_argument(
        "--config", type=Path, default=None,
        help="JSON config file; command-line options override it",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _add_audio(parser: argparse.ArgumentParser):
    parser.add_argument("audio", type=Path, help="Input audio file (wav, mp3, flac, ogg)")
    parser.add_argument("--no-cache", action="store_true", help="Force re-analysis of audio")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the spectrum cache first")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilebloom",
        description="Audio-reactive symmetric tile mosaics",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Interactive window")
    _add_audio(play)
    _add_common(play)

    render = sub.add_parser("render", help="Render an MP4 video")
    _add_audio(render)
    _add_common(render)
    render.add_argument("-o", "--output", type=Path, default=None,
                        help="Output MP4 path (default: <audio>_tilebloom.mp4)")
    render.add_argument("-q", "--quality", type=str, default="medium",
                        choices=["high", "medium", "fast"], help="Encoding quality")
    render.add_argument("--max-duration", type=float, default=None, help="Limit output to N seconds")

    still = sub.add_parser("still", help="Render one pattern to an image")
    _add_common(still)
    still.add_argument("-o", "--output", type=Path, default=Path("tilebloom.png"),
                       help="Output image path (default: tilebloom.png)")

    return parser


def resolve_config(args: argparse.Namespace) -> MosaicConfig:
    """Config file (if any) with command-line overrides applied."""
    base = load_config(args.config) if args.config else MosaicConfig()
    return base.with_overrides(
        width=args.width,
        height=args.height,
        fps=args.fps,
        seed=args.seed,
        variant=args.variant,
        bg_color=args.bg_color,
        cream_color=args.cream_color,
        haldi_color=args.haldi_color,
        black_color=args.black_color,
    )


def _analyze(args, config: MosaicConfig):
    pipeline = SpectrumPipeline(frame_rate=config.fps)
    if args.clear_cache:
        print("Clearing spectrum cache...")
        pipeline.clear_cache()

    print(f"Analyzing audio: {args.audio}")
    t0 = time.time()
    analysis = pipeline.process(args.audio, use_cache=not args.no_cache)
    print(f"  Duration: {analysis.duration:.1f}s")
    print(f"  Spectra: {analysis.n_frames} @ {analysis.frame_rate:.1f}/s")
    print(f"  Analysis took {time.time() - t0:.1f}s")
    return analysis


def _cmd_play(args, config: MosaicConfig):
    from tilebloom.render.player import run_player

    analysis = _analyze(args, config)
    print("\nSpace/click: play/pause   N: new pattern   Esc/Q: quit")
    run_player(config, args.audio, analysis)


def _cmd_render(args, config: MosaicConfig):
    from tilebloom.render.encoder import encode_video
    from tilebloom.render.offline import render_frames

    output = args.output or args.audio.with_name(f"{args.audio.stem}_tilebloom.mp4")
    analysis = _analyze(args, config)

    duration = analysis.duration
    if args.max_duration is not None:
        duration = min(duration, args.max_duration)
    total_frames = int(duration * config.fps)

    print(f"\nRendering {total_frames} frames at {config.width}x{config.height} @ {config.fps}fps")
    t1 = time.time()
    frames = render_frames(config, analysis, max_duration=args.max_duration,
                           progress_callback=_progress_bar)
    encode_video(
        frames=frames,
        audio_path=args.audio,
        output_path=output,
        width=config.width,
        height=config.height,
        fps=config.fps,
        quality=args.quality,
        duration=duration,
    )

    elapsed = time.time() - t1
    file_size_mb = output.stat().st_size / 1024 / 1024
    print(f"\nDone! {file_size_mb:.1f} MB")
    print(f"  Render+encode took {elapsed:.1f}s ({total_frames / max(elapsed, 0.01):.1f} fps)")
    print(f"  Output: {output}")


def _cmd_still(args, config: MosaicConfig):
    from tilebloom.render.offline import render_still

    image = render_still(config)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    image.save(args.output)
    print(f"Saved {args.output}")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if getattr(args, "audio", None) is not None and not args.audio.exists():
        print(f"Error: Audio file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)
    if args.config is not None and not args.config.exists():
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    try:
        config = resolve_config(args)
        if args.command == "play":
            _cmd_play(args, config)
        elif args.command == "render":
            _cmd_render(args, config)
        else:
            _cmd_still(args, config)
    except (ConfigError, PlaybackError, EncodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
