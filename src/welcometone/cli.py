#!/usr/bin/env python3
"""welcometone - Render the onboarding welcome tone from the command line."""

import argparse
import dataclasses
import logging
import math
import sys
from pathlib import Path

from chordtone import RenderError, frequency_to_note, parse_chord, render, total_duration

from .config import get_config, get_output_filename, get_progression, get_render_config
from .paths import config_file, default_tone_path, ensure_dir, tones_dir
from .ramp import TARGET_VOLUME, fade_in_steps, fade_out_steps
from .tone import clear_cache, get_welcome_tone


def _log(args: argparse.Namespace, message: str) -> None:
    if not getattr(args, "quiet", False):
        print(message, file=sys.stderr)


def cmd_render(args: argparse.Namespace) -> int:
    """Handle the render command."""
    try:
        config = get_config()
        render_config = get_render_config(config)
        overrides = {
            name: getattr(args, name)
            for name in ("duration", "sample_rate", "channels", "bit_depth", "fade")
            if getattr(args, name) is not None
        }
        render_config = dataclasses.replace(render_config, **overrides)

        if args.chord:
            progression = tuple(parse_chord(c) for c in args.chord)
        else:
            progression = get_progression(config)

        if args.output:
            output = Path(args.output)
        else:
            output = default_tone_path(get_output_filename(config))
            ensure_dir(output.parent)

        _log(args, f"Rendering {render_config.duration}s, {len(progression)} chords...")
        path = render(output, render_config, progression)
    except (RenderError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(path)
    return 0


def cmd_prepare(args: argparse.Namespace) -> int:
    """Handle the prepare command."""
    try:
        path = get_welcome_tone()
    except (RenderError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(path)
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Handle the info command."""
    try:
        config = get_config()
        render_config = get_render_config(config)
        progression = get_progression(config)
        render_config.validate()
    except (RenderError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Config file: {config_file()}")
    print(f"Tone cache: {tones_dir()}")
    print(f"Duration: {render_config.duration}s (fade {render_config.fade}s)")
    print(f"Format: {render_config.sample_rate} Hz, {render_config.channels} ch, "
          f"{render_config.bit_depth}-bit PCM")
    print(f"Frames: {render_config.frame_count}")
    print(f"Progression ({total_duration(progression)}s per loop):")
    for chord in progression:
        notes = " ".join(frequency_to_note(f) for f in chord.frequencies)
        freqs = ", ".join(f"{f:g}" for f in chord.frequencies)
        print(f"  {notes:<14} [{freqs}] x {chord.duration}s")
    return 0


def cmd_ramp(args: argparse.Namespace) -> int:
    """Handle the ramp command."""
    if not (math.isfinite(args.target) and args.target > 0):
        print(f"Error: --target must be a positive number, got {args.target}", file=sys.stderr)
        return 1
    if args.direction == "in":
        steps = fade_in_steps(target=args.target)
    else:
        steps = fade_out_steps(start=args.target)
    for at, volume in steps:
        print(f"{at:.2f}\t{volume:.2f}")
    return 0


def cmd_clear_cache(args: argparse.Namespace) -> int:
    """Handle the clear-cache command."""
    removed = clear_cache()
    _log(args, f"Removed {removed} cached tone(s)")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="welcometone",
        description="Render the ambient chord-progression welcome tone",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # render command
    render_parser = subparsers.add_parser("render", help="Render the tone to a WAV file")
    render_parser.add_argument(
        "-o", "--output", help="Output WAV path (default: data dir)"
    )
    render_parser.add_argument("--duration", type=float, help="Total length in seconds")
    render_parser.add_argument("--sample-rate", type=int, help="Sample rate in Hz")
    render_parser.add_argument("--channels", type=int, help="Number of channels")
    render_parser.add_argument(
        "--bit-depth", type=int, choices=[8, 16, 32], help="PCM bit depth"
    )
    render_parser.add_argument("--fade", type=float, help="Fade in/out length in seconds")
    render_parser.add_argument(
        "--chord",
        action="append",
        metavar="NOTES[:SECONDS]",
        help='Chord such as "A4 C#5 E5:1.0" (repeat for a progression)',
    )
    render_parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress progress messages"
    )
    render_parser.set_defaults(func=cmd_render)

    # prepare command
    prepare_parser = subparsers.add_parser(
        "prepare", help="Render or reuse the cached welcome tone and print its path"
    )
    prepare_parser.set_defaults(func=cmd_prepare)

    # info command
    info_parser = subparsers.add_parser("info", help="Show render settings and progression")
    info_parser.set_defaults(func=cmd_info)

    # ramp command
    ramp_parser = subparsers.add_parser("ramp", help="Print the playback volume fade schedule")
    ramp_parser.add_argument("direction", choices=["in", "out"])
    ramp_parser.add_argument(
        "--target", type=float, default=TARGET_VOLUME,
        help=f"Full playback volume (default: {TARGET_VOLUME})",
    )
    ramp_parser.set_defaults(func=cmd_ramp)

    # clear-cache command
    clear_parser = subparsers.add_parser("clear-cache", help="Delete cached tones")
    clear_parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress progress messages"
    )
    clear_parser.set_defaults(func=cmd_clear_cache)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
