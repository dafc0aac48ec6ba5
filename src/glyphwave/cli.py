"""
Terminal preview for the wave field.

Usage:
    glyphwave-preview [options]
    python -m glyphwave [options]
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from glyphwave.config import TrailConfig, WaveConfig, load_config
from glyphwave.core import strategies
from glyphwave.core.motion import CircularMotion, NoiseMotion
from glyphwave.pipeline import FieldAnimator

WAVE_CHOICES = ["default"] + [t.value for t in strategies.WaveType] + ["noise"]


def _progress_reporter(cols: int, rows: int, trail_slots: int = 0, width: int = 24):
    """
    Build a progress callback that reports on stderr.

    A terminal gets one redrawn status line; pipes and logs get a line
    every tenth of the run.
    """
    label = f"{cols}x{rows} grid"
    if trail_slots:
        label += f", {trail_slots}-slot trail"

    def report(current: int, total: int):
        done = current / max(total, 1)
        if sys.stderr.isatty():
            ticks = int(width * done)
            sys.stderr.write(f"\r{label} |{'=' * ticks}{' ' * (width - ticks)}| frame {current}/{total}")
            if current >= total:
                sys.stderr.write("\n")
            sys.stderr.flush()
        elif current >= total or current % max(1, total // 10) == 0:
            print(f"{label}: frame {current}/{total} ({done:.0%})", file=sys.stderr, flush=True)

    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glyphwave-preview",
        description="Animated wave-driven symbol grid, previewed in the terminal",
    )

    parser.add_argument("-c", "--config", type=Path, default=None, help="JSON preset file")
    parser.add_argument("--cols", type=int, default=None, help="Grid columns (overrides preset)")
    parser.add_argument("--rows", type=int, default=None, help="Grid rows (overrides preset)")
    parser.add_argument("-n", "--frames", type=int, default=90, help="Number of frames (default: 90)")
    parser.add_argument("-f", "--fps", type=float, default=None, help="Playback rate (default: preset fps)")

    # Wave
    parser.add_argument(
        "-w", "--wave", type=str, default="default", choices=WAVE_CHOICES,
        help="Brightness wave strategy (default: built-in tangent wave)",
    )
    parser.add_argument("--speed", type=float, default=None, help="Wave speed (overrides preset)")
    parser.add_argument("--angle", type=float, default=None, help="Wave angle in degrees (overrides preset)")

    # Trail
    parser.add_argument("-t", "--trail", type=int, default=None,
                        help="Trail buffer length, 0 disables (default: preset trail section, else off)")
    parser.add_argument("--decay", type=float, default=None, help="Trail fade decay 0-1")
    parser.add_argument(
        "--blend", type=str, default=None, choices=["add", "max", "average"],
        help="Trail blend mode",
    )
    parser.add_argument("--temporal-wave", type=float, default=None, metavar="AMP",
                        help="Per-cell temporal displacement amplitude")

    # Motion
    parser.add_argument("--motion", type=str, default="none", choices=["none", "circular", "noise"],
                        help="Glyph motion inside cells (reported as mean offset)")

    # Input / output
    parser.add_argument("--manifest", type=Path, default=None,
                        help="Audio-feature manifest JSON; its frames drive the animation")
    parser.add_argument("--ramp", type=str, default=" .:-=+*#%@", help="Brightness character ramp")
    parser.add_argument("--no-clear", action="store_true", help="Print frames one after another")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _resolve_configs(args):
    if args.config is not None:
        wave_cfg, trail_cfg = load_config(args.config)
    else:
        wave_cfg, trail_cfg = WaveConfig(), None

    if args.cols is not None:
        wave_cfg.tiles_x = args.cols
    if args.rows is not None:
        wave_cfg.tiles_y = args.rows
    if args.speed is not None:
        wave_cfg.wave_speed = args.speed
    if args.angle is not None:
        wave_cfg.wave_angle = args.angle % 360.0
    wave_cfg.validate()

    # An explicit -t wins over the preset; 0 turns the trail off
    if args.trail is not None:
        if args.trail <= 0:
            trail_cfg = None
        else:
            trail_cfg = trail_cfg or TrailConfig()
            trail_cfg.max_length = args.trail

    if trail_cfg is not None:
        if args.decay is not None:
            trail_cfg.fade_decay = args.decay
        if args.blend is not None:
            trail_cfg.blend_mode = args.blend
        if args.temporal_wave is not None:
            trail_cfg.temporal_wave_amp = args.temporal_wave
        trail_cfg.validate()

    return wave_cfg, trail_cfg


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        wave_cfg, trail_cfg = _resolve_configs(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    strategy = None if args.wave == "default" else strategies.get(args.wave)
    motion = {"circular": CircularMotion(), "noise": NoiseMotion()}.get(args.motion)
    animator = FieldAnimator(wave_cfg, trail_cfg, strategy=strategy, motion=motion)

    fps = args.fps or wave_cfg.animation_fps
    interval = 1.0 / fps if fps > 0 else 0.0
    interactive = sys.stdout.isatty() and not args.no_clear
    trail_slots = trail_cfg.max_length if trail_cfg is not None else 0
    progress = None if interactive else _progress_reporter(animator.cols, animator.rows, trail_slots)

    if args.manifest is not None:
        if not args.manifest.exists():
            print(f"Error: Manifest not found: {args.manifest}", file=sys.stderr)
            sys.exit(1)
        with open(args.manifest) as f:
            manifest = json.load(f)
        frames = animator.render_manifest(manifest, progress_callback=progress)
    else:
        frames = animator.render_frames(args.frames, progress_callback=progress)

    for frame in frames:
        lines = frame.to_symbols(args.ramp)
        if interactive:
            sys.stdout.write("\x1b[H\x1b[2J")
        sys.stdout.write("\n".join(lines) + "\n")
        if frame.offsets is not None:
            mean = abs(frame.offsets).mean()
            sys.stdout.write(f"frame {frame.frame_index}  mean glyph offset {mean:.2f}px\n")
        sys.stdout.flush()
        if interactive and interval:
            time.sleep(interval)


if __name__ == "__main__":
    main()
