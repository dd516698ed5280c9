from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from chasecam.camera.tuning import load_tuning_file, preset_names, tuning_file_from_env, tuning_from_preset
from chasecam.harness import DriveHarness, DriveScript, format_sample


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="chasecam", description="Chase camera scripted drive harness")
    parser.add_argument("--preset", default="default", choices=preset_names(), help="Camera tuning preset.")
    parser.add_argument(
        "--tuning-file",
        default=None,
        help="JSON tuning file (overrides --preset). Falls back to $CHASECAM_TUNING_FILE.",
    )
    parser.add_argument("--ticks", type=int, default=600)
    parser.add_argument("--tick-rate", type=int, default=60)
    parser.add_argument("--speed", type=float, default=800.0, help="Car speed in units/s.")
    parser.add_argument("--heading", type=float, default=0.0)
    parser.add_argument("--reverse-at", type=int, default=None, help="Tick at which the car starts reversing.")
    parser.add_argument("--look-at", type=int, default=None, help="Tick at which a look burst is injected.")
    parser.add_argument("--look-yaw", type=float, default=10.0)
    parser.add_argument("--look-pitch", type=float, default=5.0)
    parser.add_argument("--wall", action="store_true", help="Put a wall right behind the start position.")
    parser.add_argument("--every", type=int, default=30, help="Print every Nth tick.")
    parser.add_argument("--json", default=None, help="Write samples + trace hash to this JSON path.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log camera mode transitions.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    tuning_path = Path(args.tuning_file) if args.tuning_file else tuning_file_from_env()
    try:
        tuning = load_tuning_file(tuning_path) if tuning_path is not None else tuning_from_preset(args.preset)
    except (OSError, ValueError) as e:
        print(f"chasecam: {e}", file=sys.stderr)
        return 2

    script = DriveScript(
        ticks=args.ticks,
        tick_rate_hz=args.tick_rate,
        speed=args.speed,
        heading=args.heading,
        reverse_at=args.reverse_at,
        look_at=args.look_at,
        look_yaw=args.look_yaw,
        look_pitch=args.look_pitch,
        wall=bool(args.wall),
    )
    result = DriveHarness(script=script, tuning=tuning).run(every=args.every)
    for sample in result.samples:
        print(format_sample(sample))
    print(f"trace={result.trace_hash} orbit_ticks={result.orbit_ticks} blocked_ticks={result.blocked_ticks}")
    if args.json:
        result.dump_json(out_path=Path(args.json))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
