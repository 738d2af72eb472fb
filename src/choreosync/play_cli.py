"""CLI for playback — drive the clock with fixed ticks until it stops.

The clock advances by step * speed per tick and stops by itself at the
end of the timeline. With --realtime each tick also sleeps for one step,
so output scrolls at playback speed.

Usage:
    choreosync play manifest.yaml
    choreosync play manifest.yaml --from 30 --speed 2 --fps 4
    choreosync play manifest.yaml --realtime --every 12
"""

import argparse
import time

from .manifest import load_manifest
from .playback import Session
from .query_cli import describe_frame


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Play a project through the clock and print resolved frames.",
    )
    parser.add_argument("manifest", help="Path to project YAML manifest")
    parser.add_argument(
        "--from", dest="start", type=float, default=0.0,
        help="Start time in seconds (clamped to the timeline)",
    )
    parser.add_argument(
        "--fps", type=float, default=4.0,
        help="Ticks per second of playback (default: 4)",
    )
    parser.add_argument(
        "--speed", type=float, default=1.0,
        help="Playback speed multiplier (default: 1)",
    )
    parser.add_argument(
        "--every", type=int, default=1,
        help="Print every Nth tick (default: 1)",
    )
    parser.add_argument(
        "--realtime", action="store_true",
        help="Sleep between ticks",
    )
    parser.add_argument(
        "--ready-only", action="store_true",
        help="Ignore layers whose source is not READY",
    )
    parsed = parser.parse_args(args)

    if parsed.fps <= 0:
        parser.error("--fps must be > 0")
    if parsed.speed <= 0:
        parser.error("--speed must be > 0")
    if parsed.every < 1:
        parser.error("--every must be >= 1")

    project, settings = load_manifest(parsed.manifest)
    session = Session(project, settings)
    names = {track.slot: track.name for track in project.tracks}
    step = 1.0 / parsed.fps

    session.clock.seek(parsed.start)
    print(f"Playing '{project.title}' from {session.clock.current_time:.2f}s "
          f"of {session.clock.duration:.2f}s")
    session.clock.play()

    ticks = 0
    print(describe_frame(
        session.clock.current_time, session.frame(parsed.ready_only), names,
    ))
    while session.clock.is_playing:
        if parsed.realtime:
            time.sleep(step)
        session.clock.tick(step * parsed.speed)
        ticks += 1
        if ticks % parsed.every == 0 or not session.clock.is_playing:
            print(describe_frame(
                session.clock.current_time, session.frame(parsed.ready_only), names,
            ))

    print(f"Stopped at {session.clock.current_time:.2f}s after {ticks} ticks")


if __name__ == "__main__":
    main()
