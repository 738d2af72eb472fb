"""CLI for timeline sampling — resolve every frame of the timeline to JSON.

Output schema:
  {"fps": 24, "start": 0.0, "end": 180.0,
   "frames": [{"time": 0.0,
               "performers": [{"slot": 1, "layer": "intro",
                               "x": 0.25, "y": 0.5}, ...]}, ...]}

Positions are null for a performer with no Hold keyframe.

Usage:
    choreosync sample manifest.yaml --output frames.json
    choreosync sample manifest.yaml --fps 30 --start 10 --end 20 --output clip.json
"""

import argparse
import json
import math
from pathlib import Path

from .manifest import load_manifest
from .playback import sample_timeline


def _coord(value: float) -> float | None:
    return None if math.isnan(value) else round(float(value), 6)


def build_output(sampled: dict) -> dict:
    """Convert sample_timeline arrays into JSON-ready frames."""
    frames = []
    for i, t in enumerate(sampled["times"]):
        performers = []
        for slot, data in sampled["performers"].items():
            x, y = data["positions"][i]
            performers.append({
                "slot": slot,
                "layer": data["layers"][i],
                "x": _coord(x),
                "y": _coord(y),
            })
        frames.append({"time": round(float(t), 6), "performers": performers})
    return {
        "fps": sampled["fps"],
        "start": sampled["start"],
        "end": sampled["end"],
        "frames": frames,
    }


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Sample active layers and stage positions on a frame grid.",
    )
    parser.add_argument("manifest", help="Path to project YAML manifest")
    parser.add_argument(
        "--output", required=True,
        help="Output JSON path",
    )
    parser.add_argument(
        "--fps", type=float, default=None,
        help="Sampling rate (default: manifest settings.snap_fps)",
    )
    parser.add_argument(
        "--start", type=float, default=0.0,
        help="First sample time in seconds (default: 0)",
    )
    parser.add_argument(
        "--end", type=float, default=None,
        help="Last sample time in seconds (default: timeline duration)",
    )
    parser.add_argument(
        "--ready-only", action="store_true",
        help="Ignore layers whose source is not READY",
    )
    parsed = parser.parse_args(args)

    project, settings = load_manifest(parsed.manifest)
    fps = parsed.fps or settings.snap_fps
    end = parsed.end if parsed.end is not None else project.timeline_duration
    if end < parsed.start:
        parser.error(f"--end ({end}) must be >= --start ({parsed.start})")

    sampled = sample_timeline(
        project, fps, start=parsed.start, end=end, ready_only=parsed.ready_only,
    )
    output = build_output(sampled)

    Path(parsed.output).parent.mkdir(parents=True, exist_ok=True)
    with open(parsed.output, "w") as f:
        json.dump(output, f, indent=2)

    print(f"Sampled {len(output['frames'])} frames at {fps:g} fps "
          f"({parsed.start:.2f}s — {end:.2f}s)")
    print(f"Output: {parsed.output}")


if __name__ == "__main__":
    main()
