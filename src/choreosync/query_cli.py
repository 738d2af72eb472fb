"""CLI for point queries — who plays what, and where, at one time.

Usage:
    choreosync query manifest.yaml --time 12.5
    choreosync query manifest.yaml --time 12.5 --ready-only
"""

import argparse

from .common import format_time_ms
from .manifest import load_manifest
from .playback import PerformerFrame, resolve_frame


def describe_frame(t: float, frames: list[PerformerFrame], names: dict[int, str]) -> str:
    """Render one resolved frame as text, one line per performer."""
    lines = [f"[{format_time_ms(t)}]"]
    for frame in frames:
        if frame.layer is None:
            layer_text = "no layer"
        else:
            label = frame.layer.label or frame.layer.id
            layer_text = f"{label} (P{frame.layer.priority}) local={frame.local_time:.2f}s"
            if frame.frame_index is not None:
                layer_text += f" frame={frame.frame_index}"
        if frame.position is None:
            pos_text = "pos=-"
        else:
            pos_text = f"pos=({frame.position[0]:.3f}, {frame.position[1]:.3f})"
        lines.append(f"  {names.get(frame.slot, frame.slot)!s:<12} {layer_text:<40} {pos_text}")
    return "\n".join(lines)


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Resolve active layers and stage positions at one time.",
    )
    parser.add_argument("manifest", help="Path to project YAML manifest")
    parser.add_argument(
        "--time", type=float, required=True,
        help="Timeline time in seconds",
    )
    parser.add_argument(
        "--ready-only", action="store_true",
        help="Ignore layers whose source is not READY",
    )
    parsed = parser.parse_args(args)

    project, _ = load_manifest(parsed.manifest)
    names = {track.slot: track.name for track in project.tracks}
    frames = resolve_frame(project, parsed.time, ready_only=parsed.ready_only)
    print(describe_frame(parsed.time, frames, names))


if __name__ == "__main__":
    main()
