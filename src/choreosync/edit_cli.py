"""CLI for editing — apply one editor command and write the manifest.

Usage:
    # Place performer 1 at (0.4, 0.6) from t=10 (auto-inserts a glide cue)
    choreosync edit manifest.yaml hold --slot 1 --time 10 --x 0.4 --y 0.6

    # Append a 12.5s clip to performer 2's timeline
    choreosync edit manifest.yaml layer --slot 2 --duration 12.5 --label verse

    # Overlay a patch clip at t=31.2 on performer 2
    choreosync edit manifest.yaml patch --slot 2 --time 31.2 --duration 4

    # Re-order, move or remove layers / keyframes
    choreosync edit manifest.yaml priority --slot 2 --id <layer-id> --to front
    choreosync edit manifest.yaml move-layer --slot 2 --id <layer-id> --start 8
    choreosync edit manifest.yaml remove-layer --slot 2 --id <layer-id>
    choreosync edit manifest.yaml remove-keyframe --slot 1 --id <keyframe-id>

The manifest is rewritten in place unless --output is given.
"""

import argparse

from .manifest import dump_manifest, load_manifest
from .playback import Session

PRIORITY_MOVES = {
    "front": "bring_to_front",
    "forward": "bring_forward",
    "backward": "send_backward",
    "back": "send_to_back",
}


def _parse_args(args=None):
    parser = argparse.ArgumentParser(
        description="Apply an editing command to a project manifest.",
    )
    parser.add_argument("manifest", help="Path to project YAML manifest")
    parser.add_argument(
        "--output", default=None,
        help="Write the edited manifest here (default: overwrite input)",
    )
    actions = parser.add_subparsers(dest="action", required=True)

    def _action(name, help_text):
        sub = actions.add_parser(name, help=help_text)
        sub.add_argument("--slot", type=int, required=True, choices=[1, 2, 3])
        return sub

    hold = _action("hold", "Commit a stage position")
    hold.add_argument("--time", type=float, required=True)
    hold.add_argument("--x", type=float, required=True)
    hold.add_argument("--y", type=float, required=True)

    layer = _action("layer", "Append a clip")
    layer.add_argument("--duration", type=float, required=True)
    layer.add_argument("--start", type=float, default=None)
    layer.add_argument("--label", default=None)

    patch = _action("patch", "Overlay a patch clip")
    patch.add_argument("--time", type=float, required=True)
    patch.add_argument("--duration", type=float, required=True)
    patch.add_argument("--label", default=None)

    prio = _action("priority", "Change a layer's z-order")
    prio.add_argument("--id", required=True)
    prio.add_argument("--to", required=True, choices=sorted(PRIORITY_MOVES))

    move = _action("move-layer", "Move a clip, keeping its duration")
    move.add_argument("--id", required=True)
    move.add_argument("--start", type=float, required=True)

    remove_layer = _action("remove-layer", "Delete a clip")
    remove_layer.add_argument("--id", required=True)

    remove_kf = _action("remove-keyframe", "Delete a keyframe")
    remove_kf.add_argument("--id", required=True)

    return parser.parse_args(args)


def main(args=None):
    parsed = _parse_args(args)
    project, settings = load_manifest(parsed.manifest)
    session = Session(project, settings)
    slot = parsed.slot

    if parsed.action == "hold":
        session.apply("commit_hold", slot, parsed.time, parsed.x, parsed.y)
        print(f"Hold for slot {slot} at {parsed.time:.2f}s: ({parsed.x:.3f}, {parsed.y:.3f})")
    elif parsed.action == "layer":
        track = session.apply(
            "add_layer", slot, parsed.duration, label=parsed.label, start=parsed.start,
        )
        added = track.layers[-1]
        print(f"Layer {added.id} on slot {slot}: {added.start:.2f}s — {added.end:.2f}s "
              f"(P{added.priority})")
    elif parsed.action == "patch":
        track = session.apply(
            "add_patch", slot, parsed.time, parsed.duration, label=parsed.label,
        )
        added = track.layers[-1]
        print(f"Patch {added.id} on slot {slot}: {added.start:.2f}s — {added.end:.2f}s "
              f"(P{added.priority})")
    elif parsed.action == "priority":
        track = session.apply(PRIORITY_MOVES[parsed.to], slot, parsed.id)
        print(f"Layer {parsed.id} priority is now {track.layer(parsed.id).priority}")
    elif parsed.action == "move-layer":
        track = session.apply(
            "move_layer", slot, parsed.id, parsed.start, snap_fps=settings.snap_fps,
        )
        moved = track.layer(parsed.id)
        print(f"Layer {parsed.id} moved to {moved.start:.2f}s — {moved.end:.2f}s")
    elif parsed.action == "remove-layer":
        session.apply("remove_layer", slot, parsed.id)
        print(f"Removed layer {parsed.id} from slot {slot}")
    elif parsed.action == "remove-keyframe":
        session.apply("remove_keyframe", slot, parsed.id)
        print(f"Removed keyframe {parsed.id} from slot {slot}")

    output = parsed.output or parsed.manifest
    dump_manifest(session.project, settings, output)
    print(f"Timeline: {session.project.timeline_duration:.2f}s")
    print(f"Output: {output}")


if __name__ == "__main__":
    main()
