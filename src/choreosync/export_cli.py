"""CLI for export — write a manifest as persistence edit-state JSON.

Usage:
    choreosync export manifest.yaml --output edit-state.json
    choreosync export manifest.yaml --output edit-state.json --check-media
"""

import argparse
import json
from pathlib import Path

from .manifest import load_manifest, validate_media_paths
from .wire import dump_edit_state


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Export a project manifest as edit-state JSON.",
    )
    parser.add_argument("manifest", help="Path to project YAML manifest")
    parser.add_argument(
        "--output", required=True,
        help="Output JSON path",
    )
    parser.add_argument(
        "--check-media", action="store_true",
        help="Fail if the music file or any layer source is missing",
    )
    parsed = parser.parse_args(args)

    project, _ = load_manifest(parsed.manifest)
    if parsed.check_media:
        validate_media_paths(project)

    payload = dump_edit_state(project)
    Path(parsed.output).parent.mkdir(parents=True, exist_ok=True)
    with open(parsed.output, "w") as f:
        json.dump(payload, f, indent=2)

    n_layers = sum(len(t["layers"]) for t in payload["tracks"])
    n_keyframes = sum(len(t["keyframes"]) for t in payload["tracks"])
    print(f"Exported {n_layers} layers, {n_keyframes} keyframes")
    print(f"Output: {parsed.output}")


if __name__ == "__main__":
    main()
