"""Subcommand dispatcher for choreosync.

Usage:
    choreosync query    manifest.yaml --time 12.5
    choreosync sample   manifest.yaml --fps 24 --output frames.json
    choreosync play     manifest.yaml --from 10 --speed 2
    choreosync edit     manifest.yaml hold --slot 1 --time 10 --x 0.4 --y 0.6
    choreosync export   manifest.yaml --output edit-state.json
"""

import argparse
import logging
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="choreosync",
        description="Layer resolution, stage positions and playback for group choreography.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("query", help="Resolve every performer at one time")
    subparsers.add_parser("sample", help="Sample the timeline on a frame grid to JSON")
    subparsers.add_parser("play", help="Drive the playback clock and print frames")
    subparsers.add_parser("edit", help="Apply an editing command to a manifest")
    subparsers.add_parser("export", help="Write the persistence edit-state JSON")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if parsed.command == "query":
        from .query_cli import main as query_main
        query_main(remaining)
    elif parsed.command == "sample":
        from .sample_cli import main as sample_main
        sample_main(remaining)
    elif parsed.command == "play":
        from .play_cli import main as play_main
        play_main(remaining)
    elif parsed.command == "edit":
        from .edit_cli import main as edit_main
        edit_main(remaining)
    elif parsed.command == "export":
        from .export_cli import main as export_main
        export_main(remaining)


if __name__ == "__main__":
    main()
