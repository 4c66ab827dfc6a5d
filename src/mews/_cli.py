"""Mews CLI — mews build.

Entry point for the ``mews`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the mews CLI."""
    parser = argparse.ArgumentParser(
        prog="mews",
        description="Static site builder with a plugin event pipeline.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build_parser = subparsers.add_parser(
        "build",
        help="Render every collection and write the site",
    )
    build_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    build_parser.add_argument("--output", default=None, help="Output directory")
    build_parser.add_argument(
        "--quiet", action="store_true", help="Do not print per-collection timings",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from mews import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from mews._errors import MewsError
    from mews.app import build

    if args.command == "build":
        overrides: dict[str, object] = {"output": args.output}
        if args.quiet:
            overrides["report_timings"] = False
        try:
            build(root=args.root, **overrides)
        except MewsError as exc:
            print(f"  error: {exc}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
