"""Main CLI entry point."""

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version

from . import commands


def _version() -> str:
    try:
        return version("flatdir")
    except PackageNotFoundError:
        return "unknown"


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="flatdir",
        description="Browse and manage folders on a flat object store",
    )
    parser.add_argument("--version", action="version", version=_version())

    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    commands.add_parser(subparsers)

    args = parser.parse_args()
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
