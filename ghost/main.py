#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Main entry point for the ghost CLI."""

import argparse
import sys
from typing import List, Optional

from .debug_logger import DebugLogger, is_debug_enabled
from .tools import git_ops
from .tools.errors import AggregatedError, GhostError
from .versioning import build_version_output


def _create_bundle(args: argparse.Namespace) -> None:
    path = git_ops.create_diff_bundle(args.dir, args.output, args.from_committish, args.to_committish)
    print(f"Wrote bundle {path}")


def _apply_bundle(args: argparse.Namespace) -> None:
    git_ops.apply_diff_bundle(args.dir, args.bundle)
    print(f"Applied bundle {args.bundle}")


def _create_patch(args: argparse.Namespace) -> None:
    untracked = git_ops.create_working_snapshot(
        args.dir,
        args.output,
        args.committish,
        include_untracked=not args.no_untracked,
    )
    print(f"Wrote patch {args.output} ({len(untracked)} untracked file(s))")


def _append_untracked(args: argparse.Namespace) -> None:
    git_ops.append_non_indexed_diffs(args.dir, args.patch, args.paths)
    print(f"Appended {len(args.paths)} file(s) to {args.patch}")


def _apply_patch(args: argparse.Namespace) -> None:
    git_ops.apply_diff_patch(args.dir, args.patch)
    print(f"Applied patch {args.patch}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghost",
        description="ghost - capture and replay working tree state as portable artifacts",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable detailed debug logging to file"
    )
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Show ghost version information and exit",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    bundle = subparsers.add_parser(
        "create-bundle", help="Write the commits FROM..TO as a patch series"
    )
    bundle.add_argument("dir", help="Working tree to read history from")
    bundle.add_argument("output", help="Bundle file to create")
    bundle.add_argument("from_committish", metavar="FROM")
    bundle.add_argument("to_committish", metavar="TO")
    bundle.set_defaults(handler=_create_bundle)

    apply_bundle = subparsers.add_parser(
        "apply-bundle", help="Replay a bundle, rolling back on failure"
    )
    apply_bundle.add_argument("dir", help="Working tree to apply to")
    apply_bundle.add_argument("bundle", help="Bundle file created by create-bundle")
    apply_bundle.set_defaults(handler=_apply_bundle)

    patch = subparsers.add_parser(
        "create-patch", help="Write uncommitted changes relative to a revision"
    )
    patch.add_argument("dir", help="Working tree to read changes from")
    patch.add_argument("output", help="Patch file to create")
    patch.add_argument("committish", metavar="BASE")
    patch.add_argument(
        "--no-untracked",
        action="store_true",
        help="Do not append diffs for untracked files",
    )
    patch.set_defaults(handler=_create_patch)

    append = subparsers.add_parser(
        "append-untracked", help="Append creation diffs for files outside version control"
    )
    append.add_argument("dir", help="Working tree the paths are relative to")
    append.add_argument("patch", help="Existing patch file")
    append.add_argument("paths", nargs="+", metavar="PATH")
    append.set_defaults(handler=_append_untracked)

    apply_patch = subparsers.add_parser(
        "apply-patch", help="Apply a patch created by create-patch"
    )
    apply_patch.add_argument("dir", help="Working tree to apply to")
    apply_patch.add_argument("patch", help="Patch file created by create-patch")
    apply_patch.set_defaults(handler=_apply_patch)

    return parser


def _report(error: GhostError) -> None:
    causes = list(error) if isinstance(error, AggregatedError) else [error]
    for cause in causes:
        print(f"error: {cause}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the ghost CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(build_version_output())
        return 0

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    debug_logger = DebugLogger.initialize(enabled=args.debug)
    if is_debug_enabled():
        print(f"Debug logging enabled: {debug_logger.log_file_path}")

    try:
        args.handler(args)
    except GhostError as e:
        debug_logger.log_error("cli", e, {"command": args.command})
        _report(e)
        return 1
    finally:
        debug_logger.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
