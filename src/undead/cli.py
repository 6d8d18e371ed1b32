#!/usr/bin/env python3
"""
undead command line entrypoint

    undead PATH [PATH ...] [-I PATTERN ...] [--config FILE] [-j N] [-v]
    undead --init            write an example undead.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config_loader import load_config, save_example_config
from .dead_files import find_dead_files
from .errors import RootNotFound, UndeadError
from .printer import Printer
from .project_root import find_project_root


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="undead",
        description="Find Python files that nothing imports and that are not entrypoints.",
    )
    parser.add_argument("paths", nargs="*", type=Path, help="paths in which to recursively search for dead files")
    parser.add_argument(
        "-I",
        "--ignore-paths",
        action="append",
        default=[],
        metavar="PATTERN",
        help="path or glob to ignore when searching (repeatable)",
    )
    parser.add_argument("--config", type=Path, default=None, help="config file (default: undead.yaml or [tool.undead])")
    parser.add_argument("-j", "--jobs", type=int, default=None, help="number of worker threads")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    parser.add_argument("--init", action="store_true", help="write an example undead.yaml and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _config_search_dirs(target: Path) -> List[Path]:
    # the project config lives at the root, which the working directory may be below
    try:
        return [find_project_root(target)]
    except RootNotFound:
        return []


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    printer = Printer()

    if args.init:
        target = Path("undead.yaml")
        if target.exists():
            printer.error(f"{target} already exists")
            return 1
        printer.message(f"wrote {save_example_config(target)}")
        return 0

    if not args.paths:
        parser.print_help()
        return 2
    if args.jobs is not None and args.jobs < 1:
        parser.error("--jobs must be >= 1")

    try:
        config = load_config(args.config, search_dirs=_config_search_dirs(args.paths[0]))
        if args.jobs is not None:
            config.workers = args.jobs
        result = find_dead_files(args.paths, ignore=args.ignore_paths, config=config)
    except UndeadError as e:
        printer.error(f"error: {e}")
        return 1

    printer.report(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
