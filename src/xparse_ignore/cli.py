"""Command line interface for xparse-ignore."""

import argparse
import logging
import sys
from . import __version__
from .backup import DEFAULT_WORKERS, backup
from .reporter import SEPARATORS, parse_ignore
from .types import RootError

PRODUCT_NAME = "xparse-ignore"


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=PRODUCT_NAME,
        description="List the paths of a directory not ignored by its .gitignore "
        "files, or back them up to another directory.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        help="root directory to parse (required unless --backup is used)",
    )
    parser.add_argument(
        "--ignored",
        action="store_true",
        help="list ignored paths instead of kept ones",
    )
    parser.add_argument(
        "--relative",
        action="store_true",
        help="list paths relative to the root directory",
    )
    parser.add_argument(
        "--path-separator",
        choices=SEPARATORS,
        default=None,
        help="separator used in listed paths (default: the platform's)",
    )
    parser.add_argument(
        "--backup",
        metavar="SOURCE",
        help="copy the kept files of SOURCE to the --to directory",
    )
    parser.add_argument(
        "--to",
        metavar="DEST",
        help="backup destination directory, created if missing",
    )
    parser.add_argument(
        "--out",
        metavar="JSON",
        help="with --backup, write {source: destination} of copied files to JSON",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"with --backup, number of concurrent copies (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--version", action="version", version=f"{PRODUCT_NAME} v{__version__}"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="enable debug output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable progress output"
    )
    args = parser.parse_args(argv)
    if args.backup is None and not args.directory:
        parser.error("the root directory is required")
    if args.backup is not None and not args.to:
        parser.error("--backup requires --to")
    return args


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    """Send the package's log records to stderr."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG

    logger = logging.getLogger("xparse_ignore")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console)
    logger.setLevel(level)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.debug, args.verbose)
    if args.debug:
        print("DEBUG: Debug mode enabled", file=sys.stderr)

    if args.backup is not None:
        try:
            result = backup(args.backup, args.to, out=args.out, workers=args.workers)
        except RootError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        print(
            f"Backup complete: copied {result.copied}, unchanged {result.skipped}, "
            f"failed {result.failed}",
            file=sys.stderr,
        )
        if not result.ok:
            sys.exit(1)
        return

    try:
        paths = parse_ignore(
            args.directory,
            ignored=args.ignored,
            relative=args.relative,
            separator=args.path_separator,
        )
    except RootError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if paths:
        print("\n".join(paths))


if __name__ == "__main__":
    main()
