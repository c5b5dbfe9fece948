"""Command-line front door for epc.

Parses CLI options, validates the documents to open, configures logging,
and hands the ordered path list to the interactive reader.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from .app import run_reader
from .config import load_settings
from .errors import EpcError
from .highlight import is_known_style
from .logs import setup_logging

LIBRARY_COMMANDS = ("library", "lib")
DOCUMENT_SUFFIX = ".epub"


def _epub_path(value: str) -> Path:
    """argparse type for ``-F/--file``: an existing ``.epub`` file."""
    if not value.endswith(DOCUMENT_SUFFIX):
        raise argparse.ArgumentTypeError(f"not an epub file: {value!r}")
    path = Path(value).expanduser()
    if not path.is_file():
        raise argparse.ArgumentTypeError(f"no such epub file: {value!r}")
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="epc",
        description="Read documents in the terminal and remember where you left off.",
        add_help=False,
    )
    parser.add_argument(
        "-F",
        "--file",
        dest="files",
        action="append",
        type=_epub_path,
        metavar="PATH",
        help="Open an .epub document (repeatable).",
    )
    parser.add_argument("-D", "--debug", action="store_true", help="Write a debug log.")
    parser.add_argument("-H", "--help", action="help", help="Show this message and exit.")
    parser.add_argument("--style", default=None, help="Pygments style used for document text.")
    parser.add_argument(
        "command",
        nargs="?",
        choices=LIBRARY_COMMANDS,
        help="Start in the library view.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments and run the reader.

    Argument errors exit with status 2 via argparse; reader failures print
    ``epc: <message>`` and exit with status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.style is not None and not is_known_style(args.style):
        parser.error(f"unknown style: {args.style!r}")

    settings = load_settings(style=args.style, debug=args.debug)
    setup_logging(settings.debug, settings.log_path)
    if not os.isatty(sys.stdin.fileno()):
        raise SystemExit("epc: standard input is not a terminal")

    files: list[Path] = args.files or []
    start_in_library = args.command is not None or not files
    try:
        run_reader(files, settings, start_in_library=start_in_library)
    except EpcError as exc:
        raise SystemExit(f"epc: {exc}") from exc


if __name__ == "__main__":
    main()
