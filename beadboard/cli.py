"""Command-line front door for beadboard.

Parses CLI options, merges them over the config file defaults, then
dispatches into the board runtime.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from .errors import StartupError, describe_error
from .issues import BACKEND_CHOICES
from .runtime import run_board
from .runtime.app import BoardOptions
from .runtime.config import load_board_config
from .runtime.logs import LOG_LEVEL_CHOICES, configure_logging
from .ui_theme import available_theme_names


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beadboard",
        description="Kanban board for the beads issue tracker in the current project.",
    )
    scope = parser.add_mutually_exclusive_group()
    scope.add_argument("-l", "--label", default=None, help="Only show issues with this label (default: ralph).")
    scope.add_argument("-a", "--all", action="store_true", help="Show all issues regardless of label.")
    parser.add_argument("--no-watch", action="store_true", help="Disable automatic reload on store changes.")
    parser.add_argument("--backend", choices=BACKEND_CHOICES, default=None, help="Issue store backend.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--style", default=None, help="Pygments style for issue descriptions.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--dump", action="store_true", help="Print the board as plain text and exit.")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        default="WARNING",
        type=str.upper,
        help="Log file verbosity.",
    )
    return parser


def resolve_options(args: argparse.Namespace, config_path: Path | None = None, start_dir: Path | None = None) -> BoardOptions:
    """Merge parsed flags over config file defaults."""
    config = load_board_config(config_path)
    if args.all:
        label_filter = None
    elif args.label is not None:
        label_filter = args.label.strip() or None
    else:
        label_filter = config.label
    backend = args.backend or config.backend
    if backend not in BACKEND_CHOICES:
        backend = "auto"
    return BoardOptions(
        label_filter=label_filter,
        backend=backend,
        theme=args.theme or config.theme,
        style=args.style or config.style,
        no_color=args.no_color,
        watch=not args.no_watch,
        dump=args.dump,
        start_dir=start_dir,
    )


def main(argv: Sequence[str] | None = None, start_dir: Path | None = None) -> None:
    """Parse CLI arguments and launch the board.

    ``start_dir`` is primarily for tests; when omitted the store is searched
    for from the current working directory.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    options = resolve_options(args, start_dir=start_dir)
    try:
        run_board(options)
    except StartupError as exc:
        raise SystemExit(describe_error(exc)) from exc


if __name__ == "__main__":
    main()
