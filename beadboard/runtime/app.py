"""Board bootstrap: locate the store, load the first snapshot, run the loop."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from ..errors import BackendError, StartupError
from ..issues import find_beads_dir, open_issue_source
from ..markup import normalize_style
from ..render import RenderOptions, plain_board_text
from ..state import AppState
from ..ui_theme import resolve_theme
from ..watch import ChangeWatcher
from .loop import run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardOptions:
    label_filter: str | None = None
    backend: str = "auto"
    theme: str | None = None
    style: str | None = None
    no_color: bool = False
    watch: bool = True
    dump: bool = False
    start_dir: Path | None = None


def load_initial_state(options: BoardOptions) -> tuple[AppState, object, Path]:
    """Resolve the backend and load the first snapshot.

    A load failure here is fatal: there is no previous snapshot to fall back on.
    """
    beads_dir = find_beads_dir(options.start_dir)
    source = open_issue_source(beads_dir, options.backend)
    logger.info("using %s for %s", type(source).__name__, beads_dir)
    try:
        issues = source.load_issues(options.label_filter)
    except BackendError as exc:
        raise StartupError(f"Unable to load issues from {beads_dir}") from exc
    return AppState(issues=issues, label_filter=options.label_filter), source, beads_dir


def run_board(options: BoardOptions) -> None:
    """Run the interactive board, or print a plain dump when not on a TTY."""
    state, source, beads_dir = load_initial_state(options)

    if options.dump or not os.isatty(sys.stdin.fileno()):
        sys.stdout.write(plain_board_text(state))
        return

    stdin_fd = sys.stdin.fileno()

    render_options = RenderOptions(
        theme=resolve_theme(options.theme, no_color=options.no_color),
        style=normalize_style(options.style),
        no_color=options.no_color,
    )
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    watcher = ChangeWatcher(beads_dir) if options.watch else None
    if watcher is not None:
        watcher.start()
    try:
        run_main_loop(
            state=state,
            terminal=terminal,
            stdin_fd=stdin_fd,
            source=source,
            label_filter=options.label_filter,
            watcher=watcher,
            options=render_options,
        )
    finally:
        if watcher is not None:
            watcher.stop()
