"""Main interactive event loop for the board.

Coordinates store-change polling, rendering, and key dispatch. All view
behavior lives on ``AppState``; this module only wires the pieces together.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ..errors import BackendError, InputError, describe_error
from ..input import read_key
from ..issues import IssueSource
from ..render import RenderOptions, render_state
from ..state import Action, AppState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 100


class ChangeSignal(Protocol):
    """Anything with a non-blocking ``poll() -> bool`` change flag."""

    def poll(self) -> bool:
        ...


def reload_into(
    state: AppState,
    source: IssueSource,
    label_filter: str | None,
    now: float | None = None,
) -> BackendError | None:
    """Fetch a fresh snapshot and reconcile ``state`` with it.

    On failure the previous snapshot stays on screen, the error is logged and
    flashed on the status line, and the error is returned to the caller.
    """
    try:
        issues = source.load_issues(label_filter)
    except BackendError as exc:
        logger.warning("reload failed: %s", describe_error(exc), exc_info=True)
        state.flash(f"Reload failed: {describe_error(exc)}", time.monotonic() if now is None else now)
        return exc
    logger.info("reloaded %d issues", len(issues))
    state.reconcile(issues)
    return None


def run_main_loop(
    state: AppState,
    terminal: TerminalController,
    stdin_fd: int,
    source: IssueSource,
    label_filter: str | None,
    watcher: ChangeSignal | None = None,
    options: RenderOptions | None = None,
    timing: RuntimeLoopTiming | None = None,
    monotonic: Callable[[], float] = time.monotonic,
) -> None:
    """Run the interactive loop until a quit action occurs.

    Each iteration expires the status message, repaints when dirty or when the
    terminal was resized, applies a pending store change, then waits briefly
    for one key.
    """
    timing = timing or RuntimeLoopTiming()
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while True:
            state.expire_status(monotonic())

            term = shutil.get_terminal_size((80, 24))
            size = (term.columns, term.lines)
            if size != last_size:
                last_size = size
                state.dirty = True

            if state.dirty:
                viewport = render_state(state, size[0], size[1], options)
                state.dirty = False
                if viewport is not None:
                    state.set_viewport(viewport)

            if watcher is not None and watcher.poll():
                logger.info("store changed; reloading")
                reload_into(state, source, label_filter, monotonic())
                continue

            try:
                key = read_key(stdin_fd, timeout_ms=timing.key_timeout_ms)
            except InputError as exc:
                logger.debug("dropped input: %s", exc)
                continue
            except KeyboardInterrupt:
                break
            if key == "":
                continue

            action = state.handle_input(key)
            if action is Action.QUIT:
                break
            if action is Action.RELOAD:
                if reload_into(state, source, label_filter, monotonic()) is None:
                    state.flash("Reloaded", monotonic())
