"""Rendering engine for the board, detail, and search views.

Composes fully formed ANSI frames from ``AppState`` without mutating it.
The only value flowing back is the ``Viewport`` measured for the detail view.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from ..ansi import clip_ansi_line, display_width, pad_ansi_line, sanitize_terminal_text, truncate_plain
from ..markup import DEFAULT_STYLE
from ..state import AppState, View, Viewport, board_columns
from ..ui_theme import DEFAULT_THEME, UITheme
from .board import BOARD_HELP, board_rows
from .detail import DETAIL_HELP, detail_title, layout_detail
from .search import SEARCH_HELP, search_rows

APP_TITLE = "BEADBOARD"


@dataclass(frozen=True)
class RenderOptions:
    theme: UITheme = DEFAULT_THEME
    style: str = DEFAULT_STYLE
    no_color: bool = False


@dataclass(frozen=True)
class Frame:
    """One composed screen plus the measurements taken while composing it."""

    lines: list[str]
    viewport: Viewport | None = None


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = truncate_plain(left_text, left_limit)
    gap = " " * max(0, usable - display_width(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def header_line(state: AppState, width: int, theme: UITheme) -> str:
    scope = f"label: {state.label_filter}" if state.label_filter else "all issues"
    text = (
        f"{theme.header}{theme.reverse} ▓▓ {APP_TITLE} {theme.reset}"
        f"{theme.separator}  │  {theme.reset}Beads Kanban"
        f"{theme.separator}  │  {theme.reset}{theme.header_accent}{sanitize_terminal_text(scope)}{theme.reset}"
        f"{theme.separator}  │  {theme.reset}{theme.secondary}{len(state.issues)} issues{theme.reset}"
    )
    return pad_ansi_line(text, width) + theme.reset


def _status_row(state: AppState, width: int, theme: UITheme, help_text: str, right_text: str = "") -> str:
    if state.status_message:
        text = build_status_line(state.status_message, width, right_text)
        return f"{theme.status_message}{text}{theme.reset}"
    return f"{theme.help}{build_status_line(help_text, width, right_text)}{theme.reset}"


def _fit_rows(lines: list[str], rows: int) -> list[str]:
    lines = lines[:rows]
    if len(lines) < rows:
        lines.extend([""] * (rows - len(lines)))
    return lines


def compose_frame(state: AppState, width: int, height: int, options: RenderOptions | None = None) -> Frame:
    """Lay out one screen for ``state`` at ``width`` x ``height`` cells."""
    options = options or RenderOptions()
    theme = options.theme
    width = max(1, width)
    height = max(2, height)
    body_rows = height - 2

    if state.view is View.DETAIL:
        layout = layout_detail(state, width, body_rows, theme, options.style, options.no_color)
        lines = [pad_ansi_line(detail_title(state.selected_issue(), theme), width) + theme.reset]
        lines.extend(_fit_rows(layout.lines, body_rows))
        lines.append(_status_row(state, width, theme, DETAIL_HELP, f" {layout.position_label}"))
        viewport = Viewport(detail_scroll_max=layout.scroll_max, detail_page_height=max(1, body_rows))
        return Frame(lines=[clip_ansi_line(line, width) for line in lines], viewport=viewport)

    lines = [header_line(state, width, theme)]
    if state.view is View.SEARCH:
        lines.extend(_fit_rows(search_rows(state, width, body_rows, theme), body_rows))
        lines.append(_status_row(state, width, theme, SEARCH_HELP))
    else:
        lines.extend(_fit_rows(board_rows(state, width, body_rows, theme), body_rows))
        lines.append(_status_row(state, width, theme, BOARD_HELP))
    return Frame(lines=[clip_ansi_line(line, width) for line in lines])


def write_frame(frame: Frame, fd: int | None = None) -> None:
    """Paint ``frame`` from the top-left corner, clearing stale cells per row."""
    out: list[str] = ["\033[H"]
    for idx, line in enumerate(frame.lines):
        out.append(line)
        out.append("\033[0m\033[K")
        if idx < len(frame.lines) - 1:
            out.append("\r\n")
    out.append("\033[J")
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, "".join(out).encode("utf-8", errors="replace"))


def render_state(state: AppState, width: int, height: int, options: RenderOptions | None = None) -> Viewport | None:
    frame = compose_frame(state, width, height, options)
    write_frame(frame)
    return frame.viewport


def plain_board_text(state: AppState) -> str:
    """Plain-text dump of every column, used for non-interactive output."""
    out: list[str] = []
    scope = f"label: {state.label_filter}" if state.label_filter else "all issues"
    out.append(f"{APP_TITLE} ({scope}, {len(state.issues)} issues)")
    for column in board_columns():
        members = state.column_issues(column)
        out.append("")
        out.append(f"{column.title} ({len(members)})")
        for issue in members:
            blocked = " [blocked]" if issue.is_blocked else ""
            labels = f" [{', '.join(issue.labels)}]" if issue.labels else ""
            out.append(
                f"  P{issue.priority} {sanitize_terminal_text(issue.id)} "
                f"{sanitize_terminal_text(issue.title)}{labels}{blocked}"
            )
    return "\n".join(out) + "\n"


__all__ = [
    "Frame",
    "RenderOptions",
    "build_status_line",
    "compose_frame",
    "plain_board_text",
    "render_state",
    "write_frame",
]
