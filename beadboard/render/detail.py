"""Scrollable single-issue detail view.

The body is wrapped to the terminal width here, so this module is also
where the detail scroll bound is measured.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import sanitize_terminal_text, wrap_lines
from ..issues import Issue, priority_label
from ..markup import render_description
from ..state import AppState
from ..ui_theme import UITheme

DETAIL_HELP = "[Esc/q] Back  [↑/↓ k/j] Scroll  [g/G] Top/Bottom  [PgUp/PgDn] Page  [r] Refresh"
MISSING_ISSUE_TEXT = "This issue is no longer on the board. Press Esc to go back."


def _field(name: str, value: str, theme: UITheme, color: str = "") -> str:
    return f"{theme.bold}{color}{name}:{theme.reset} {sanitize_terminal_text(value)}"


def detail_lines(issue: Issue, theme: UITheme, style: str, no_color: bool) -> list[str]:
    """Unwrapped logical lines of the detail body."""
    lines = [
        _field("Status", issue.status.label, theme),
        _field("Priority", f"{priority_label(issue.priority)} ({issue.priority})", theme),
        _field("Type", issue.issue_type.value, theme),
        "",
    ]
    if issue.assignee:
        lines.append(_field("Assignee", issue.assignee, theme))
    if issue.labels:
        lines.append(_field("Labels", ", ".join(issue.labels), theme))
    if issue.assignee or issue.labels:
        lines.append("")

    if issue.description:
        lines.append(f"{theme.bold}Description:{theme.reset}")
        lines.extend(render_description(issue.description, style=style, no_color=no_color))
        lines.append("")

    if issue.blocked_by:
        lines.append(_field("Blocked by", ", ".join(issue.blocked_by), theme, theme.blocked))
    elif issue.dependency_count:
        lines.append(_field("Blocked by", f"{issue.dependency_count} issue(s)", theme, theme.blocked))
    if issue.blocks:
        lines.append(_field("Blocks", ", ".join(issue.blocks), theme, theme.blocks))
    elif issue.dependent_count:
        lines.append(_field("Blocks", f"{issue.dependent_count} issue(s)", theme, theme.blocks))
    if issue.is_blocked or issue.blocks or issue.dependent_count:
        lines.append("")

    lines.append(f"{theme.secondary}Created: {sanitize_terminal_text(issue.created_at)}{theme.reset}")
    lines.append(f"{theme.secondary}Updated: {sanitize_terminal_text(issue.updated_at)}{theme.reset}")
    return lines


def detail_title(issue: Issue | None, theme: UITheme) -> str:
    if issue is None:
        return f"{theme.header} Detail {theme.reset}"
    color = theme.priority(issue.priority)
    return (
        f"{color}{theme.bold} {sanitize_terminal_text(issue.id)}{theme.reset}"
        f"{theme.separator} · {theme.reset}"
        f"{theme.bold}{sanitize_terminal_text(issue.title)}{theme.reset}"
    )


@dataclass(frozen=True)
class DetailLayout:
    lines: list[str]
    scroll_max: int
    start: int
    total: int

    @property
    def position_label(self) -> str:
        if self.total <= 0:
            return "0/0"
        end = min(self.total, self.start + len(self.lines))
        return f"{self.start + 1}-{end}/{self.total}"


def layout_detail(
    state: AppState,
    width: int,
    rows: int,
    theme: UITheme,
    style: str,
    no_color: bool,
) -> DetailLayout:
    """Wrap the selected issue's body and cut out the visible window.

    The scroll offset used here is clamped to the freshly measured bound, so
    a stale offset from before a reload is never drawn.
    """
    issue = state.selected_issue()
    if issue is None:
        body = [f"{theme.secondary}{MISSING_ISSUE_TEXT}{theme.reset}"]
    else:
        body = detail_lines(issue, theme, style, no_color)
    wrapped = wrap_lines(body, max(1, width))
    visible_rows = max(1, rows)
    scroll_max = max(0, len(wrapped) - visible_rows)
    start = max(0, min(state.detail_scroll, scroll_max))
    return DetailLayout(
        lines=wrapped[start : start + visible_rows],
        scroll_max=scroll_max,
        start=start,
        total=len(wrapped),
    )
