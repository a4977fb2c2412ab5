"""Three-column Kanban board body."""

from __future__ import annotations

from ..ansi import display_width, pad_ansi_line, sanitize_terminal_text, truncate_plain
from ..issues import Issue, priority_label
from ..state import AppState, Column, board_columns
from ..ui_theme import UITheme

BLOCKED_MARKER = "⊘"
SELECTED_MARKER = "▸"
DIVIDER = "│"
BOARD_HELP = "[←/→ h/l] Column  [↑/↓ k/j] Select  [Enter] Details  [/] Search  [r] Refresh  [q] Quit"


def column_widths(width: int, count: int = 3) -> list[int]:
    """Split ``width`` into ``count`` columns separated by 1-col dividers."""
    usable = max(count, width - (count - 1))
    base = usable // count
    widths = [base] * count
    widths[-1] += usable - base * count
    return widths


def column_color(column: Column, theme: UITheme) -> str:
    if column is Column.IN_PROGRESS:
        return theme.column_in_progress
    if column is Column.DONE:
        return theme.column_done
    return theme.column_open


def list_window_start(selected: int, count: int, rows: int) -> int:
    """First visible index that keeps ``selected`` inside a ``rows``-tall list."""
    if rows <= 0 or count <= rows:
        return 0
    start = max(0, selected - rows + 1)
    return min(start, count - rows)


def format_card(issue: Issue, width: int, selected: bool, theme: UITheme) -> str:
    marker = SELECTED_MARKER if selected else " "
    prio = priority_label(issue.priority)
    issue_id = sanitize_terminal_text(issue.id)
    suffix = f" {BLOCKED_MARKER}" if issue.is_blocked else ""
    fixed = display_width(f"{marker}{prio} {issue_id} ") + display_width(suffix)
    title = truncate_plain(sanitize_terminal_text(issue.title), max(0, width - fixed))

    base = theme.selected if selected else ""
    restore = theme.reset + base
    parts = [
        base,
        marker,
        theme.priority(issue.priority),
        prio,
        restore,
        " ",
        theme.secondary,
        issue_id,
        restore,
        " ",
        title,
    ]
    if suffix:
        parts.extend([theme.blocked, suffix, restore])
    return pad_ansi_line("".join(parts), width) + theme.reset


def column_header(column: Column, count: int, width: int, active: bool, theme: UITheme) -> str:
    title = f"{column.title} ({count})"
    if active:
        text = f"{column_color(column, theme)}{theme.reverse} {title} {theme.reset}"
    else:
        text = f"{column_color(column, theme)} {title} {theme.reset}"
    return pad_ansi_line(text, width) + theme.reset


def board_rows(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    """Render ``rows`` lines: column headers, a rule, then the cards."""
    if rows <= 0:
        return []
    columns = board_columns()
    widths = column_widths(width, len(columns))
    divider = f"{theme.border}{DIVIDER}{theme.reset}"

    headers = [
        column_header(column, len(state.column_issues(column)), widths[idx], column is state.selected_column, theme)
        for idx, column in enumerate(columns)
    ]
    out = [divider.join(headers)]
    if rows == 1:
        return out
    rule = "┼".join("─" * w for w in widths)
    out.append(f"{theme.border}{rule}{theme.reset}")

    card_rows = rows - len(out)
    rendered_columns: list[list[str]] = []
    for idx, column in enumerate(columns):
        members = state.column_issues(column)
        active = column is state.selected_column
        selected = state.selected_index if active else -1
        start = list_window_start(max(0, selected), len(members), card_rows) if active else 0
        cells: list[str] = []
        for offset in range(card_rows):
            member_idx = start + offset
            if member_idx < len(members):
                cells.append(format_card(members[member_idx], widths[idx], member_idx == selected, theme))
            else:
                cells.append(" " * widths[idx])
        rendered_columns.append(cells)

    for row in range(card_rows):
        out.append(divider.join(cells[row] for cells in rendered_columns))
    return out
