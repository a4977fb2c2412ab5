"""Fuzzy-search prompt and ranked result list."""

from __future__ import annotations

from ..ansi import display_width, pad_ansi_line, sanitize_terminal_text
from ..issues import priority_label
from ..search import SearchResult, highlight_spans
from ..state import AppState
from ..ui_theme import UITheme
from .board import SELECTED_MARKER, list_window_start

SEARCH_HELP = "[Type] Search  [↑/↓] Navigate  [Enter] View  [Esc] Back  [Ctrl+U] Clear"
CURSOR = "_"


def search_prompt(query: str, width: int, theme: UITheme) -> str:
    text = f"{theme.search_border}/{theme.reset} {theme.bold}{sanitize_terminal_text(query)}{CURSOR}{theme.reset}"
    return pad_ansi_line(text, width) + theme.reset


def highlighted_title(title: str, positions: tuple[int, ...], theme: UITheme, restore: str) -> str:
    parts: list[str] = []
    for segment, matched in highlight_spans(title, positions):
        segment = sanitize_terminal_text(segment)
        if matched:
            parts.append(f"{theme.search_match}{segment}{restore}")
        else:
            parts.append(segment)
    return "".join(parts)


def format_result(state: AppState, result: SearchResult, width: int, selected: bool, theme: UITheme) -> str:
    base = theme.selected if selected else ""
    restore = theme.reset + base
    marker = SELECTED_MARKER if selected else " "
    issue = state.issue_by_id(result.issue_id)
    if issue is None:
        text = f"{base}{marker}{theme.secondary}{sanitize_terminal_text(result.issue_id)} (not found){restore}"
        return pad_ansi_line(text, width) + theme.reset

    parts = [
        base,
        marker,
        theme.priority(issue.priority),
        priority_label(issue.priority),
        restore,
        " ",
        theme.secondary,
        sanitize_terminal_text(issue.id),
        restore,
        " ",
        highlighted_title(issue.title, result.title_positions, theme, restore),
    ]
    if issue.labels:
        parts.extend([" ", theme.secondary, f"[{sanitize_terminal_text(', '.join(issue.labels))}]", restore])
    return pad_ansi_line("".join(parts), width) + theme.reset


def search_rows(state: AppState, width: int, rows: int, theme: UITheme) -> list[str]:
    """Render the prompt, a result-count rule, then the visible results."""
    if rows <= 0:
        return []
    out = [search_prompt(state.search_query, width, theme)]
    if rows == 1:
        return out
    title = f" Results ({len(state.search_results)}) "
    rule_width = max(0, width - display_width(title) - 2)
    out.append(f"{theme.border}──{theme.reset}{theme.bold}{title}{theme.reset}{theme.border}{'─' * rule_width}{theme.reset}")

    list_rows = rows - len(out)
    results = state.search_results
    start = list_window_start(state.search_selected, len(results), list_rows)
    for offset in range(list_rows):
        idx = start + offset
        if idx < len(results):
            out.append(format_result(state, results[idx], width, idx == state.search_selected, theme))
        else:
            out.append("")
    return out
