"""Markdown highlighting for issue descriptions.

Descriptions are run through Pygments' Markdown lexer. Control bytes are
neutralized first so issue text cannot drive the terminal.
"""

from __future__ import annotations

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers.markup import MarkdownLexer
from pygments.styles import get_all_styles, get_style_by_name
from pygments.util import ClassNotFound

from .ansi import sanitize_terminal_text

DEFAULT_STYLE = "monokai"

_FORMATTERS: dict[str, Terminal256Formatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()
_LEXER = MarkdownLexer(stripnl=False, ensurenl=False)


def available_style_names() -> tuple[str, ...]:
    return tuple(sorted(get_all_styles()))


def normalize_style(style: str | None) -> str:
    if not style:
        return DEFAULT_STYLE
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return DEFAULT_STYLE

    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is not None:
        return formatter
    formatter = Terminal256Formatter(style=style)
    _FORMATTERS[style] = formatter
    return formatter


def render_description(text: str, style: str | None = DEFAULT_STYLE, no_color: bool = False) -> list[str]:
    """Return display lines for a Markdown description."""
    source = sanitize_terminal_text(text.replace("\r\n", "\n").expandtabs(4))
    if no_color:
        return source.split("\n")

    style = normalize_style(style)
    rendered = pygments_highlight(source, _LEXER, _formatter_for_style(style))
    if rendered.endswith("\n") and not source.endswith("\n"):
        rendered = rendered[:-1]
    return rendered.split("\n")
