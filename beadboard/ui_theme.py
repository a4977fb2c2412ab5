"""UI theme definitions and selection helpers.

Themes are UI-only ANSI palettes (board/detail/search chrome). Markup
highlighting style for issue descriptions remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    bold: str
    reverse: str
    header: str
    header_accent: str
    separator: str
    column_open: str
    column_in_progress: str
    column_done: str
    border: str
    selected: str
    secondary: str
    priority_p0: str
    priority_p1: str
    priority_p2: str
    priority_p3: str
    priority_p4: str
    blocked: str
    blocks: str
    search_match: str
    search_border: str
    help: str
    status_message: str

    def priority(self, priority: int) -> str:
        palette = (self.priority_p0, self.priority_p1, self.priority_p2, self.priority_p3)
        if 0 <= priority < len(palette):
            return palette[priority]
        return self.priority_p4


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    bold="\033[1m",
    reverse="\033[7m",
    header="\033[1;38;5;87m",
    header_accent="\033[38;5;214m",
    separator="\033[38;5;240m",
    column_open="\033[1;38;5;75m",
    column_in_progress="\033[1;38;5;214m",
    column_done="\033[1;38;5;78m",
    border="\033[38;5;243m",
    selected="\033[1;48;5;237m",
    secondary="\033[38;5;245m",
    priority_p0="\033[1;38;5;196m",
    priority_p1="\033[1;38;5;209m",
    priority_p2="\033[1;38;5;117m",
    priority_p3="\033[1;38;5;250m",
    priority_p4="\033[1;38;5;109m",
    blocked="\033[38;5;160m",
    blocks="\033[38;5;208m",
    search_match="\033[1;4;38;5;221m",
    search_border="\033[38;5;44m",
    help="\033[38;5;103m",
    status_message="\033[1;38;5;229m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    bold="\033[1m",
    reverse="\033[7m",
    header="\033[1;38;5;45m",
    header_accent="\033[38;5;153m",
    separator="\033[2;38;5;31m",
    column_open="\033[1;38;5;39m",
    column_in_progress="\033[1;38;5;215m",
    column_done="\033[1;38;5;84m",
    border="\033[38;5;24m",
    selected="\033[1;48;5;24m",
    secondary="\033[38;5;110m",
    priority_p0="\033[1;38;5;203m",
    priority_p1="\033[1;38;5;215m",
    priority_p2="\033[1;38;5;117m",
    priority_p3="\033[1;38;5;153m",
    priority_p4="\033[1;38;5;73m",
    blocked="\033[38;5;203m",
    blocks="\033[38;5;215m",
    search_match="\033[1;4;38;5;45m",
    search_border="\033[38;5;39m",
    help="\033[2;38;5;110m",
    status_message="\033[1;38;5;153m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    bold="",
    reverse="",
    header="",
    header_accent="",
    separator="",
    column_open="",
    column_in_progress="",
    column_done="",
    border="",
    selected="",
    secondary="",
    priority_p0="",
    priority_p1="",
    priority_p2="",
    priority_p3="",
    priority_p4="",
    blocked="",
    blocks="",
    search_match="",
    search_border="",
    help="",
    status_message="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
