"""Read-only JSON config for startup defaults.

Holds the default label filter, theme, Pygments style and backend choice.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "beadboard"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_LABEL = "ralph"


@dataclass(frozen=True)
class BoardConfig:
    label: str | None = DEFAULT_LABEL
    theme: str | None = None
    style: str | None = None
    backend: str = "auto"


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _optional_string(data: dict[str, object], key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_board_config(path: Path | None = None) -> BoardConfig:
    """Resolve typed defaults from the config file.

    ``"label": null`` or ``"label": ""`` in the file means "all issues";
    a missing key keeps the built-in default label.
    """
    data = load_config(path)
    if "label" in data:
        label = _optional_string(data, "label")
    else:
        label = DEFAULT_LABEL
    return BoardConfig(
        label=label,
        theme=_optional_string(data, "theme"),
        style=_optional_string(data, "style"),
        backend=_optional_string(data, "backend") or "auto",
    )
