"""Issue store discovery and backend selection.

``IssueSource`` is the only contract the runtime depends on; the concrete
SQLite and ``bd`` command backends live in sibling modules.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Protocol

from ..errors import StartupError
from .models import Issue

MARKER_DIR_NAME = ".beads"
DATABASE_FILENAME = "beads.db"
BACKEND_CHOICES = ("auto", "sqlite", "bd")


class IssueSource(Protocol):
    def load_issues(self, label_filter: str | None) -> list[Issue]:
        """Return the full snapshot sorted by priority then recency."""
        ...


def find_beads_dir(start: Path | None = None) -> Path:
    """Walk from ``start`` up through its parents to the nearest ``.beads`` dir."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        marker = candidate / MARKER_DIR_NAME
        if marker.is_dir():
            return marker
    raise StartupError(f"Not in a beads project (no {MARKER_DIR_NAME} directory found above {current})")


def database_path(beads_dir: Path) -> Path:
    return beads_dir / DATABASE_FILENAME


def open_issue_source(beads_dir: Path, backend: str = "auto", command: str = "bd") -> IssueSource:
    """Build the requested backend for ``beads_dir``.

    ``auto`` prefers the SQLite file and falls back to the ``bd`` command
    when no database exists yet.
    """
    from .command_source import CommandIssueSource
    from .sqlite_source import SqliteIssueSource

    if backend not in BACKEND_CHOICES:
        raise StartupError(f"Unknown backend {backend!r} (expected one of: {', '.join(BACKEND_CHOICES)})")

    db_path = database_path(beads_dir)
    if backend == "sqlite" or (backend == "auto" and db_path.is_file()):
        if not db_path.is_file():
            raise StartupError(f"Database not found: {db_path}")
        return SqliteIssueSource(db_path)

    if shutil.which(command) is None:
        if backend == "auto":
            raise StartupError(f"Database not found: {db_path} (and no {command!r} command on PATH)")
        raise StartupError(f"Command not found on PATH: {command}")
    return CommandIssueSource(project_root=beads_dir.parent, command=command)
