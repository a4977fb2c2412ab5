"""Issue model and the interchangeable store backends."""

from __future__ import annotations

from .models import (
    DEFAULT_PRIORITY,
    Issue,
    IssueType,
    Status,
    normalize_priority,
    priority_label,
    sort_for_board,
)
from .store import (
    BACKEND_CHOICES,
    DATABASE_FILENAME,
    MARKER_DIR_NAME,
    IssueSource,
    database_path,
    find_beads_dir,
    open_issue_source,
)

__all__ = [
    "BACKEND_CHOICES",
    "DATABASE_FILENAME",
    "DEFAULT_PRIORITY",
    "MARKER_DIR_NAME",
    "Issue",
    "IssueSource",
    "IssueType",
    "Status",
    "database_path",
    "find_beads_dir",
    "normalize_priority",
    "open_issue_source",
    "priority_label",
    "sort_for_board",
]
