"""Read-only SQLite backend over ``.beads/beads.db``.

Each load opens a fresh read-only connection so no connection state
survives between reloads.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from ..errors import BackendError
from .models import Issue, IssueType, Status, normalize_priority, sort_for_board

logger = logging.getLogger("beadboard.issues.sqlite")

_ISSUES_QUERY = """
SELECT
    i.id,
    i.title,
    i.description,
    i.status,
    COALESCE(i.priority, 2) AS priority,
    i.issue_type,
    i.assignee,
    i.created_at,
    i.updated_at,
    (SELECT json_group_array(l.label)
       FROM labels l
      WHERE l.issue_id = i.id) AS labels,
    (SELECT json_group_array(d.depends_on_id)
       FROM dependencies d
       LEFT JOIN issues b ON b.id = d.depends_on_id
      WHERE d.issue_id = i.id
        AND COALESCE(b.status, '') != 'closed') AS blocked_by,
    (SELECT json_group_array(d.issue_id)
       FROM dependencies d
      WHERE d.depends_on_id = i.id) AS blocks
FROM issues i
WHERE i.deleted_at IS NULL
  {label_clause}
ORDER BY COALESCE(i.priority, 2) ASC, i.updated_at DESC, i.id ASC
"""

_LABEL_CLAUSE = """AND EXISTS (
    SELECT 1 FROM labels fl
     WHERE fl.issue_id = i.id
       AND fl.label = ?
  )"""


def _json_string_list(raw: object) -> tuple[str, ...]:
    if raw is None or raw == "":
        return ()
    try:
        values = json.loads(str(raw))
    except ValueError as exc:
        raise BackendError(f"Malformed JSON list in database row: {raw!r}") from exc
    if not isinstance(values, list):
        return ()
    return tuple(str(value) for value in values if value is not None)


def _optional_text(raw: object) -> str | None:
    if raw is None:
        return None
    text = str(raw)
    return text if text else None


def issue_from_row(row: sqlite3.Row) -> Issue:
    blocked_by = _json_string_list(row["blocked_by"])
    blocks = _json_string_list(row["blocks"])
    return Issue(
        id=str(row["id"]),
        title=str(row["title"] or ""),
        description=_optional_text(row["description"]),
        status=Status.parse(row["status"]),
        priority=normalize_priority(row["priority"]),
        issue_type=IssueType.parse(row["issue_type"]),
        labels=_json_string_list(row["labels"]),
        assignee=_optional_text(row["assignee"]),
        created_at=str(row["created_at"] or ""),
        updated_at=str(row["updated_at"] or ""),
        blocked_by=blocked_by,
        blocks=blocks,
        dependency_count=len(blocked_by),
        dependent_count=len(blocks),
    )


class SqliteIssueSource:
    """Query ``beads.db`` directly."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def __repr__(self) -> str:
        return f"SqliteIssueSource({str(self.db_path)!r})"

    def _connect(self) -> sqlite3.Connection:
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as exc:
            raise BackendError(f"Failed to open database: {self.db_path}") from exc
        conn.row_factory = sqlite3.Row
        return conn

    def load_issues(self, label_filter: str | None) -> list[Issue]:
        if label_filter:
            query = _ISSUES_QUERY.format(label_clause=_LABEL_CLAUSE)
            params: tuple[object, ...] = (label_filter,)
        else:
            query = _ISSUES_QUERY.format(label_clause="")
            params = ()

        conn = self._connect()
        try:
            rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise BackendError(f"Failed to query issues from {self.db_path}") from exc
        finally:
            conn.close()

        issues = sort_for_board([issue_from_row(row) for row in rows])
        logger.debug("loaded %d issues from %s (label=%r)", len(issues), self.db_path, label_filter)
        return issues
