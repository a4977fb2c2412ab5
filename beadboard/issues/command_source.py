"""Backend that shells out to the ``bd`` command and parses its JSON listing."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from ..errors import BackendError
from .models import Issue, IssueType, Status, normalize_priority, sort_for_board

logger = logging.getLogger("beadboard.issues.command")

LIST_LIMIT = 1000
COMMAND_TIMEOUT_SECONDS = 30.0
_DELETED_STATUSES = {"tombstone", "deleted"}


def _text(record: dict, key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value)


def _optional_text(record: dict, key: str) -> str | None:
    text = _text(record, key)
    return text if text else None


def _count(record: dict, key: str) -> int:
    value = record.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, int(value))


def _string_tuple(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item is not None and str(item))


def _dependency_ids(value: object, key: str) -> tuple[str, ...]:
    """Extract ids from either a list of strings or a list of dependency objects."""
    if not isinstance(value, list):
        return ()
    ids: list[str] = []
    for item in value:
        if isinstance(item, str) and item:
            ids.append(item)
        elif isinstance(item, dict):
            target = item.get(key) or item.get("id")
            if target:
                ids.append(str(target))
    return tuple(ids)


def is_deleted_record(record: dict) -> bool:
    if record.get("deleted_at"):
        return True
    status = record.get("status")
    return isinstance(status, str) and status.strip().lower() in _DELETED_STATUSES


def issue_from_record(record: dict) -> Issue:
    """Build an ``Issue`` from one JSON object, defaulting missing fields."""
    blocked_by = _dependency_ids(record.get("blocked_by"), "depends_on_id")
    blocks = _dependency_ids(record.get("blocks"), "issue_id")
    return Issue(
        id=_text(record, "id"),
        title=_text(record, "title"),
        description=_optional_text(record, "description"),
        status=Status.parse(record.get("status")),
        priority=normalize_priority(record.get("priority")),
        issue_type=IssueType.parse(record.get("issue_type")),
        labels=_string_tuple(record.get("labels")),
        assignee=_optional_text(record, "assignee"),
        created_at=_text(record, "created_at"),
        updated_at=_text(record, "updated_at"),
        blocked_by=blocked_by,
        blocks=blocks,
        dependency_count=max(_count(record, "dependency_count"), len(blocked_by)),
        dependent_count=max(_count(record, "dependent_count"), len(blocks)),
    )


def parse_issue_listing(payload: str) -> list[Issue]:
    """Parse ``bd list --json`` output into issues, skipping deleted records."""
    if not payload.strip():
        return []
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise BackendError("bd returned malformed JSON") from exc
    if isinstance(data, dict):
        data = data.get("issues", [])
    if not isinstance(data, list):
        raise BackendError(f"bd returned unexpected JSON ({type(data).__name__}, expected a list)")

    issues: list[Issue] = []
    for record in data:
        if not isinstance(record, dict) or not record.get("id"):
            continue
        if is_deleted_record(record):
            continue
        issues.append(issue_from_record(record))
    return issues


class CommandIssueSource:
    """Load issues by running ``bd list --json --all`` in the project root."""

    def __init__(
        self,
        project_root: Path,
        command: str = "bd",
        limit: int = LIST_LIMIT,
        timeout_seconds: float | None = COMMAND_TIMEOUT_SECONDS,
    ) -> None:
        self.project_root = Path(project_root)
        self.command = command
        self.limit = limit
        self.timeout_seconds = timeout_seconds

    def __repr__(self) -> str:
        return f"CommandIssueSource({self.command!r}, {str(self.project_root)!r})"

    def build_command(self) -> list[str]:
        return [self.command, "list", "--json", "--all", "--limit", str(self.limit)]

    def load_issues(self, label_filter: str | None) -> list[Issue]:
        cmd = self.build_command()
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.project_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            raise BackendError(f"Failed to run {' '.join(cmd)}") from exc

        if proc.returncode != 0:
            detail = (proc.stderr or "").strip().splitlines()
            reason = detail[-1] if detail else f"exit status {proc.returncode}"
            raise BackendError(f"{' '.join(cmd)} failed: {reason}")

        issues = parse_issue_listing(proc.stdout)
        if label_filter:
            issues = [issue for issue in issues if issue.has_label(label_filter)]
        issues = sort_for_board(issues)
        logger.debug("loaded %d issues via %s (label=%r)", len(issues), self.command, label_filter)
        return issues
