"""Issue data model and permissive field parsers.

Both backends build ``Issue`` values through the helpers here so status,
type and priority normalization stays identical regardless of the source.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_PRIORITY = 2
MIN_PRIORITY = 0
MAX_PRIORITY = 4


class Status(Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"
    BLOCKED = "blocked"
    DEFERRED = "deferred"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: object) -> "Status":
        """Map a backend status string onto a member, ``UNKNOWN`` if unrecognized."""
        if not isinstance(raw, str):
            return cls.UNKNOWN
        token = raw.strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == token:
                return member
        return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class IssueType(Enum):
    TASK = "task"
    BUG = "bug"
    FEATURE = "feature"
    EPIC = "epic"
    CHORE = "chore"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> "IssueType":
        """Map a backend type string onto a member.

        A missing or blank type is ``TASK``, the store's default and the
        ``Issue`` field default. Anything unrecognized is ``OTHER``.
        """
        if raw is None:
            return DEFAULT_ISSUE_TYPE
        if not isinstance(raw, str):
            return cls.OTHER
        token = raw.strip().lower()
        if not token:
            return DEFAULT_ISSUE_TYPE
        for member in cls:
            if member.value == token:
                return member
        return cls.OTHER


DEFAULT_ISSUE_TYPE = IssueType.TASK


def normalize_priority(raw: object) -> int:
    """Clamp a reported priority into ``[0, 4]``.

    Booleans, ``None`` and unparseable strings fall back to the default
    priority 2.
    """
    if isinstance(raw, bool) or raw is None:
        return DEFAULT_PRIORITY
    if isinstance(raw, (int, float)):
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip().upper().removeprefix("P")
        try:
            value = int(text)
        except ValueError:
            return DEFAULT_PRIORITY
    else:
        return DEFAULT_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, value))


def priority_label(priority: int) -> str:
    return f"P{priority}"


@dataclass(frozen=True)
class Issue:
    """One unit of tracked work as of the last load."""

    id: str
    title: str
    status: Status
    priority: int = DEFAULT_PRIORITY
    issue_type: IssueType = DEFAULT_ISSUE_TYPE
    description: str | None = None
    labels: tuple[str, ...] = ()
    assignee: str | None = None
    created_at: str = ""
    updated_at: str = ""
    blocked_by: tuple[str, ...] = ()
    blocks: tuple[str, ...] = ()
    dependency_count: int = 0
    dependent_count: int = 0

    @property
    def is_blocked(self) -> bool:
        return bool(self.blocked_by) or self.dependency_count > 0

    def has_label(self, label: str) -> bool:
        return label in self.labels


def sort_for_board(issues: list[Issue]) -> list[Issue]:
    """Order issues by priority ascending, then most recently updated first."""
    by_recency = sorted(issues, key=lambda issue: issue.updated_at, reverse=True)
    return sorted(by_recency, key=lambda issue: issue.priority)
