"""Board/detail/search view state and its reconciliation rules.

``AppState`` is the only mutable UI model. Key handling, snapshot
reconciliation, and renderer viewport reports all go through its methods;
everything else reads it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from .issues import Issue, Status
from .search import SearchResult, rank_issues

STATUS_MESSAGE_SECONDS = 4.0


class View(Enum):
    BOARD = "board"
    DETAIL = "detail"
    SEARCH = "search"


class Column(Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    def next(self) -> "Column":
        order = _COLUMN_ORDER
        return order[(order.index(self) + 1) % len(order)]

    def prev(self) -> "Column":
        order = _COLUMN_ORDER
        return order[(order.index(self) - 1) % len(order)]

    @property
    def title(self) -> str:
        return _COLUMN_TITLES[self]

    @classmethod
    def for_status(cls, status: Status) -> "Column":
        """Fold a status into its board column.

        Only ``in_progress`` and ``closed`` have columns of their own; open,
        blocked, deferred and unknown issues all land in Open.
        """
        if status is Status.IN_PROGRESS:
            return cls.IN_PROGRESS
        if status is Status.CLOSED:
            return cls.DONE
        return cls.OPEN


_COLUMN_ORDER: tuple[Column, ...] = (Column.OPEN, Column.IN_PROGRESS, Column.DONE)
_COLUMN_TITLES = {
    Column.OPEN: "OPEN",
    Column.IN_PROGRESS: "IN PROGRESS",
    Column.DONE: "DONE",
}


def board_columns() -> tuple[Column, ...]:
    return _COLUMN_ORDER


class Action(Enum):
    """What the runtime must do after a key was handled."""

    NONE = "none"
    RELOAD = "reload"
    QUIT = "quit"


@dataclass(frozen=True)
class Viewport:
    """Sizes measured by the renderer during the last frame."""

    detail_scroll_max: int = 0
    detail_page_height: int = 0


def partition_columns(issues: Iterable[Issue]) -> dict[Column, list[Issue]]:
    columns: dict[Column, list[Issue]] = {column: [] for column in _COLUMN_ORDER}
    for issue in issues:
        columns[Column.for_status(issue.status)].append(issue)
    return columns


def clamp_index(index: int, count: int) -> int:
    """Clamp ``index`` into ``[0, count - 1]``; ``0`` for empty lists."""
    if count <= 0:
        return 0
    return max(0, min(index, count - 1))


def is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


BOARD_QUIT_KEYS = frozenset({"q", "ESC"})
DETAIL_CLOSE_KEYS = frozenset({"q", "ESC"})


@dataclass
class AppState:
    issues: list[Issue] = field(default_factory=list)
    label_filter: str | None = None
    view: View = View.BOARD
    selected_column: Column = Column.OPEN
    selected_index: int = 0
    detail_scroll: int = 0
    detail_scroll_max: int = 0
    detail_page_height: int = 0
    search_query: str = ""
    search_results: list[SearchResult] = field(default_factory=list)
    search_selected: int = 0
    status_message: str = ""
    status_message_until: float = 0.0
    dirty: bool = True
    columns: dict[Column, list[Issue]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.issues = list(self.issues)
        self.columns = partition_columns(self.issues)
        self.selected_index = clamp_index(self.selected_index, len(self.columns[self.selected_column]))

    # -- queries -----------------------------------------------------------

    def column_issues(self, column: Column) -> list[Issue]:
        return self.columns[column]

    def selected_issue(self) -> Issue | None:
        members = self.columns[self.selected_column]
        if 0 <= self.selected_index < len(members):
            return members[self.selected_index]
        return None

    def issue_by_id(self, issue_id: str) -> Issue | None:
        for issue in self.issues:
            if issue.id == issue_id:
                return issue
        return None

    def selected_search_result(self) -> SearchResult | None:
        if 0 <= self.search_selected < len(self.search_results):
            return self.search_results[self.search_selected]
        return None

    # -- input -------------------------------------------------------------

    def handle_input(self, key: str) -> Action:
        """Apply one decoded key token to the active view."""
        if not key:
            return Action.NONE
        if key == "CTRL_C":
            return Action.QUIT
        if self.view is View.BOARD:
            action = self._handle_board_key(key)
        elif self.view is View.DETAIL:
            action = self._handle_detail_key(key)
        else:
            action = self._handle_search_key(key)
        self.dirty = True
        return action

    def _handle_board_key(self, key: str) -> Action:
        if key in BOARD_QUIT_KEYS:
            return Action.QUIT
        if key == "r":
            return Action.RELOAD
        if key in {"LEFT", "h"}:
            self.move_column(-1)
        elif key in {"RIGHT", "l"}:
            self.move_column(1)
        elif key in {"UP", "k"}:
            self.move_row(-1)
        elif key in {"DOWN", "j"}:
            self.move_row(1)
        elif key == "ENTER":
            self.open_detail()
        elif key == "/":
            self.open_search()
        return Action.NONE

    def _handle_detail_key(self, key: str) -> Action:
        if key in DETAIL_CLOSE_KEYS:
            self.view = View.BOARD
            self.detail_scroll = 0
            return Action.NONE
        if key == "r":
            return Action.RELOAD
        page = max(1, self.detail_page_height)
        if key in {"DOWN", "j"}:
            self.scroll_detail(1)
        elif key in {"UP", "k"}:
            self.scroll_detail(-1)
        elif key in {"HOME", "g"}:
            self.detail_scroll = 0
        elif key in {"END", "G"}:
            self.detail_scroll = self.detail_scroll_max
        elif key in {"PAGE_DOWN", "CTRL_F", " "}:
            self.scroll_detail(page)
        elif key in {"PAGE_UP", "CTRL_B"}:
            self.scroll_detail(-page)
        return Action.NONE

    def _handle_search_key(self, key: str) -> Action:
        if key == "ESC":
            self.view = View.BOARD
        elif key == "ENTER":
            self.confirm_search()
        elif key == "UP":
            self.search_selected = clamp_index(self.search_selected - 1, len(self.search_results))
        elif key == "DOWN":
            self.search_selected = clamp_index(self.search_selected + 1, len(self.search_results))
        elif key == "CTRL_U":
            self.set_search_query("")
        elif key == "BACKSPACE":
            self.set_search_query(self.search_query[:-1])
        elif is_text_key(key):
            self.set_search_query(self.search_query + key)
        return Action.NONE

    # -- board -------------------------------------------------------------

    def move_column(self, step: int) -> None:
        column = self.selected_column
        for _ in range(abs(step)):
            column = column.next() if step > 0 else column.prev()
        self.selected_column = column
        self.selected_index = 0

    def move_row(self, step: int) -> None:
        count = len(self.columns[self.selected_column])
        self.selected_index = clamp_index(self.selected_index + step, count)

    def open_detail(self) -> bool:
        if self.selected_issue() is None:
            return False
        self.detail_scroll = 0
        self.view = View.DETAIL
        return True

    def focus_issue(self, issue_id: str) -> bool:
        """Point the board selection at ``issue_id`` using its current status."""
        issue = self.issue_by_id(issue_id)
        if issue is None:
            return False
        column = Column.for_status(issue.status)
        members = self.columns[column]
        index = next((idx for idx, member in enumerate(members) if member.id == issue_id), 0)
        self.selected_column = column
        self.selected_index = index
        return True

    # -- detail ------------------------------------------------------------

    def scroll_detail(self, delta: int) -> None:
        self.detail_scroll = max(0, min(self.detail_scroll + delta, self.detail_scroll_max))

    def set_viewport(self, viewport: Viewport) -> None:
        """Record renderer measurements and pull the detail scroll back in range."""
        scroll_max = max(0, viewport.detail_scroll_max)
        page_height = max(0, viewport.detail_page_height)
        clamped = max(0, min(self.detail_scroll, scroll_max))
        if clamped != self.detail_scroll:
            self.detail_scroll = clamped
            self.dirty = True
        self.detail_scroll_max = scroll_max
        self.detail_page_height = page_height

    # -- search ------------------------------------------------------------

    def open_search(self) -> None:
        self.search_query = ""
        self.search_selected = 0
        self.refresh_search()
        self.view = View.SEARCH

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self.search_selected = 0
        self.refresh_search()

    def refresh_search(self) -> None:
        """Recompute results for the current query and clamp the selection."""
        self.search_results = rank_issues(self.issues, self.search_query)
        self.search_selected = clamp_index(self.search_selected, len(self.search_results))

    def confirm_search(self) -> bool:
        result = self.selected_search_result()
        if result is None:
            return False
        if not self.focus_issue(result.issue_id):
            return False
        self.detail_scroll = 0
        self.view = View.DETAIL
        return True

    # -- reload ------------------------------------------------------------

    def reconcile(self, new_issues: Iterable[Issue]) -> None:
        """Swap in a new snapshot and re-clamp every derived position.

        Selection stays positional within the current column; it does not
        follow the previously selected issue by id.
        """
        self.issues = list(new_issues)
        self.columns = partition_columns(self.issues)
        self.selected_index = clamp_index(self.selected_index, len(self.columns[self.selected_column]))
        self.detail_scroll = max(0, min(self.detail_scroll, self.detail_scroll_max))
        if self.view is View.SEARCH:
            self.refresh_search()
        self.dirty = True

    # -- status line -------------------------------------------------------

    def flash(self, message: str, now: float, seconds: float = STATUS_MESSAGE_SECONDS) -> None:
        self.status_message = message
        self.status_message_until = now + seconds
        self.dirty = True

    def expire_status(self, now: float) -> None:
        if self.status_message and now >= self.status_message_until:
            self.status_message = ""
            self.status_message_until = 0.0
            self.dirty = True
