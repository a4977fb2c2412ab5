"""Board bootstrap tests: store discovery, first load, and dump output."""

from __future__ import annotations

import io
import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from beadboard.errors import BackendError, StartupError, describe_error
from beadboard.runtime.app import BoardOptions, load_initial_state, run_board


def _make_project(root: Path) -> Path:
    beads_dir = root / ".beads"
    beads_dir.mkdir()
    conn = sqlite3.connect(beads_dir / "beads.db")
    try:
        conn.executescript(
            """
            CREATE TABLE issues (
                id TEXT PRIMARY KEY, title TEXT, description TEXT, status TEXT, priority INTEGER,
                issue_type TEXT, assignee TEXT, created_at TEXT, updated_at TEXT, deleted_at TEXT
            );
            CREATE TABLE labels (issue_id TEXT, label TEXT);
            CREATE TABLE dependencies (issue_id TEXT, depends_on_id TEXT);
            INSERT INTO issues (id, title, status, priority, updated_at) VALUES ('bd-1', 'Wire up board', 'open', 1, '2024-01-01');
            INSERT INTO issues (id, title, status, priority, updated_at) VALUES ('bd-2', 'Other work', 'closed', 2, '2024-01-01');
            INSERT INTO labels (issue_id, label) VALUES ('bd-1', 'ralph');
            """
        )
        conn.commit()
    finally:
        conn.close()
    return beads_dir


class BootstrapTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_initial_state_loads_labelled_snapshot(self) -> None:
        beads_dir = _make_project(self.root)

        state, _source, found = load_initial_state(BoardOptions(label_filter="ralph", start_dir=self.root))

        self.assertEqual(found, beads_dir)
        self.assertEqual([issue.id for issue in state.issues], ["bd-1"])
        self.assertEqual(state.label_filter, "ralph")

    def test_initial_load_failure_is_a_startup_error(self) -> None:
        _make_project(self.root)
        with mock.patch(
            "beadboard.issues.sqlite_source.SqliteIssueSource.load_issues",
            side_effect=BackendError("Failed to query issues"),
        ):
            with self.assertRaises(StartupError) as ctx:
                load_initial_state(BoardOptions(start_dir=self.root))

        self.assertIn("Failed to query issues", describe_error(ctx.exception))

    def test_dump_prints_plain_board(self) -> None:
        _make_project(self.root)
        out = io.StringIO()

        with mock.patch("sys.stdout", out):
            run_board(BoardOptions(label_filter=None, dump=True, start_dir=self.root))

        text = out.getvalue()
        self.assertIn("all issues, 2 issues", text)
        self.assertIn("P1 bd-1 Wire up board", text)
        self.assertIn("DONE (1)", text)


if __name__ == "__main__":
    unittest.main()
