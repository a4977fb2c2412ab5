"""``bd`` command backend tests with a mocked subprocess."""

from __future__ import annotations

import json
import subprocess
import unittest
from pathlib import Path
from unittest import mock

from beadboard.errors import BackendError
from beadboard.issues import IssueType, Status
from beadboard.issues.command_source import CommandIssueSource, parse_issue_listing


def _completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["bd"], returncode=returncode, stdout=stdout, stderr=stderr)


LISTING = [
    {
        "id": "bd-1",
        "title": "Older",
        "status": "open",
        "priority": 1,
        "issue_type": "bug",
        "labels": ["ralph"],
        "updated_at": "2024-01-01T00:00:00Z",
        "dependency_count": 1,
    },
    {
        "id": "bd-2",
        "title": "Newer",
        "status": "in_progress",
        "priority": 1,
        "labels": ["ralph", "ui"],
        "updated_at": "2024-02-01T00:00:00Z",
    },
    {"id": "bd-3", "title": "Unlabelled", "status": "closed", "priority": 0},
    {"id": "bd-4", "title": "Tombstoned", "status": "tombstone", "labels": ["ralph"]},
    {"title": "no id"},
]


class ParseIssueListingTests(unittest.TestCase):
    def test_missing_fields_get_defaults(self) -> None:
        issues = parse_issue_listing(json.dumps([{"id": "bd-9"}]))

        self.assertEqual(len(issues), 1)
        issue = issues[0]
        self.assertEqual(issue.title, "")
        self.assertEqual(issue.priority, 2)
        self.assertIs(issue.status, Status.UNKNOWN)
        self.assertIs(issue.issue_type, IssueType.TASK)
        self.assertEqual(issue.labels, ())
        self.assertIsNone(issue.description)

    def test_unknown_status_is_kept_as_unknown(self) -> None:
        issues = parse_issue_listing(json.dumps([{"id": "bd-1", "status": "review"}]))
        self.assertIs(issues[0].status, Status.UNKNOWN)

    def test_deleted_and_idless_records_are_skipped(self) -> None:
        ids = [issue.id for issue in parse_issue_listing(json.dumps(LISTING))]
        self.assertEqual(ids, ["bd-1", "bd-2", "bd-3"])

    def test_wrapped_issues_object_is_accepted(self) -> None:
        issues = parse_issue_listing(json.dumps({"issues": [{"id": "bd-1"}]}))
        self.assertEqual([issue.id for issue in issues], ["bd-1"])

    def test_dependency_objects_and_counts(self) -> None:
        payload = json.dumps(
            [
                {
                    "id": "bd-1",
                    "blocked_by": [{"depends_on_id": "bd-7"}, "bd-8"],
                    "blocks": [{"issue_id": "bd-2"}],
                    "dependent_count": 4,
                }
            ]
        )
        issue = parse_issue_listing(payload)[0]
        self.assertEqual(issue.blocked_by, ("bd-7", "bd-8"))
        self.assertEqual(issue.dependency_count, 2)
        self.assertEqual(issue.blocks, ("bd-2",))
        self.assertEqual(issue.dependent_count, 4)

    def test_malformed_json_raises_backend_error(self) -> None:
        with self.assertRaises(BackendError):
            parse_issue_listing("{not json")

    def test_non_list_payload_raises_backend_error(self) -> None:
        with self.assertRaises(BackendError):
            parse_issue_listing('"text"')

    def test_blank_output_is_empty_board(self) -> None:
        self.assertEqual(parse_issue_listing("  \n"), [])


class CommandIssueSourceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.source = CommandIssueSource(project_root=Path("/work/project"))

    def test_runs_list_command_in_project_root(self) -> None:
        with mock.patch(
            "beadboard.issues.command_source.subprocess.run",
            return_value=_completed("[]"),
        ) as run:
            self.assertEqual(self.source.load_issues(None), [])

        args, kwargs = run.call_args
        self.assertEqual(args[0], ["bd", "list", "--json", "--all", "--limit", "1000"])
        self.assertEqual(kwargs["cwd"], Path("/work/project"))
        self.assertFalse(kwargs["check"])

    def test_label_filter_and_board_order(self) -> None:
        with mock.patch(
            "beadboard.issues.command_source.subprocess.run",
            return_value=_completed(json.dumps(LISTING)),
        ):
            everything = self.source.load_issues(None)
            labelled = self.source.load_issues("ralph")

        self.assertEqual([issue.id for issue in everything], ["bd-3", "bd-2", "bd-1"])
        self.assertEqual([issue.id for issue in labelled], ["bd-2", "bd-1"])
        self.assertTrue(labelled[1].is_blocked)

    def test_nonzero_exit_raises_backend_error_with_stderr(self) -> None:
        with mock.patch(
            "beadboard.issues.command_source.subprocess.run",
            return_value=_completed("", returncode=1, stderr="warning\nno database found\n"),
        ):
            with self.assertRaises(BackendError) as ctx:
                self.source.load_issues(None)
        self.assertIn("no database found", str(ctx.exception))

    def test_launch_failure_raises_backend_error(self) -> None:
        with mock.patch(
            "beadboard.issues.command_source.subprocess.run",
            side_effect=FileNotFoundError("bd"),
        ):
            with self.assertRaises(BackendError):
                self.source.load_issues(None)

    def test_timeout_raises_backend_error(self) -> None:
        with mock.patch(
            "beadboard.issues.command_source.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="bd", timeout=30),
        ):
            with self.assertRaises(BackendError):
                self.source.load_issues(None)


if __name__ == "__main__":
    unittest.main()
