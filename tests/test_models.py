"""Issue model parsing and ordering tests."""

from __future__ import annotations

import unittest

from beadboard.issues import Issue, IssueType, Status, normalize_priority, priority_label, sort_for_board


class StatusParseTests(unittest.TestCase):
    def test_known_statuses_parse_case_and_separator_insensitively(self) -> None:
        self.assertIs(Status.parse("open"), Status.OPEN)
        self.assertIs(Status.parse("IN_PROGRESS"), Status.IN_PROGRESS)
        self.assertIs(Status.parse("in-progress"), Status.IN_PROGRESS)
        self.assertIs(Status.parse(" in progress "), Status.IN_PROGRESS)
        self.assertIs(Status.parse("Closed"), Status.CLOSED)

    def test_unrecognized_status_maps_to_unknown(self) -> None:
        self.assertIs(Status.parse("wontfix"), Status.UNKNOWN)
        self.assertIs(Status.parse(None), Status.UNKNOWN)
        self.assertIs(Status.parse(3), Status.UNKNOWN)

    def test_status_label_uses_spaces(self) -> None:
        self.assertEqual(Status.IN_PROGRESS.label, "in progress")


class IssueTypeParseTests(unittest.TestCase):
    def test_known_and_unknown_types(self) -> None:
        self.assertIs(IssueType.parse("bug"), IssueType.BUG)
        self.assertIs(IssueType.parse("Epic"), IssueType.EPIC)
        self.assertIs(IssueType.parse("spike"), IssueType.OTHER)
        self.assertIs(IssueType.parse(3), IssueType.OTHER)

    def test_missing_type_matches_the_field_default(self) -> None:
        default = Issue(id="bd-1", title="t", status=Status.OPEN).issue_type
        self.assertIs(IssueType.parse(None), default)
        self.assertIs(IssueType.parse("  "), default)
        self.assertIs(default, IssueType.TASK)


class PriorityTests(unittest.TestCase):
    def test_out_of_range_priorities_clamp(self) -> None:
        self.assertEqual(normalize_priority(9), 4)
        self.assertEqual(normalize_priority(-1), 0)

    def test_missing_or_garbage_priority_defaults_to_two(self) -> None:
        self.assertEqual(normalize_priority(None), 2)
        self.assertEqual(normalize_priority("high"), 2)
        self.assertEqual(normalize_priority(True), 2)

    def test_string_priorities_accept_p_prefix(self) -> None:
        self.assertEqual(normalize_priority("P1"), 1)
        self.assertEqual(normalize_priority("3"), 3)

    def test_priority_label(self) -> None:
        self.assertEqual(priority_label(0), "P0")


class IssueTests(unittest.TestCase):
    def test_is_blocked_from_ids_or_count(self) -> None:
        self.assertFalse(Issue(id="a", title="t", status=Status.OPEN).is_blocked)
        self.assertTrue(Issue(id="a", title="t", status=Status.OPEN, blocked_by=("b",)).is_blocked)
        self.assertTrue(Issue(id="a", title="t", status=Status.OPEN, dependency_count=2).is_blocked)

    def test_sort_for_board_orders_priority_then_recency(self) -> None:
        issues = [
            Issue(id="old-p1", title="", status=Status.OPEN, priority=1, updated_at="2024-01-01T00:00:00Z"),
            Issue(id="p0", title="", status=Status.OPEN, priority=0, updated_at="2023-01-01T00:00:00Z"),
            Issue(id="new-p1", title="", status=Status.OPEN, priority=1, updated_at="2024-06-01T00:00:00Z"),
        ]

        ordered = [issue.id for issue in sort_for_board(issues)]

        self.assertEqual(ordered, ["p0", "new-p1", "old-p1"])


if __name__ == "__main__":
    unittest.main()
