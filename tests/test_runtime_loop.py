from __future__ import annotations

from contextlib import contextmanager
import unittest
from unittest import mock

from beadboard.errors import BackendError, InputError
from beadboard.issues import Issue, Status
from beadboard.runtime import RuntimeLoopTiming, run_main_loop
from beadboard.runtime.loop import reload_into
from beadboard.state import AppState, View, Viewport


def _issue(issue_id: str, status: Status = Status.OPEN) -> Issue:
    return Issue(id=issue_id, title=issue_id, status=status)


class _FakeTerminal:
    def __init__(self) -> None:
        self.entered = 0
        self.exited = 0

    @contextmanager
    def raw_mode(self):
        self.entered += 1
        try:
            yield
        finally:
            self.exited += 1


class _FakeSource:
    def __init__(self, *snapshots) -> None:
        self._snapshots = list(snapshots)
        self.calls: list[str | None] = []

    def load_issues(self, label_filter):
        self.calls.append(label_filter)
        item = self._snapshots.pop(0) if len(self._snapshots) > 1 else self._snapshots[0]
        if isinstance(item, Exception):
            raise item
        return list(item)


class _FakeWatcher:
    def __init__(self, changes: list[bool]) -> None:
        self._changes = list(changes)

    def poll(self) -> bool:
        return self._changes.pop(0) if self._changes else False


def _run(state: AppState, keys: list, source=None, watcher=None, render=None, sizes=None):
    source = source or _FakeSource([])
    terminal = _FakeTerminal()
    sizes = list(sizes or [(100, 30)])

    def terminal_size(_fallback):
        columns, lines = sizes.pop(0) if len(sizes) > 1 else sizes[0]
        return mock.Mock(columns=columns, lines=lines)

    with mock.patch(
        "beadboard.runtime.loop.shutil.get_terminal_size",
        side_effect=terminal_size,
    ), mock.patch(
        "beadboard.runtime.loop.read_key",
        side_effect=keys,
    ), mock.patch(
        "beadboard.runtime.loop.render_state",
        side_effect=render or (lambda *_args, **_kwargs: None),
    ) as render_mock:
        run_main_loop(
            state=state,
            terminal=terminal,  # type: ignore[arg-type]
            stdin_fd=0,
            source=source,
            label_filter="ralph",
            watcher=watcher,
            timing=RuntimeLoopTiming(key_timeout_ms=1),
            monotonic=lambda: 50.0,
        )
    return terminal, render_mock


class RuntimeLoopBehaviorTests(unittest.TestCase):
    def test_quit_key_exits_and_restores_terminal(self) -> None:
        terminal, render_mock = _run(AppState(issues=[_issue("a")]), ["q"])

        self.assertEqual(terminal.entered, 1)
        self.assertEqual(terminal.exited, 1)
        render_mock.assert_called_once()
        self.assertEqual(render_mock.call_args.args[1:3], (100, 30))

    def test_resize_repaints_at_new_size_without_keypress(self) -> None:
        _terminal, render_mock = _run(
            AppState(issues=[_issue("a")]),
            ["", "", "q"],
            sizes=[(100, 30), (60, 20)],
        )

        painted = [call.args[1:3] for call in render_mock.call_args_list]
        self.assertEqual(painted, [(100, 30), (60, 20)])

    def test_unchanged_size_does_not_repaint(self) -> None:
        _terminal, render_mock = _run(AppState(issues=[_issue("a")]), ["", "", "q"])
        render_mock.assert_called_once()

    def test_refresh_key_reloads_with_label_filter(self) -> None:
        state = AppState(issues=[_issue("a")])
        source = _FakeSource([_issue("a"), _issue("b")])

        _run(state, ["r", "q"], source=source)

        self.assertEqual(source.calls, ["ralph"])
        self.assertEqual([issue.id for issue in state.issues], ["a", "b"])
        self.assertEqual(state.status_message, "Reloaded")

    def test_store_change_triggers_reload_without_keypress(self) -> None:
        state = AppState(issues=[_issue("a")])
        source = _FakeSource([_issue("z", Status.CLOSED)])

        _run(state, ["", "q"], source=source, watcher=_FakeWatcher([True]))

        self.assertEqual(source.calls, ["ralph"])
        self.assertEqual([issue.id for issue in state.issues], ["z"])

    def test_failed_reload_keeps_snapshot_and_flashes_error(self) -> None:
        state = AppState(issues=[_issue("a")])
        source = _FakeSource(BackendError("bd list failed: boom"))

        _run(state, ["r", "q"], source=source)

        self.assertEqual([issue.id for issue in state.issues], ["a"])
        self.assertIn("boom", state.status_message)

    def test_malformed_input_is_dropped(self) -> None:
        state = AppState(issues=[_issue("a"), _issue("b")])

        _run(state, [InputError("bad"), "j", "q"])

        self.assertEqual(state.selected_index, 1)

    def test_keyboard_interrupt_exits_loop(self) -> None:
        terminal, _render = _run(AppState(), [KeyboardInterrupt()])
        self.assertEqual(terminal.exited, 1)

    def test_detail_viewport_is_fed_back_into_state(self) -> None:
        state = AppState(issues=[_issue("a")])
        state.view = View.DETAIL
        state.detail_scroll = 40

        _run(state, ["q"], render=lambda *_args, **_kwargs: Viewport(detail_scroll_max=5, detail_page_height=20))

        self.assertEqual(state.detail_scroll, 5)
        self.assertEqual(state.detail_page_height, 20)


class ReloadIntoTests(unittest.TestCase):
    def test_success_reconciles_and_returns_none(self) -> None:
        state = AppState(issues=[_issue("a"), _issue("b")])
        state.selected_index = 1

        result = reload_into(state, _FakeSource([_issue("a")]), None, now=1.0)

        self.assertIsNone(result)
        self.assertEqual(state.selected_index, 0)

    def test_failure_returns_error_and_flashes_cause_chain(self) -> None:
        state = AppState(issues=[_issue("a")])
        try:
            raise OSError("disk gone")
        except OSError as cause:
            error = BackendError("Failed to query issues")
            error.__cause__ = cause

        with self.assertLogs("beadboard.runtime.loop", level="WARNING"):
            result = reload_into(state, _FakeSource(error), None, now=1.0)

        self.assertIs(result, error)
        self.assertEqual(state.status_message, "Reload failed: Failed to query issues: disk gone")
        self.assertEqual([issue.id for issue in state.issues], ["a"])


if __name__ == "__main__":
    unittest.main()
