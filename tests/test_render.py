"""Frame composition tests: main view sections, overlays, and cursor placement.

Assertions run on the frame text with escape sequences stripped, except
where cursor control sequences themselves are under test.
"""

from __future__ import annotations

import unittest

from spelunktui.ansi import ansi_display_width, strip_ansi
from spelunktui.layout import compute_layout
from spelunktui.models import JobStatus
from spelunktui.render import build_frame
from spelunktui.render.main_view import cursor_shape, job_status_line, sparkline_rows
from spelunktui.render.overlays import CONFIRM_OVERWRITE_TEXT
from spelunktui.results import set_selection
from spelunktui.state import EditorMode, InputMode, JobRecord, SessionState, ViewMode


def _frame(state: SessionState, width: int = 80, height: int = 24, web_url: str | None = None, now: float = 0.0):
    return build_frame(state, compute_layout(width, height, state.view_mode), web_url=web_url, now=now)


def _plain(state: SessionState, **kwargs) -> str:
    return strip_ansi(_frame(state, **kwargs).text)


class MainViewTests(unittest.TestCase):
    def test_empty_session(self) -> None:
        text = _plain(SessionState())
        self.assertIn("SPL Search", text)
        self.assertIn("Activity", text)
        self.assertIn("No active job.", text)
        self.assertIn("Search Results (Table)", text)
        self.assertIn("No results available.", text)
        self.assertIn("Press 'q' to quit", text)
        self.assertIn("View Mode", text)

    def test_every_row_fills_the_screen_width(self) -> None:
        frame = _frame(SessionState(query="index=main"))
        body = frame.text.removeprefix("\033[?25l\033[H")
        rows = body.split("\r\n")
        self.assertEqual(len(rows), 24)
        for row in rows:
            self.assertEqual(ansi_display_width(row), 80)

    def test_saved_name_in_search_title(self) -> None:
        self.assertIn("SPL Search [errors]", _plain(SessionState(saved_name="errors")))

    def test_table_view_marks_selected_row(self) -> None:
        state = SessionState(
            results=[
                {"_time": "2024-01-01T00:00:00", "sourcetype": "syslog", "_raw": "first event"},
                {"_time": "2024-01-01T00:00:01", "sourcetype": "syslog", "_raw": "second event"},
            ]
        )
        set_selection(state, 1)
        text = _plain(state, width=160, height=30)
        self.assertIn("Time", text)
        self.assertIn("Sourcetype", text)
        self.assertIn(">> 2024-01-01T00:00:01", text)
        self.assertIn("second event", text)
        self.assertIn("_raw: second event", text)

    def test_raw_view_lists_fields(self) -> None:
        state = SessionState(view_mode=ViewMode.RAW_EVENTS, results=[{"_raw": "hello", "host": "web01"}])
        text = _plain(state)
        self.assertIn("Search Results (Raw)", text)
        self.assertIn("_raw: hello", text)
        self.assertIn("host: web01", text)

    def test_backend_control_bytes_are_neutralized(self) -> None:
        state = SessionState(view_mode=ViewMode.RAW_EVENTS, results=[{"_raw": "bad\x1b[2Jtext"}])
        self.assertNotIn("\x1b[2J", _frame(state).text)


class JobStatusLineTests(unittest.TestCase):
    def test_running_job_shows_elapsed_and_sid(self) -> None:
        state = SessionState(job=JobRecord(sid="s1", created_at=10.0))
        line = strip_ansi(job_status_line(state, 78, None, now=15.5))
        self.assertIn("Status: Running (Elapsed: 5s) (SID: s1)", line)

    def test_done_job_shows_counts_and_url(self) -> None:
        status = JobStatus(is_done=True, dispatch_state="DONE", result_count=3, run_duration=1.5)
        state = SessionState(job=JobRecord(sid="s1", created_at=0.0, status=status))
        line = strip_ansi(job_status_line(state, 120, "https://splunk/x", now=99.0))
        self.assertIn("Status: Done", line)
        self.assertIn("| Count: 3", line)
        self.assertIn("| Time: 1.50s", line)
        self.assertIn("| URL: https://splunk/x", line)
        self.assertNotIn("Elapsed", line)


class OverlayRenderTests(unittest.TestCase):
    def test_help_overlay(self) -> None:
        text = _plain(SessionState(input_mode=InputMode.HELP), width=100, height=40)
        self.assertIn("Keyboard Shortcuts", text)
        self.assertIn("Show this Help", text)

    def test_confirm_overwrite_overlay(self) -> None:
        text = _plain(SessionState(input_mode=InputMode.CONFIRM_OVERWRITE), width=120, height=40)
        self.assertIn("Confirm Overwrite", text)
        self.assertIn(CONFIRM_OVERWRITE_TEXT, text)

    def test_load_overlay_marks_selection(self) -> None:
        state = SessionState(
            input_mode=InputMode.LOAD_SEARCH,
            saved_search_names=["alpha", "beta"],
            saved_search_index=1,
        )
        text = _plain(state, width=100, height=40)
        self.assertIn("Saved Searches", text)
        self.assertIn(">> beta", text)

    def test_save_overlay_places_cursor_after_input(self) -> None:
        state = SessionState(input_mode=InputMode.SAVE_SEARCH, save_name_input="abc")
        frame = _frame(state, width=100, height=40)
        self.assertIn("Save Search As", strip_ansi(frame.text))
        self.assertEqual(frame.cursor_shape, "bar")
        self.assertIsNotNone(frame.cursor)
        self.assertTrue(frame.text.endswith("\033[?25h"))


class CursorTests(unittest.TestCase):
    def test_cursor_hidden_in_normal_mode(self) -> None:
        frame = _frame(SessionState(query="abc"))
        self.assertIsNone(frame.cursor)
        self.assertNotIn("\033[?25h", frame.text)

    def test_editing_cursor_follows_caret(self) -> None:
        state = SessionState(query="abc", caret=2, input_mode=InputMode.EDITING)
        frame = _frame(state)
        self.assertEqual(frame.cursor, (4, 2))
        self.assertTrue(frame.text.endswith("\033[3;5H\033[?25h"))

    def test_cursor_shapes(self) -> None:
        self.assertIsNone(cursor_shape(SessionState()))
        self.assertEqual(cursor_shape(SessionState(input_mode=InputMode.EDITING)), "bar")
        vim = SessionState(input_mode=InputMode.EDITING, editor_mode=EditorMode.VIM_NORMAL)
        self.assertEqual(cursor_shape(vim), "block")


class SparklineTests(unittest.TestCase):
    def test_rows_fill_rect(self) -> None:
        state = SessionState(
            results=[{"_time": "2024-01-01T00:00:00"}, {"_time": "2024-01-01T00:01:00"}]
        )
        layout = compute_layout(80, 24, state.view_mode)
        rows = sparkline_rows(state, layout.sparkline)
        self.assertEqual(len(rows), layout.sparkline.height)
        self.assertIn("█", strip_ansi("".join(rows)))


if __name__ == "__main__":
    unittest.main()
