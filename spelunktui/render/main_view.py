"""Main session view: search header, job status row, results box, footer.

Each builder returns fully styled rows sized to its rectangle. Nothing here
touches the terminal or mutates state.
"""

from __future__ import annotations

from ..ansi import (
    RESET,
    center_ansi_line,
    fit_ansi_line,
    sanitize_terminal_text,
    slice_ansi_line,
    wrap_ansi_line,
)
from ..layout import Rect, ScreenLayout
from ..query_buffer import caret_line_column
from ..results import (
    NO_SELECTION_TEXT,
    SPARKLINE_BUCKETS,
    TABLE_SOURCETYPE_WIDTH,
    TABLE_TIME_WIDTH,
    raw_event_lines,
    sparkline_buckets,
    table_row,
)
from ..state import EditorMode, InputMode, SessionState, ViewFocus, ViewMode
from ..ui_theme import UITheme
from .boxes import box_rows, centered_body

SPARK_LEVELS = " ▁▂▃▄▅▆▇█"
SELECTED_MARKER = ">> "
EMPTY_RESULTS_TEXT = "No results available."
FOOTER_HINTS: tuple[tuple[str, str], ...] = (
    (" e ", "Search"),
    (" ↑/↓ ", "Scroll"),
    (" ^V ", "View Mode"),
    (" ^X ", "Open in Editor"),
    (" ^l ", "Load"),
    (" ^s ", "Save"),
    (" q ", "Quit"),
)


def search_title(state: SessionState) -> str:
    if state.saved_name:
        return f"SPL Search [{state.saved_name}]"
    return "SPL Search"


def search_box_rows(state: SessionState, rect: Rect) -> list[str]:
    theme = state.theme
    inner = rect.inner()
    style = theme.input_edit if state.input_mode is InputMode.EDITING else theme.text
    lines = sanitize_terminal_text(state.query).split("\n")
    body: list[str] = []
    for line in lines[state.viewport.v_scroll : state.viewport.v_scroll + inner.height]:
        visible = slice_ansi_line(line, state.viewport.h_scroll, inner.width)
        body.append(f"{style}{visible}{RESET}" if visible else "")
    title = f"{theme.title_main}{search_title(state)}"
    return box_rows(rect.width, rect.height, body, border=theme.title_main, title=title)


def query_cursor(state: SessionState, rect: Rect) -> tuple[int, int] | None:
    """Screen cell (0-based col, row) of the caret, or None when scrolled out."""
    inner = rect.inner()
    line, column = caret_line_column(state.query, state.caret)
    row = line - state.viewport.v_scroll
    col = column - state.viewport.h_scroll
    if 0 <= row < inner.height and 0 <= col < inner.width:
        return inner.x + col, inner.y + row
    return None


def cursor_shape(state: SessionState) -> str | None:
    """``bar``/``block`` for the editing caret, ``None`` when it is hidden."""
    if state.input_mode in {InputMode.SAVE_SEARCH, InputMode.LOCAL_SEARCH}:
        return "bar"
    if state.input_mode is not InputMode.EDITING:
        return None
    if state.editor_mode is EditorMode.VIM_NORMAL:
        return "block"
    return "bar"


def sparkline_rows(state: SessionState, rect: Rect) -> list[str]:
    theme = state.theme
    inner = rect.inner()
    body: list[str] = []
    buckets = min(SPARKLINE_BUCKETS, inner.width)
    counts = sparkline_buckets(state.results, buckets) if state.results and buckets > 0 else []
    peak = max(counts, default=0)
    if peak > 0 and inner.height > 0:
        steps = len(SPARK_LEVELS) - 1
        levels = [round(count / peak * inner.height * steps) for count in counts]
        for row in range(inner.height):
            floor = (inner.height - 1 - row) * steps
            cells = "".join(SPARK_LEVELS[max(0, min(steps, level - floor))] for level in levels)
            body.append(f"{theme.highlight}{cells}{RESET}")
    title = f"{theme.title_main}Activity"
    return box_rows(rect.width, rect.height, body, border=theme.border, title=title)


def job_status_line(state: SessionState, width: int, web_url: str | None, now: float) -> str:
    theme = state.theme
    job = state.job
    if job is None:
        return center_ansi_line(f"{theme.text}No active job.{RESET}", width)
    label = theme.title_secondary
    text = theme.text
    status = job.status
    elapsed = f"(Elapsed: {max(0, int(now - job.created_at))}s) "
    if status is None:
        line = f"{label}Status: {text}Running {elapsed}{label}(SID: {job.sid}){RESET}"
        return center_ansi_line(line, width)
    phase = "Done" if status.is_done else "Running"
    parts = [
        f"{label}Status: {text}{phase} {'' if status.is_done else elapsed}",
        f"{label} | Count: {text}{status.result_count} ",
        f"{label} | Time: {text}{status.run_duration:.2f}s ",
    ]
    if web_url:
        parts.append(f"{label} | URL: {theme.highlight}{web_url}")
    return center_ansi_line("".join(parts) + RESET, width)


def footer_line(theme: UITheme, width: int) -> str:
    parts = [f"{theme.title_main}{key}{theme.text}{label}" for key, label in FOOTER_HINTS]
    return center_ansi_line(f"{theme.text}  |  ".join(parts) + RESET, width)


def _raw_body(state: SessionState, width: int, height: int) -> list[str]:
    theme = state.theme
    text_width = max(1, width - 2)
    body: list[str] = []
    for raw in raw_event_lines(state.results)[state.scroll_offset :]:
        if raw.key is None:
            rendered = f"{theme.border}{'-' * max(0, text_width - 4)}{RESET}"
        elif raw.key:
            rendered = f"{theme.highlight}{raw.key}: {RESET}{theme.text}{raw.value}{RESET}"
        else:
            rendered = f"{theme.text}{raw.value}{RESET}"
        for chunk in wrap_ansi_line(rendered, text_width):
            body.append(" " + chunk)
            if len(body) >= height:
                return body
    return body


def _table_header(theme: UITheme, width: int) -> str:
    header = (
        " " * len(SELECTED_MARKER)
        + "Time".ljust(TABLE_TIME_WIDTH + 1)
        + "Sourcetype".ljust(TABLE_SOURCETYPE_WIDTH + 1)
        + "Message"
    )
    return f"{theme.title_secondary}{theme.underline}{fit_ansi_line(header, width)}{RESET}"


def _table_rows(state: SessionState, pane: Rect) -> list[str]:
    theme = state.theme
    rows = [_table_header(theme, pane.width)]
    visible = max(0, pane.height - 1)
    for index in range(state.table_offset, min(len(state.results), state.table_offset + visible)):
        time_text, sourcetype, message = (sanitize_terminal_text(part) for part in table_row(state.results[index]))
        selected = index == state.selection
        cells = (
            (SELECTED_MARKER if selected else " " * len(SELECTED_MARKER))
            + fit_ansi_line(time_text, TABLE_TIME_WIDTH)
            + " "
            + fit_ansi_line(sourcetype, TABLE_SOURCETYPE_WIDTH)
            + " "
            + message
        )
        style = theme.selected if selected else theme.text
        rows.append(f"{style}{fit_ansi_line(cells, pane.width)}{RESET}")
    return rows


def _detail_rows(state: SessionState, pane: Rect) -> list[str]:
    theme = state.theme
    text_width = max(1, pane.width - 1)
    if state.selection is None or not state.detail_lines:
        return [f" {theme.dim}{NO_SELECTION_TEXT}{RESET}"]
    rows: list[str] = []
    for line in state.detail_lines[state.detail_scroll :]:
        for chunk in wrap_ansi_line(line, text_width):
            rows.append(" " + chunk)
            if len(rows) >= pane.height:
                return rows
    return rows


def _table_body(state: SessionState, layout: ScreenLayout) -> list[str]:
    theme = state.theme
    list_pane = layout.list_pane
    detail_pane = layout.detail_pane or Rect(list_pane.right + 1, list_pane.y, 0, list_pane.height)
    focused = state.view_focus in {ViewFocus.CONTENT_LIST, ViewFocus.CONTENT_DETAIL}
    divider = f"{theme.label if focused else theme.border}│{RESET}"
    left = _table_rows(state, list_pane)
    right = _detail_rows(state, detail_pane)
    body: list[str] = []
    for row in range(list_pane.height):
        left_text = left[row] if row < len(left) else ""
        right_text = right[row] if row < len(right) else ""
        body.append(
            fit_ansi_line(left_text, list_pane.width) + divider + fit_ansi_line(right_text, detail_pane.width)
        )
    return body


def results_box_rows(state: SessionState, layout: ScreenLayout) -> list[str]:
    theme = state.theme
    rect = layout.content
    inner = rect.inner()
    title = f"{theme.title_main}Search Results ({state.view_mode.value})"
    status = f" {theme.label}{sanitize_terminal_text(state.status_message).replace(chr(10), ' ')}{RESET} "
    if not state.results:
        body = centered_body(f"{theme.text}{EMPTY_RESULTS_TEXT}{RESET}", inner.width, inner.height)
    elif state.view_mode is ViewMode.TABLE:
        body = _table_body(state, layout)
    else:
        body = _raw_body(state, inner.width, inner.height)
    bottom = status if state.status_message else ""
    return box_rows(rect.width, rect.height, body, border=theme.border, title=title, bottom_label=bottom)


__all__ = [
    "EMPTY_RESULTS_TEXT",
    "FOOTER_HINTS",
    "SELECTED_MARKER",
    "cursor_shape",
    "footer_line",
    "job_status_line",
    "query_cursor",
    "results_box_rows",
    "search_box_rows",
    "search_title",
    "sparkline_rows",
]
