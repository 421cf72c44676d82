"""Mouse interaction routing for the search, list, and detail panes."""

from __future__ import annotations

from collections.abc import Callable

from ..layout import ScreenLayout
from ..query_buffer import caret_from_position
from ..results import navigate, scroll_detail, set_selection
from ..state import InputMode, SessionState, ViewFocus, ViewMode
from .key_common import parse_mouse_col_row

WHEEL_STEP = 1


class MouseHandler:
    """Route SGR mouse tokens to the pane drawn under the pointer."""

    def __init__(self, state: SessionState, current_layout: Callable[[], ScreenLayout]) -> None:
        self.state = state
        self.current_layout = current_layout

    def handle(self, mouse_key: str) -> bool:
        """Return True when ``mouse_key`` was a mouse token (handled or ignored)."""
        if mouse_key.startswith("MOUSE_WHEEL_"):
            self._wheel(mouse_key)
            return True
        if mouse_key.startswith("MOUSE_LEFT_DOWN:"):
            self._click(mouse_key)
            return True
        return mouse_key.startswith("MOUSE")

    def _cell(self, mouse_key: str) -> tuple[int, int] | None:
        col, row = parse_mouse_col_row(mouse_key)
        if col is None or row is None:
            return None
        # SGR coordinates are 1-based.
        return col - 1, row - 1

    def _wheel(self, mouse_key: str) -> None:
        if not (mouse_key.startswith("MOUSE_WHEEL_UP:") or mouse_key.startswith("MOUSE_WHEEL_DOWN:")):
            return
        cell = self._cell(mouse_key)
        if cell is None:
            return
        col, row = cell
        direction = -WHEEL_STEP if mouse_key.startswith("MOUSE_WHEEL_UP:") else WHEEL_STEP
        layout = self.current_layout()
        state = self.state
        if layout.search.contains(col, row):
            self._scroll_search(direction, layout.search_text.height)
        elif layout.detail_pane is not None and layout.detail_pane.contains(col, row):
            scroll_detail(state, direction)
        elif layout.content.contains(col, row):
            if state.view_mode is ViewMode.TABLE:
                previous_focus = state.view_focus
                state.view_focus = ViewFocus.CONTENT_LIST
                navigate(state, direction)
                state.view_focus = previous_focus
            else:
                navigate(state, direction)

    def _scroll_search(self, delta: int, visible_rows: int) -> None:
        state = self.state
        line_count = state.query.count("\n") + 1
        max_scroll = max(0, line_count - max(1, visible_rows))
        v_scroll = max(0, min(state.viewport.v_scroll + delta, max_scroll))
        if v_scroll != state.viewport.v_scroll:
            state.viewport.v_scroll = v_scroll
            state.dirty = True

    def _click(self, mouse_key: str) -> None:
        cell = self._cell(mouse_key)
        if cell is None:
            return
        col, row = cell
        layout = self.current_layout()
        state = self.state
        if layout.search.contains(col, row):
            text = layout.search_text
            line = state.viewport.v_scroll + max(0, row - text.y)
            column = state.viewport.h_scroll + max(0, col - text.x)
            state.caret = caret_from_position(state.query, line, column)
            state.view_focus = ViewFocus.SEARCH
            state.input_mode = InputMode.EDITING
        elif layout.detail_pane is not None and layout.detail_pane.contains(col, row):
            state.view_focus = ViewFocus.CONTENT_DETAIL
        elif layout.content.contains(col, row):
            state.view_focus = ViewFocus.CONTENT_LIST
            if state.view_mode is ViewMode.TABLE:
                self._select_table_row(row - layout.list_pane.y)
        else:
            return
        state.dirty = True

    def _select_table_row(self, pane_row: int) -> None:
        # Row 0 of the list pane is the column header.
        if pane_row < 1:
            return
        index = self.state.table_offset + pane_row - 1
        if 0 <= index < len(self.state.results):
            set_selection(self.state, index)


__all__ = ["MouseHandler", "WHEEL_STEP"]
