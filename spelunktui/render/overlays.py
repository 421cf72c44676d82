"""Centered modal overlays drawn over the main view."""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import RESET, ansi_display_width, sanitize_terminal_text
from ..layout import Rect, centered_rect
from ..state import InputMode, SessionState
from ..ui_theme import available_theme_names
from .boxes import box_rows
from .help import help_rows
from .main_view import SELECTED_MARKER

CONFIRM_OVERWRITE_TEXT = "Press 'y' to overwrite, 'n' to cancel, 'r' to rename."

# mode -> (width %, height %, title)
OVERLAY_GEOMETRY: dict[InputMode, tuple[int, int, str]] = {
    InputMode.LOCAL_SEARCH: (60, 10, "Local Search (Regex)"),
    InputMode.THEME_SELECT: (40, 40, "Select Theme"),
    InputMode.HELP: (60, 80, "Keyboard Shortcuts"),
    InputMode.SAVE_SEARCH: (60, 20, "Save Search As"),
    InputMode.CONFIRM_OVERWRITE: (60, 10, "Confirm Overwrite"),
    InputMode.LOAD_SEARCH: (60, 40, "Saved Searches"),
}


@dataclass(frozen=True)
class Overlay:
    rect: Rect
    rows: list[str]
    cursor: tuple[int, int] | None = None


def _list_body(state: SessionState, items: list[str] | tuple[str, ...], selected: int, height: int) -> list[str]:
    theme = state.theme
    start = max(0, selected - max(1, height) + 1)
    body: list[str] = []
    for index in range(start, min(len(items), start + max(0, height))):
        label = sanitize_terminal_text(items[index])
        if index == selected:
            body.append(f"{theme.selected}{SELECTED_MARKER}{label}{RESET}")
        else:
            body.append(f"{theme.text}{' ' * len(SELECTED_MARKER)}{label}{RESET}")
    return body


def _input_overlay(state: SessionState, rect: Rect, title: str, value: str) -> Overlay:
    theme = state.theme
    text = sanitize_terminal_text(value)
    rows = box_rows(
        rect.width,
        rect.height,
        [f"{theme.input_edit}{text}{RESET}"],
        border=theme.title_main,
        title=f"{theme.title_main}{title}",
    )
    inner = rect.inner()
    col = min(inner.x + ansi_display_width(text), inner.right - 1)
    return Overlay(rect, rows, (col, inner.y))


def build_overlay(state: SessionState, width: int, height: int) -> Overlay | None:
    """The overlay for the current input mode, or None outside overlay modes."""
    geometry = OVERLAY_GEOMETRY.get(state.input_mode)
    if geometry is None:
        return None
    percent_x, percent_y, title = geometry
    rect = centered_rect(percent_x, percent_y, width, height)
    inner = rect.inner()
    theme = state.theme
    mode = state.input_mode

    if mode is InputMode.SAVE_SEARCH:
        return _input_overlay(state, rect, title, state.save_name_input)
    if mode is InputMode.LOCAL_SEARCH:
        return _input_overlay(state, rect, title, state.local_filter.query)

    border = theme.title_main
    if mode is InputMode.CONFIRM_OVERWRITE:
        border = theme.error
        body = [f"{theme.text}{CONFIRM_OVERWRITE_TEXT}{RESET}"]
    elif mode is InputMode.LOAD_SEARCH:
        body = _list_body(state, state.saved_search_names, state.saved_search_index, inner.height)
    elif mode is InputMode.THEME_SELECT:
        body = _list_body(state, available_theme_names(), state.theme_index, inner.height)
    else:
        body = help_rows(theme)
    rows = box_rows(rect.width, rect.height, body, border=border, title=f"{border}{title}")
    return Overlay(rect, rows)


__all__ = ["CONFIRM_OVERWRITE_TEXT", "OVERLAY_GEOMETRY", "Overlay", "build_overlay"]
