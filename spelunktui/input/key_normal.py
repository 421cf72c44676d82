"""Normal-mode keyboard handling."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..results import FAST_SCROLL_STEP, navigate, scroll_raw, step_match, toggle_view_mode
from ..state import InputMode, SessionState, ViewFocus, ViewMode
from .key_common import request_query_edit, request_results_edit
from .key_registry import KeyComboBinding, KeyComboRegistry

if TYPE_CHECKING:
    from ..jobs import JobController
    from ..overlays import OverlayController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalKeyContext:
    """State and bound operations required for normal-mode key handling."""

    state: SessionState
    overlays: OverlayController
    jobs: JobController
    open_url: Callable[[str], bool]


class NormalKeyHandler:
    def __init__(self, context: NormalKeyContext) -> None:
        self.context = context
        state = context.state
        overlays = context.overlays
        self._quit_requested = False
        self._registry = KeyComboRegistry().register_bindings(
            KeyComboBinding(("q",), self._quit),
            KeyComboBinding(("e",), self._start_editing),
            KeyComboBinding(("ENTER",), lambda: context.jobs.submit(state) or True),
            KeyComboBinding(("TAB",), self._cycle_focus),
            KeyComboBinding(("j", "DOWN"), lambda: self._vertical(1)),
            KeyComboBinding(("k", "UP"), lambda: self._vertical(-1)),
            KeyComboBinding(("CTRL_J",), lambda: self._fast_scroll(FAST_SCROLL_STEP)),
            KeyComboBinding(("CTRL_K",), lambda: self._fast_scroll(-FAST_SCROLL_STEP)),
            KeyComboBinding(("h", "LEFT"), self._focus_list),
            KeyComboBinding(("l", "RIGHT"), self._focus_detail),
            KeyComboBinding(("CTRL_V", "CTRL_M"), lambda: toggle_view_mode(state)),
            KeyComboBinding(("CTRL_S",), overlays.begin_save_search),
            KeyComboBinding(("CTRL_L",), overlays.begin_load_search),
            KeyComboBinding(("CTRL_R",), lambda: context.jobs.clear(state)),
            KeyComboBinding(("CTRL_X",), self._open_in_editor),
            KeyComboBinding(("E",), self._open_job_url),
            KeyComboBinding(("t", "CTRL_T"), overlays.open_theme_selector),
            KeyComboBinding(("/",), overlays.open_local_search),
            KeyComboBinding(("n",), lambda: step_match(state, 1) or True),
            KeyComboBinding(("N",), lambda: step_match(state, -1) or True),
        )

    def handle(self, key: str) -> bool:
        """Handle one normal-mode key and return ``True`` when app should quit."""
        self._registry.dispatch(key)
        return self._quit_requested

    def _quit(self) -> None:
        self._quit_requested = True

    def _start_editing(self) -> None:
        state = self.context.state
        state.input_mode = InputMode.EDITING
        state.view_focus = ViewFocus.SEARCH
        state.set_status("Editing... Press Enter to search, Esc to cancel.")

    def _cycle_focus(self) -> None:
        state = self.context.state
        if state.view_focus is ViewFocus.SEARCH:
            state.view_focus = ViewFocus.CONTENT_LIST
        elif state.view_focus is ViewFocus.CONTENT_LIST and state.view_mode is ViewMode.TABLE:
            state.view_focus = ViewFocus.CONTENT_DETAIL
        else:
            state.view_focus = ViewFocus.SEARCH
        state.dirty = True

    def _vertical(self, delta: int) -> None:
        state = self.context.state
        if state.view_focus is ViewFocus.SEARCH:
            if delta > 0:
                state.view_focus = ViewFocus.CONTENT_LIST
                state.dirty = True
            elif state.view_mode is ViewMode.RAW_EVENTS:
                scroll_raw(state, delta)
            return
        navigate(state, delta)

    def _fast_scroll(self, delta: int) -> None:
        state = self.context.state
        if state.view_focus is ViewFocus.SEARCH and state.view_mode is ViewMode.TABLE:
            return
        navigate(state, delta)

    def _focus_list(self) -> None:
        self.context.state.view_focus = ViewFocus.CONTENT_LIST
        self.context.state.dirty = True

    def _focus_detail(self) -> None:
        state = self.context.state
        if state.view_mode is ViewMode.TABLE:
            state.view_focus = ViewFocus.CONTENT_DETAIL
            state.dirty = True

    def _open_in_editor(self) -> None:
        state = self.context.state
        if state.view_focus is ViewFocus.SEARCH:
            request_query_edit(state)
        else:
            request_results_edit(state)

    def _open_job_url(self) -> None:
        state = self.context.state
        url = self.context.jobs.web_url(state)
        if url is None:
            state.set_status("No active job URL.")
            return
        if not url.startswith("http"):
            state.set_status("Invalid URL.")
            return
        logger.info("opening job url %s", url)
        self.context.open_url(url)
        state.set_status("Opened URL in browser.")


__all__ = ["NormalKeyContext", "NormalKeyHandler"]
