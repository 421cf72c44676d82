"""Main interactive event loop for the terminal UI.

Each iteration: run a deferred editor hand-off, fold in job events, render
if anything changed, kick the poller on tick boundaries, then wait for input
for the rest of the tick. Feature logic lives in the callbacks.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..input import normalize_enter, read_key
from ..layout import ScreenLayout, compute_layout
from ..query_buffer import ViewportSize, caret_line_column, follow_caret
from ..render import Frame, build_frame, render_frame
from ..results import follow_table_selection
from ..state import InputMode, SessionState
from ..terminal import TerminalController

logger = logging.getLogger(__name__)

TICK_SECONDS = 0.25


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    tick_seconds: float = TICK_SECONDS


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    handle_key: Callable[[str], bool]
    drain_job_events: Callable[[], bool]
    maybe_poll: Callable[[], bool]
    web_url: Callable[[], str | None]
    run_pending_editor: Callable[[], None]
    read_key: Callable[[int, int | None], str] = read_key
    render: Callable[[Frame], None] = render_frame
    terminal_size: Callable[[], tuple[int, int]] = lambda: tuple(shutil.get_terminal_size((80, 24)))
    monotonic: Callable[[], float] = time.monotonic


def job_in_flight(state: SessionState) -> bool:
    job = state.job
    if state.pending_submit is not None:
        return True
    return job is not None and not job.results_fetched and job.error is None


def sync_viewports(state: SessionState, layout: ScreenLayout) -> None:
    """Keep the caret and the table selection inside their panes."""
    if state.input_mode is InputMode.EDITING:
        text = layout.search_text
        line, column = caret_line_column(state.query, state.caret)
        v_scroll, h_scroll = follow_caret(
            state.viewport.v_scroll,
            state.viewport.h_scroll,
            line,
            column,
            ViewportSize(rows=text.height, cols=text.width),
        )
        if (v_scroll, h_scroll) != (state.viewport.v_scroll, state.viewport.h_scroll):
            state.viewport.v_scroll = v_scroll
            state.viewport.h_scroll = h_scroll
            state.dirty = True
    follow_table_selection(state, max(1, layout.list_pane.height - 1))


def run_main_loop(
    state: SessionState,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the main interactive TUI loop until a quit action occurs."""
    ops = callbacks
    last_size: tuple[int, int] | None = None
    last_elapsed_second = -1

    with terminal.raw_mode():
        next_tick = ops.monotonic()
        while True:
            if state.pending_editor is not None:
                ops.run_pending_editor()
                state.dirty = True
                last_size = None

            if ops.drain_job_events():
                state.dirty = True

            size = ops.terminal_size()
            if size != last_size:
                last_size = size
                state.dirty = True
            layout = compute_layout(size[0], size[1], state.view_mode)
            sync_viewports(state, layout)

            now = ops.monotonic()
            if job_in_flight(state) and int(now) != last_elapsed_second:
                # Redraw for the elapsed-seconds counter.
                last_elapsed_second = int(now)
                state.dirty = True

            if state.dirty:
                frame = build_frame(state, layout, web_url=ops.web_url(), now=now)
                terminal.set_cursor_shape(frame.cursor_shape or "default")
                ops.render(frame)
                state.dirty = False

            if now >= next_tick:
                ops.maybe_poll()
                next_tick = now + timing.tick_seconds

            timeout_ms = max(0, int((next_tick - ops.monotonic()) * 1000))
            try:
                key = ops.read_key(stdin_fd, timeout_ms)
            except KeyboardInterrupt:
                continue
            if key == "":
                continue
            normalized, state.skip_next_lf = normalize_enter(key, state.skip_next_lf)
            if normalized is None:
                continue
            logger.debug("key %s in %s", normalized, state.input_mode.value)
            if ops.handle_key(normalized):
                return


__all__ = [
    "RuntimeLoopCallbacks",
    "RuntimeLoopTiming",
    "TICK_SECONDS",
    "job_in_flight",
    "run_main_loop",
    "sync_viewports",
]
