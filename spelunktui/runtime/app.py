"""Runtime composition layer for spelunktui.

Builds the session from configuration, wires the controllers together, and
runs the loop. This is the one place where the backend client, terminal,
and key handling meet.
"""

from __future__ import annotations

import logging
import shutil
import sys
import webbrowser

from ..client import SplunkClient
from ..config import AppConfig, load_config, save_theme
from ..editor import launch_editor, read_query_file
from ..errors import SpelunkError
from ..input import MouseHandler, NormalKeyContext, SessionKeyHandler
from ..jobs import JobController
from ..layout import ScreenLayout, compute_layout
from ..overlays import OverlayController
from ..query_buffer import end_of_text
from ..saved_searches import SavedSearchStore
from ..state import SessionState
from ..terminal import TerminalController
from ..ui_theme import resolve_theme
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop

logger = logging.getLogger(__name__)


def build_session(config: AppConfig) -> SessionState:
    state = SessionState(theme=resolve_theme(config.theme))
    logger.info("session started with theme %s", state.theme.name)
    return state


def run_pending_editor(state: SessionState, terminal: TerminalController) -> None:
    """Run ``$EDITOR`` on the queued file, reloading the query if it was the target."""
    pending = state.pending_editor
    state.pending_editor = None
    if pending is None:
        return
    error = launch_editor(pending.path, terminal.disable_tui_mode, terminal.enable_tui_mode)
    if error is not None:
        state.set_status(error)
        return
    if not pending.reload_query:
        state.dirty = True
        return
    try:
        query = read_query_file(pending.path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("reading edited query from %s failed: %s", pending.path, exc)
        state.set_status(f"Failed to read edited query: {exc}")
        return
    state.query = query
    state.caret = end_of_text(query)
    state.set_status("Query updated from editor.")


def run_app(config: AppConfig | None = None) -> None:
    """Load configuration, build the session, and run the TUI until quit.

    Raises ``ConfigMissingError`` before touching the terminal when the
    backend URL or token is missing.
    """
    config = load_config() if config is None else config
    config.validate()
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SpelunkError("spelunktui needs an interactive terminal.")

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    state = build_session(config)
    store = SavedSearchStore()
    overlays = OverlayController(state, store, persist_theme=save_theme)
    terminal = TerminalController(stdin_fd, stdout_fd)

    def current_layout() -> ScreenLayout:
        size = shutil.get_terminal_size((80, 24))
        return compute_layout(size.columns, size.lines, state.view_mode)

    with SplunkClient(config.splunk_base_url, config.splunk_token, config.splunk_verify_ssl) as client:
        jobs = JobController(client)
        keys = SessionKeyHandler(
            NormalKeyContext(state=state, overlays=overlays, jobs=jobs, open_url=webbrowser.open),
            MouseHandler(state, current_layout),
        )
        callbacks = RuntimeLoopCallbacks(
            handle_key=keys.handle,
            drain_job_events=lambda: jobs.drain_events(state),
            maybe_poll=lambda: jobs.maybe_poll(state),
            web_url=lambda: jobs.web_url(state),
            run_pending_editor=lambda: run_pending_editor(state, terminal),
        )
        try:
            run_main_loop(state, terminal, stdin_fd, RuntimeLoopTiming(), callbacks)
        except Exception:
            logger.exception("session loop crashed")
            raise
    logger.info("session ended")


__all__ = ["build_session", "run_app", "run_pending_editor"]
