"""Shared key-handling helper functions."""

from __future__ import annotations

import logging

from ..editor import write_query_file, write_results_file
from ..state import PendingEditor, SessionState

logger = logging.getLogger(__name__)


def parse_mouse_col_row(mouse_key: str) -> tuple[int | None, int | None]:
    """Parse ``MOUSE_*:col:row`` key tokens into 1-based integer coordinates."""
    parts = mouse_key.split(":")
    if len(parts) < 3:
        return None, None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        return None, None


def is_text_key(key: str) -> bool:
    """True for tokens that are a single printable character."""
    return len(key) == 1 and key.isprintable()


def normalize_enter(key: str, skip_next_lf: bool) -> tuple[str | None, bool]:
    """Fold CR/LF tokens into ``ENTER``/``CTRL_J``.

    Returns ``(key, skip_next_lf)``; ``key`` is None when the token is the LF
    half of a CRLF pair and should be dropped.
    """
    if key == "ENTER_LF" and skip_next_lf:
        return None, False
    if key == "ENTER_CR":
        return "ENTER", True
    if key == "ENTER_LF":
        # A bare LF is what Ctrl+J sends in raw mode.
        return "CTRL_J", False
    return key, False


def request_query_edit(state: SessionState) -> None:
    """Queue the query buffer for the external editor."""
    try:
        path = write_query_file(state.query)
    except OSError as exc:
        logger.warning("writing query scratch file failed: %s", exc)
        state.set_status(f"Failed to write temp file: {exc}")
        return
    state.pending_editor = PendingEditor(path=path, reload_query=True)
    state.set_status("Editing query in external editor...")


def request_results_edit(state: SessionState) -> None:
    """Queue the fetched results, as pretty JSON, for the external editor."""
    if not state.results:
        state.set_status("No results to open.")
        return
    try:
        path = write_results_file(state.results)
    except OSError as exc:
        logger.warning("writing results scratch file failed: %s", exc)
        state.set_status(f"Failed to write temp file: {exc}")
        return
    state.pending_editor = PendingEditor(path=path, reload_query=False)
    state.set_status("Opened results in external editor.")


__all__ = [
    "is_text_key",
    "normalize_enter",
    "parse_mouse_col_row",
    "request_query_edit",
    "request_results_edit",
]
