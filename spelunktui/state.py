"""Mutable session state owned by the event loop.

Everything the renderer draws and the key handlers change lives on one
``SessionState`` instance. Background job work never touches it directly;
it posts events that the loop applies (see ``jobs``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .models import JobStatus
from .ui_theme import DEFAULT_THEME, UITheme

STARTUP_MESSAGE = "Press 'q' to quit, 'e' to enter search mode, 't' to toggle theme."


class InputMode(Enum):
    NORMAL = "normal"
    EDITING = "editing"
    SAVE_SEARCH = "save_search"
    LOAD_SEARCH = "load_search"
    CONFIRM_OVERWRITE = "confirm_overwrite"
    LOCAL_SEARCH = "local_search"
    THEME_SELECT = "theme_select"
    HELP = "help"

    @property
    def is_overlay(self) -> bool:
        return self not in {InputMode.NORMAL, InputMode.EDITING}


class EditorMode(Enum):
    STANDARD = "standard"
    VIM_NORMAL = "vim_normal"
    VIM_INSERT = "vim_insert"

    @property
    def is_vim(self) -> bool:
        return self is not EditorMode.STANDARD


class ViewMode(Enum):
    RAW_EVENTS = "Raw"
    TABLE = "Table"


class ViewFocus(Enum):
    SEARCH = "search"
    CONTENT_LIST = "content_list"
    CONTENT_DETAIL = "content_detail"


@dataclass
class JobRecord:
    """The one active backend job and its polling bookkeeping."""

    sid: str
    created_at: float
    status: JobStatus | None = None
    results_fetched: bool = False
    is_fetching: bool = False
    error: str | None = None
    poll_attempts: int = 0
    next_poll_at: float = 0.0

    @property
    def phase(self) -> str:
        if self.error is not None:
            return "failed"
        if self.results_fetched:
            return "done"
        if self.status is None:
            return "created"
        if self.status.is_done:
            return "fetching"
        return "running"


@dataclass
class LocalFilter:
    query: str = ""
    matches: list[int] = field(default_factory=list)
    cursor: int | None = None


@dataclass
class EditorViewport:
    v_scroll: int = 0
    h_scroll: int = 0


@dataclass(frozen=True)
class PendingEditor:
    """Deferred external-editor hand-off, run by the loop between frames."""

    path: Path
    reload_query: bool


@dataclass
class SessionState:
    query: str = ""
    caret: int = 0
    input_mode: InputMode = InputMode.NORMAL
    editor_mode: EditorMode = EditorMode.STANDARD
    view_mode: ViewMode = ViewMode.TABLE
    view_focus: ViewFocus = ViewFocus.SEARCH
    job: JobRecord | None = None
    submit_generation: int = 0
    pending_submit: int | None = None
    results: list[dict] = field(default_factory=list)
    results_version: int = 0
    selection: int | None = None
    table_offset: int = 0
    detail_scroll: int = 0
    scroll_offset: int = 0
    local_filter: LocalFilter = field(default_factory=LocalFilter)
    viewport: EditorViewport = field(default_factory=EditorViewport)
    theme: UITheme = DEFAULT_THEME
    saved_name: str | None = None
    status_message: str = STARTUP_MESSAGE
    save_name_input: str = ""
    saved_search_names: list[str] = field(default_factory=list)
    saved_search_index: int = 0
    theme_index: int = 0
    pending_editor: PendingEditor | None = None
    detail_lines: list[str] = field(default_factory=list)
    detail_key: tuple[int, str, int] | None = None
    dirty: bool = True
    skip_next_lf: bool = False

    @property
    def results_fetched(self) -> bool:
        return self.job is not None and self.job.results_fetched

    def set_status(self, message: str) -> None:
        self.status_message = message
        self.dirty = True

    def reset_results(self) -> None:
        """Drop results and every index that points into them."""
        self.results = []
        self.results_version += 1
        self.selection = None
        self.table_offset = 0
        self.detail_scroll = 0
        self.scroll_offset = 0
        self.local_filter.matches = []
        self.local_filter.cursor = None
        self.detail_lines = []
        self.detail_key = None
        self.dirty = True


__all__ = [
    "EditorMode",
    "EditorViewport",
    "InputMode",
    "JobRecord",
    "LocalFilter",
    "PendingEditor",
    "STARTUP_MESSAGE",
    "SessionState",
    "ViewFocus",
    "ViewMode",
]
