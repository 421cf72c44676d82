"""Top-level key dispatch for one session.

Order of precedence: the Help shortcut, then the open overlay (which owns
every key while shown), then mouse tokens, then the Editing or Normal table.
"""

from __future__ import annotations

from ..state import InputMode
from .key_editing import EditingKeyHandler
from .key_normal import NormalKeyContext, NormalKeyHandler
from .mouse import MouseHandler

HELP_KEYS = frozenset({"CTRL_SLASH"})


class SessionKeyHandler:
    def __init__(self, context: NormalKeyContext, mouse: MouseHandler) -> None:
        self.context = context
        self.mouse = mouse
        self.normal = NormalKeyHandler(context)
        self.editing = EditingKeyHandler(context.state, lambda: context.jobs.submit(context.state))

    def handle(self, key: str) -> bool:
        """Dispatch one normalized key token; returns ``True`` when app should quit."""
        state = self.context.state
        if key in HELP_KEYS:
            self.context.overlays.open_help()
            return False
        if state.input_mode.is_overlay:
            if not key.startswith("MOUSE"):
                self.context.overlays.handle_key(key)
            return False
        if self.mouse.handle(key):
            return False
        if state.input_mode is InputMode.EDITING:
            self.editing.handle(key)
            return False
        return self.normal.handle(key)


__all__ = ["HELP_KEYS", "SessionKeyHandler"]
