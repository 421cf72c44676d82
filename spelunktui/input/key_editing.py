"""Editing-mode keyboard handling for the query editor.

Standard mode behaves like a plain text area. Vim mode has a Normal state
for caret motion and an Insert state that edits like Standard.
"""

from __future__ import annotations

from collections.abc import Callable

from .. import query_buffer
from ..state import EditorMode, InputMode, SessionState
from .key_common import is_text_key, request_query_edit
from .key_registry import KeyComboBinding, KeyComboRegistry


class EditingKeyHandler:
    def __init__(self, state: SessionState, submit: Callable[[], object]) -> None:
        self.state = state
        self.submit = submit
        text_editing = (
            KeyComboBinding(("LEFT",), lambda: self._move(query_buffer.move_left)),
            KeyComboBinding(("RIGHT",), lambda: self._move(query_buffer.move_right)),
            KeyComboBinding(("UP",), lambda: self._move(query_buffer.move_up)),
            KeyComboBinding(("DOWN",), lambda: self._move(query_buffer.move_down)),
            KeyComboBinding(("BACKSPACE",), lambda: self._edit(query_buffer.delete_back)),
            KeyComboBinding(("DELETE",), lambda: self._edit(query_buffer.delete_forward)),
            KeyComboBinding(("SHIFT_ENTER", "CTRL_J"), lambda: self.insert("\n")),
            KeyComboBinding(("ENTER",), self._submit),
        )
        self._registries: dict[EditorMode, KeyComboRegistry] = {
            EditorMode.STANDARD: KeyComboRegistry().register_bindings(
                *text_editing,
                KeyComboBinding(("ESC",), self._leave_editing),
                KeyComboBinding(("CTRL_X",), lambda: request_query_edit(self.state)),
            ),
            EditorMode.VIM_INSERT: KeyComboRegistry().register_bindings(
                *text_editing,
                KeyComboBinding(("ESC",), self._vim_normal),
            ),
            EditorMode.VIM_NORMAL: KeyComboRegistry().register_bindings(
                KeyComboBinding(("h", "LEFT"), lambda: self._move(query_buffer.move_left)),
                KeyComboBinding(("l", "RIGHT"), lambda: self._move(query_buffer.move_right)),
                KeyComboBinding(("k", "UP"), lambda: self._move(query_buffer.move_up)),
                KeyComboBinding(("j", "DOWN"), lambda: self._move(query_buffer.move_down)),
                KeyComboBinding(("x",), lambda: self._edit(query_buffer.delete_forward)),
                KeyComboBinding(("i",), self._vim_insert),
                KeyComboBinding(("ENTER",), self._submit),
                KeyComboBinding(("ESC",), self._leave_editing),
            ),
        }

    def handle(self, key: str) -> None:
        state = self.state
        if key == "CTRL_V":
            self.toggle_vim_mode()
            return
        handled = self._registries[state.editor_mode].dispatch(key)
        if handled is None and state.editor_mode is not EditorMode.VIM_NORMAL and is_text_key(key):
            self.insert(key)

    def toggle_vim_mode(self) -> None:
        state = self.state
        if state.editor_mode.is_vim:
            state.editor_mode = EditorMode.STANDARD
            state.set_status("Switched to Standard Mode.")
        else:
            state.editor_mode = EditorMode.VIM_NORMAL
            state.set_status("Switched to Vim Mode.")

    def insert(self, value: str) -> None:
        state = self.state
        state.query, state.caret = query_buffer.insert_text(state.query, state.caret, value)
        state.dirty = True

    def _move(self, motion: Callable[[str, int], int]) -> None:
        state = self.state
        state.caret = motion(state.query, state.caret)
        state.dirty = True

    def _edit(self, operation: Callable[[str, int], tuple[str, int]]) -> None:
        state = self.state
        state.query, state.caret = operation(state.query, state.caret)
        state.dirty = True

    def _submit(self) -> None:
        self.submit()
        self.state.input_mode = InputMode.NORMAL
        self.state.dirty = True

    def _leave_editing(self) -> None:
        self.state.input_mode = InputMode.NORMAL
        self.state.set_status("Search cancelled.")

    def _vim_insert(self) -> None:
        self.state.editor_mode = EditorMode.VIM_INSERT
        self.state.set_status("-- INSERT --")

    def _vim_normal(self) -> None:
        self.state.editor_mode = EditorMode.VIM_NORMAL
        self.state.set_status("-- NORMAL --")
        self._move(query_buffer.move_left)


__all__ = ["EditingKeyHandler"]
