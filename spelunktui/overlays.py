"""Modal overlays: save/load/confirm-overwrite, theme picker, local search, help.

While one of these is open it owns every key; ``OverlayController.handle_key``
is the only dispatcher consulted.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .errors import InvalidInputError
from .input.key_registry import KeyComboBinding, KeyComboRegistry
from .query_buffer import end_of_text
from .results import refresh_detail, run_local_filter
from .saved_searches import SavedSearchStore
from .state import InputMode, SessionState
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)


def _is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class OverlayController:
    def __init__(
        self,
        state: SessionState,
        store: SavedSearchStore,
        persist_theme: Callable[[str], None],
    ) -> None:
        self.state = state
        self.store = store
        self.persist_theme = persist_theme
        self._registries: dict[InputMode, KeyComboRegistry] = {
            InputMode.HELP: KeyComboRegistry().register_bindings(
                KeyComboBinding(("ESC", "ENTER", "q"), self._close_help),
            ),
            InputMode.CONFIRM_OVERWRITE: KeyComboRegistry().register_bindings(
                KeyComboBinding(("y", "Y"), self._confirm_overwrite),
                KeyComboBinding(("n", "N", "ESC"), self._cancel_save),
                KeyComboBinding(("r", "R"), self._rename_instead),
            ),
            InputMode.LOAD_SEARCH: KeyComboRegistry().register_bindings(
                KeyComboBinding(("UP", "k"), lambda: self._move_saved(-1)),
                KeyComboBinding(("DOWN", "j"), lambda: self._move_saved(1)),
                KeyComboBinding(("ENTER",), self._load_selected),
                KeyComboBinding(("ESC",), self._cancel_load),
            ),
            InputMode.THEME_SELECT: KeyComboRegistry().register_bindings(
                KeyComboBinding(("UP", "k"), lambda: self._move_theme(-1)),
                KeyComboBinding(("DOWN", "j"), lambda: self._move_theme(1)),
                KeyComboBinding(("ENTER",), self._apply_selected_theme),
                KeyComboBinding(("ESC",), self._cancel_theme),
            ),
            InputMode.SAVE_SEARCH: KeyComboRegistry().register_bindings(
                KeyComboBinding(("ENTER",), self._save_named),
                KeyComboBinding(("ESC",), self._cancel_save),
                KeyComboBinding(("BACKSPACE",), self._save_name_backspace),
            ),
            InputMode.LOCAL_SEARCH: KeyComboRegistry().register_bindings(
                KeyComboBinding(("ENTER",), self._submit_local_search),
                KeyComboBinding(("ESC",), self._cancel_local_search),
                KeyComboBinding(("BACKSPACE",), self._local_search_backspace),
            ),
        }

    # opening

    def open_help(self) -> None:
        self.state.input_mode = InputMode.HELP
        self.state.dirty = True

    def begin_save_search(self) -> None:
        state = self.state
        if not state.query.strip():
            state.set_status("Cannot save empty search.")
            return
        if state.saved_name:
            state.input_mode = InputMode.CONFIRM_OVERWRITE
            state.set_status(f"Overwrite saved search '{state.saved_name}'? (y/n/r)")
            return
        state.save_name_input = ""
        state.input_mode = InputMode.SAVE_SEARCH
        state.set_status("Enter a name for this search (Enter to save, Esc to cancel).")

    def begin_load_search(self) -> None:
        state = self.state
        try:
            names = self.store.list_names()
        except OSError as exc:
            state.set_status(f"Failed to load search: {exc}")
            return
        if not names:
            state.set_status("No saved searches found.")
            return
        state.saved_search_names = names
        state.saved_search_index = 0
        state.input_mode = InputMode.LOAD_SEARCH
        state.set_status("Select a saved search (Up/Down/Enter), Esc to cancel.")

    def open_theme_selector(self) -> None:
        state = self.state
        names = available_theme_names()
        state.theme_index = names.index(state.theme.name) if state.theme.name in names else 0
        state.input_mode = InputMode.THEME_SELECT
        state.set_status("Select theme (Up/Down/Enter), Esc to cancel.")

    def open_local_search(self) -> None:
        state = self.state
        state.local_filter.query = ""
        state.input_mode = InputMode.LOCAL_SEARCH
        state.set_status("Type a regex and press Enter, Esc to cancel.")

    # dispatch

    def handle_key(self, key: str) -> bool:
        """Handle ``key`` for the open overlay; returns False if none is open."""
        mode = self.state.input_mode
        registry = self._registries.get(mode)
        if registry is None:
            return False
        handled = registry.dispatch(key)
        if handled is None and _is_text_key(key):
            if mode is InputMode.SAVE_SEARCH:
                self.state.save_name_input += key
            elif mode is InputMode.LOCAL_SEARCH:
                self.state.local_filter.query += key
        self.state.dirty = True
        return True

    def _close_help(self) -> bool:
        self.state.input_mode = InputMode.NORMAL
        return True

    # save / overwrite

    def _write_search(self, name: str) -> bool:
        state = self.state
        try:
            self.store.save(name, state.query)
        except InvalidInputError as exc:
            state.set_status(str(exc))
            return False
        except OSError as exc:
            logger.warning("saving search %r failed: %s", name, exc)
            state.set_status(f"Failed to save search: {exc}")
            state.input_mode = InputMode.NORMAL
            return False
        state.saved_name = name.strip()
        state.input_mode = InputMode.NORMAL
        return True

    def _save_named(self) -> bool:
        name = self.state.save_name_input.strip()
        if not name:
            self.state.set_status("Name cannot be empty.")
            return True
        if self._write_search(name):
            self.state.set_status(f"Search saved as '{name}'.")
        return True

    def _save_name_backspace(self) -> bool:
        self.state.save_name_input = self.state.save_name_input[:-1]
        return True

    def _confirm_overwrite(self) -> bool:
        name = self.state.saved_name or ""
        if self._write_search(name):
            self.state.set_status(f"Search '{name}' overwritten.")
        return True

    def _rename_instead(self) -> bool:
        state = self.state
        state.save_name_input = state.saved_name or ""
        state.input_mode = InputMode.SAVE_SEARCH
        state.set_status("Enter a new name (Enter to save, Esc to cancel).")
        return True

    def _cancel_save(self) -> bool:
        self.state.input_mode = InputMode.NORMAL
        self.state.set_status("Save cancelled.")
        return True

    # load

    def _move_saved(self, delta: int) -> bool:
        state = self.state
        if state.saved_search_names:
            state.saved_search_index = (state.saved_search_index + delta) % len(state.saved_search_names)
        return True

    def _load_selected(self) -> bool:
        state = self.state
        if not state.saved_search_names:
            state.input_mode = InputMode.NORMAL
            return True
        name = state.saved_search_names[state.saved_search_index]
        try:
            query = self.store.load(name)
        except (OSError, UnicodeDecodeError, InvalidInputError) as exc:
            logger.warning("loading search %r failed: %s", name, exc)
            state.set_status(f"Failed to load search: {exc}")
            state.input_mode = InputMode.NORMAL
            return True
        state.query = query
        state.caret = end_of_text(query)
        state.saved_name = name
        state.input_mode = InputMode.NORMAL
        state.set_status(f"Loaded search '{name}'.")
        return True

    def _cancel_load(self) -> bool:
        self.state.input_mode = InputMode.NORMAL
        self.state.set_status("Load cancelled.")
        return True

    # theme

    def _move_theme(self, delta: int) -> bool:
        names = available_theme_names()
        self.state.theme_index = (self.state.theme_index + delta) % len(names)
        return True

    def apply_theme(self, name: str, *, persist: bool) -> None:
        state = self.state
        state.theme = resolve_theme(name)
        refresh_detail(state)
        if persist:
            self.persist_theme(state.theme.name)
        state.dirty = True

    def _apply_selected_theme(self) -> bool:
        name = available_theme_names()[self.state.theme_index]
        self.apply_theme(name, persist=True)
        self.state.input_mode = InputMode.NORMAL
        self.state.set_status(f"Theme '{name}' applied.")
        return True

    def _cancel_theme(self) -> bool:
        self.state.input_mode = InputMode.NORMAL
        self.state.set_status("Theme selection cancelled.")
        return True

    # local search

    def _submit_local_search(self) -> bool:
        self.state.input_mode = InputMode.NORMAL
        run_local_filter(self.state)
        return True

    def _local_search_backspace(self) -> bool:
        self.state.local_filter.query = self.state.local_filter.query[:-1]
        return True

    def _cancel_local_search(self) -> bool:
        self.state.input_mode = InputMode.NORMAL
        self.state.set_status("Local search cancelled.")
        return True


__all__ = ["OverlayController"]
