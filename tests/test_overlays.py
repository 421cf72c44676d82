"""Modal overlay flows: save/overwrite/rename, load, theme picker, local search."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from spelunktui.overlays import OverlayController
from spelunktui.saved_searches import SavedSearchStore
from spelunktui.state import InputMode, SessionState
from spelunktui.ui_theme import available_theme_names


class _OverlayTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.directory = Path(self._tmp.name) / "saved_searches"
        self.store = SavedSearchStore(self.directory)
        self.persisted: list[str] = []
        self.state = SessionState()
        self.overlays = OverlayController(self.state, self.store, persist_theme=self.persisted.append)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def type_keys(self, *keys: str) -> None:
        for key in keys:
            self.assertTrue(self.overlays.handle_key(key))


class SaveSearchTests(_OverlayTestCase):
    def test_overwrite_existing_name_writes_current_query(self) -> None:
        self.state.saved_name = "x"
        self.state.query = "index=main | stats count"

        self.overlays.begin_save_search()
        self.assertIs(self.state.input_mode, InputMode.CONFIRM_OVERWRITE)
        self.type_keys("y")

        self.assertEqual((self.directory / "x.spl").read_text(encoding="utf-8"), "index=main | stats count")
        self.assertIs(self.state.input_mode, InputMode.NORMAL)
        self.assertEqual(self.state.status_message, "Search 'x' overwritten.")

    def test_typed_name_is_saved_and_remembered(self) -> None:
        self.state.query = "error\r\nwarn"
        self.overlays.begin_save_search()
        self.assertIs(self.state.input_mode, InputMode.SAVE_SEARCH)

        self.type_keys("e", "r", "x", "BACKSPACE", "r", "ENTER")

        self.assertEqual(self.state.saved_name, "err")
        self.assertEqual((self.directory / "err.spl").read_bytes(), b"error\r\nwarn")
        self.assertEqual(self.state.status_message, "Search saved as 'err'.")

    def test_empty_name_keeps_dialog_open(self) -> None:
        self.state.query = "index=main"
        self.overlays.begin_save_search()
        self.type_keys(" ", "ENTER")
        self.assertIs(self.state.input_mode, InputMode.SAVE_SEARCH)
        self.assertEqual(self.state.status_message, "Name cannot be empty.")

    def test_empty_query_cannot_be_saved(self) -> None:
        self.overlays.begin_save_search()
        self.assertIs(self.state.input_mode, InputMode.NORMAL)
        self.assertEqual(self.state.status_message, "Cannot save empty search.")

    def test_rename_prefills_current_name(self) -> None:
        self.state.saved_name = "old"
        self.state.query = "index=main"
        self.overlays.begin_save_search()
        self.type_keys("r")
        self.assertIs(self.state.input_mode, InputMode.SAVE_SEARCH)
        self.assertEqual(self.state.save_name_input, "old")

        self.type_keys("2", "ENTER")
        self.assertEqual(self.state.saved_name, "old2")
        self.assertTrue((self.directory / "old2.spl").is_file())

    def test_cancel_overwrite(self) -> None:
        self.state.saved_name = "x"
        self.state.query = "index=main"
        self.overlays.begin_save_search()
        self.type_keys("n")
        self.assertIs(self.state.input_mode, InputMode.NORMAL)
        self.assertFalse((self.directory / "x.spl").exists())


class LoadSearchTests(_OverlayTestCase):
    def test_load_round_trip(self) -> None:
        self.store.save("beta", "index=b")
        self.store.save("alpha", "index=a\n| head 5")

        self.overlays.begin_load_search()
        self.assertEqual(self.state.saved_search_names, ["alpha", "beta"])
        self.type_keys("ENTER")

        self.assertEqual(self.state.query, "index=a\n| head 5")
        self.assertEqual(self.state.caret, len("index=a\n| head 5".encode("utf-8")))
        self.assertEqual(self.state.saved_name, "alpha")
        self.assertIs(self.state.input_mode, InputMode.NORMAL)

    def test_list_navigation_wraps(self) -> None:
        self.store.save("a", "1")
        self.store.save("b", "2")
        self.overlays.begin_load_search()
        self.type_keys("UP")
        self.assertEqual(self.state.saved_search_index, 1)
        self.type_keys("j")
        self.assertEqual(self.state.saved_search_index, 0)

    def test_undecodable_file_reports_failure(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / "bad.spl").write_bytes(b"index=main \xff\xfe")
        self.state.query = "kept"

        self.overlays.begin_load_search()
        self.type_keys("ENTER")

        self.assertIs(self.state.input_mode, InputMode.NORMAL)
        self.assertEqual(self.state.query, "kept")
        self.assertTrue(self.state.status_message.startswith("Failed to load search: "))

    def test_nothing_saved(self) -> None:
        self.overlays.begin_load_search()
        self.assertIs(self.state.input_mode, InputMode.NORMAL)
        self.assertEqual(self.state.status_message, "No saved searches found.")


class ThemeSelectTests(_OverlayTestCase):
    def test_selected_theme_is_applied_and_persisted(self) -> None:
        names = available_theme_names()
        self.overlays.open_theme_selector()
        self.assertEqual(self.state.theme_index, 0)

        self.type_keys("DOWN", "ENTER")

        self.assertEqual(self.state.theme.name, names[1])
        self.assertEqual(self.persisted, [names[1]])
        self.assertIs(self.state.input_mode, InputMode.NORMAL)

    def test_cancel_keeps_theme(self) -> None:
        before = self.state.theme
        self.overlays.open_theme_selector()
        self.type_keys("DOWN", "ESC")
        self.assertIs(self.state.theme, before)
        self.assertEqual(self.persisted, [])


class LocalSearchOverlayTests(_OverlayTestCase):
    def test_typed_pattern_runs_on_enter(self) -> None:
        self.state.results = [{"_raw": "a"}, {"_raw": "b"}, {"_raw": "c"}]
        self.overlays.open_local_search()
        self.type_keys("b", "ENTER")
        self.assertEqual(self.state.local_filter.matches, [1])
        self.assertIs(self.state.input_mode, InputMode.NORMAL)

    def test_help_closes_on_escape(self) -> None:
        self.overlays.open_help()
        self.type_keys("x")
        self.assertIs(self.state.input_mode, InputMode.HELP)
        self.type_keys("ESC")
        self.assertIs(self.state.input_mode, InputMode.NORMAL)

    def test_handle_key_outside_overlay_is_declined(self) -> None:
        self.assertFalse(self.overlays.handle_key("q"))


if __name__ == "__main__":
    unittest.main()
