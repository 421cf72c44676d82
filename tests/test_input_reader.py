"""Raw-key decoding tests.

Covers ESC timing, CSI/SS3 arrows, control tokens, modified Enter, UTF-8
assembly, and SGR mouse reports.
"""

from __future__ import annotations

import os
import time
import unittest

from spelunktui.input import reader


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        reader._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        reader._PENDING_BYTES.clear()
        os.close(self.read_fd)
        os.close(self.write_fd)

    def feed(self, data: bytes) -> str:
        os.write(self.write_fd, data)
        return reader.read_key(self.read_fd, timeout_ms=20)

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(reader.read_key(self.read_fd, timeout_ms=5), "")

    def test_single_escape_does_not_wait_for_another_key(self) -> None:
        started = time.monotonic()
        key = self.feed(b"\x1b")
        self.assertEqual(key, "ESC")
        self.assertLess(time.monotonic() - started, 0.2)

    def test_arrows(self) -> None:
        self.assertEqual(self.feed(b"\x1b[A"), "UP")
        self.assertEqual(self.feed(b"\x1bOB"), "DOWN")
        self.assertEqual(self.feed(b"\x1b[1;5C"), "CTRL_RIGHT")

    def test_control_tokens(self) -> None:
        self.assertEqual(self.feed(b"\r"), "ENTER_CR")
        self.assertEqual(self.feed(b"\n"), "ENTER_LF")
        self.assertEqual(self.feed(b"\x7f"), "BACKSPACE")
        self.assertEqual(self.feed(b"\t"), "TAB")
        self.assertEqual(self.feed(b"\x13"), "CTRL_S")
        self.assertEqual(self.feed(b"\x16"), "CTRL_V")
        self.assertEqual(self.feed(b"\x1f"), "CTRL_SLASH")
        self.assertEqual(self.feed(b"\x1b[3~"), "DELETE")

    def test_modified_enter_and_ctrl_slash_reports(self) -> None:
        self.assertEqual(self.feed(b"\x1b[13;2u"), "SHIFT_ENTER")
        self.assertEqual(self.feed(b"\x1b[27;2;13~"), "SHIFT_ENTER")
        self.assertEqual(self.feed(b"\x1b[47;5u"), "CTRL_SLASH")

    def test_multibyte_character_is_one_token(self) -> None:
        self.assertEqual(self.feed("β".encode("utf-8")), "β")
        self.assertEqual(self.feed("日".encode("utf-8")), "日")

    def test_alt_prefix_replays_following_byte(self) -> None:
        self.assertEqual(self.feed(b"\x1bx"), "ESC")
        self.assertEqual(reader.read_key(self.read_fd, timeout_ms=20), "x")

    def test_sgr_mouse_reports(self) -> None:
        self.assertEqual(self.feed(b"\x1b[<64;10;5M"), "MOUSE_WHEEL_UP:10:5")
        self.assertEqual(self.feed(b"\x1b[<65;10;5M"), "MOUSE_WHEEL_DOWN:10:5")
        self.assertEqual(self.feed(b"\x1b[<0;3;4M"), "MOUSE_LEFT_DOWN:3:4")
        self.assertEqual(self.feed(b"\x1b[<0;3;4m"), "MOUSE_LEFT_UP:3:4")
        self.assertEqual(self.feed(b"\x1b[<32;7;8M"), "MOUSE_LEFT_DRAG:7:8")


if __name__ == "__main__":
    unittest.main()
