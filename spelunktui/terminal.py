"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle, alternate-screen switching, mouse reporting, and
the cursor shape used by the query editor.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

CURSOR_SHAPES: dict[str, bytes] = {
    "default": b"\x1b[0 q",
    "block": b"\x1b[2 q",
    "bar": b"\x1b[6 q",
}


class TerminalController:
    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._cursor_shape = "default"

    def enable_tui_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Alternate screen, hidden cursor, button + drag mouse reporting in SGR encoding.
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l\x1b[?1000h\x1b[?1002h\x1b[?1006h\x1b[H\x1b[2J")

    def disable_tui_mode(self) -> None:
        os.write(
            self.stdout_fd,
            b"\x1b[?1000l\x1b[?1002l\x1b[?1006l" + CURSOR_SHAPES["default"] + b"\x1b[?25h\x1b[?1049l",
        )
        self._cursor_shape = "default"
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def set_cursor_shape(self, shape: str) -> None:
        """Switch between ``bar``, ``block`` and the terminal ``default``."""
        if shape == self._cursor_shape or shape not in CURSOR_SHAPES:
            return
        os.write(self.stdout_fd, CURSOR_SHAPES[shape])
        self._cursor_shape = shape

    @contextlib.contextmanager
    def raw_mode(self):
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()


__all__ = ["CURSOR_SHAPES", "TerminalController"]
