"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens:
single printable characters (UTF-8 decoded), names such as ``ENTER_CR``,
``CTRL_S``, ``SHIFT_ENTER``, ``UP``, and SGR mouse events of the form
``MOUSE_WHEEL_UP:<col>:<row>``. CSI-u and xterm ``modifyOtherKeys``
sequences are understood so terminals that report Shift+Enter or Ctrl+/
distinctly work as expected.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
MAX_SEQUENCE_BYTES = 64
_PENDING_BYTES: list[bytes] = []

_CONTROL_TOKENS: dict[int, str] = {
    0x08: "BACKSPACE",
    0x09: "TAB",
    0x0A: "ENTER_LF",
    0x0D: "ENTER_CR",
    0x1F: "CTRL_SLASH",
    0x7F: "BACKSPACE",
}
_HELP_CHARS = frozenset("/_?7")
_TILDE_KEYS = {1: "HOME", 3: "DELETE", 4: "END", 5: "PAGE_UP", 6: "PAGE_DOWN", 7: "HOME", 8: "END"}
_ARROW_KEYS = {"A": "UP", "B": "DOWN", "C": "RIGHT", "D": "LEFT", "H": "HOME", "F": "END"}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _modifier_prefix(modifiers: int) -> str:
    """Translate an xterm modifier parameter (1 + bitmask) into a token prefix."""
    bits = max(0, modifiers - 1)
    prefix = ""
    if bits & 4:
        prefix += "CTRL_"
    if bits & 2:
        prefix += "ALT_"
    if bits & 1:
        prefix += "SHIFT_"
    return prefix


def _modified_key(code: int, modifiers: int) -> str:
    """Token for a key reported as (unicode codepoint, modifier parameter)."""
    bits = max(0, modifiers - 1)
    ctrl = bool(bits & 4)
    shift = bool(bits & 1)
    if code == 13:
        return _modifier_prefix(modifiers) + "ENTER" if modifiers > 1 else "ENTER_CR"
    if code == 9:
        return "SHIFT_TAB" if shift else "TAB"
    if code == 27:
        return "ESC"
    if code in {8, 127}:
        return "BACKSPACE"
    ch = chr(code)
    if ctrl:
        if ch in _HELP_CHARS:
            return "CTRL_SLASH"
        if ch.isalpha():
            return f"CTRL_{ch.upper()}"
        return f"CTRL_{ch}"
    if shift and ch.isalpha():
        return ch.upper()
    return ch


def _decode_csi(payload: str, final: str) -> str:
    params = [int(p) if p.isdigit() else 0 for p in payload.split(";")] if payload else []
    modifiers = params[1] if len(params) > 1 else 1
    if final in _ARROW_KEYS:
        return _modifier_prefix(modifiers) + _ARROW_KEYS[final]
    if final == "Z":
        return "SHIFT_TAB"
    if final == "u" and params:
        return _modified_key(params[0], modifiers)
    if final == "~" and params:
        if params[0] == 27 and len(params) >= 3:
            return _modified_key(params[2], params[1])
        name = _TILDE_KEYS.get(params[0])
        if name is not None:
            return _modifier_prefix(modifiers) + name
    return "ESC"


def _decode_sgr_mouse(payload: str, final: str) -> str:
    # payload: "<btn;col;row", final "M" (press/motion) or "m" (release)
    try:
        btn_s, col_s, row_s = payload[1:].split(";")
        btn = int(btn_s)
        col = int(col_s)
        row = int(row_s)
    except ValueError:
        return "ESC"
    button = btn & 0b11
    if btn & 0b0100_0000:
        direction = {0: "UP", 1: "DOWN", 2: "LEFT", 3: "RIGHT"}[button]
        return f"MOUSE_WHEEL_{direction}:{col}:{row}"
    if button == 0:
        if btn & 0b0010_0000:
            return f"MOUSE_LEFT_DRAG:{col}:{row}"
        suffix = "DOWN" if final == "M" else "UP"
        return f"MOUSE_LEFT_{suffix}:{col}:{row}"
    return "MOUSE"


def _read_escape(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _ARROW_KEYS.get(final.decode("ascii", errors="replace"), "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"

    payload: list[bytes] = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if 0x40 <= part[0] <= 0x7E:
            final = part.decode("ascii")
            break
        payload.append(part)
        if len(payload) > MAX_SEQUENCE_BYTES:
            return "ESC"
    text = b"".join(payload).decode("ascii", errors="replace")
    if text.startswith("<"):
        return _decode_sgr_mouse(text, final)
    return _decode_csi(text, final)


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` if nothing arrived before the timeout."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""
        ch = os.read(fd, 1)
        if not ch:
            return ""

    code = ch[0]
    if code == 0x1B:
        return _read_escape(fd)
    if code in _CONTROL_TOKENS:
        return _CONTROL_TOKENS[code]
    if 0x01 <= code <= 0x1A:
        return f"CTRL_{chr(ord('A') + code - 1)}"
    if code < 0x20:
        return ""

    needed = _utf8_length(code) - 1
    data = bytearray(ch)
    for _ in range(needed):
        more = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if more is None:
            break
        data += more
    return bytes(data).decode("utf-8", errors="replace")


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]
