"""Caret arithmetic for the multi-line query editor.

The caret is a byte offset into the UTF-8 encoding of the query, and every
function here returns offsets that sit on a character boundary. Functions
are pure: they take ``(text, caret)`` and return new values.
"""

from __future__ import annotations

from dataclasses import dataclass

from .ansi import char_display_width


def _encode(text: str) -> bytes:
    return text.encode("utf-8")


def is_char_boundary(data: bytes, offset: int) -> bool:
    if offset <= 0 or offset >= len(data):
        return 0 <= offset <= len(data)
    return (data[offset] & 0xC0) != 0x80


def floor_boundary(data: bytes, offset: int) -> int:
    """Largest boundary ``<= offset`` (clamped to the buffer)."""
    offset = max(0, min(offset, len(data)))
    while offset > 0 and not is_char_boundary(data, offset):
        offset -= 1
    return offset


def move_left(text: str, caret: int) -> int:
    data = _encode(text)
    if caret <= 0:
        return 0
    return floor_boundary(data, min(caret, len(data)) - 1)


def move_right(text: str, caret: int) -> int:
    data = _encode(text)
    if caret >= len(data):
        return len(data)
    offset = caret + 1
    while offset < len(data) and not is_char_boundary(data, offset):
        offset += 1
    return offset


def _line_bounds(data: bytes, caret: int) -> tuple[int, int]:
    """Return ``(start, end)`` byte offsets of the line holding ``caret``."""
    start = data.rfind(b"\n", 0, caret) + 1
    end = data.find(b"\n", caret)
    if end == -1:
        end = len(data)
    return start, end


def move_up(text: str, caret: int) -> int:
    """Move to the previous line, keeping the byte column where possible."""
    data = _encode(text)
    start, _end = _line_bounds(data, caret)
    if start == 0:
        return caret
    column = caret - start
    prev_end = start - 1
    prev_start = data.rfind(b"\n", 0, prev_end) + 1
    target = prev_start + min(column, prev_end - prev_start)
    return floor_boundary(data, target)


def move_down(text: str, caret: int) -> int:
    """Move to the next line, keeping the byte column where possible."""
    data = _encode(text)
    start, end = _line_bounds(data, caret)
    if end >= len(data):
        return caret
    column = caret - start
    next_start = end + 1
    next_end = data.find(b"\n", next_start)
    if next_end == -1:
        next_end = len(data)
    target = next_start + min(column, next_end - next_start)
    return floor_boundary(data, target)


def insert_text(text: str, caret: int, value: str) -> tuple[str, int]:
    data = _encode(text)
    inserted = _encode(value)
    new_data = data[:caret] + inserted + data[caret:]
    return new_data.decode("utf-8"), caret + len(inserted)


def delete_back(text: str, caret: int) -> tuple[str, int]:
    """Remove the character before the caret."""
    if caret <= 0:
        return text, 0
    data = _encode(text)
    start = move_left(text, caret)
    return (data[:start] + data[caret:]).decode("utf-8"), start


def delete_forward(text: str, caret: int) -> tuple[str, int]:
    """Remove the character under the caret, leaving the caret in place."""
    data = _encode(text)
    if caret >= len(data):
        return text, caret
    end = move_right(text, caret)
    return (data[:caret] + data[end:]).decode("utf-8"), caret


def end_of_text(text: str) -> int:
    return len(_encode(text))


def caret_line_column(text: str, caret: int) -> tuple[int, int]:
    """Return ``(line index, display column)`` for the caret."""
    data = _encode(text)
    before = data[:caret].decode("utf-8")
    line_index = before.count("\n")
    line_prefix = before.rsplit("\n", 1)[-1]
    return line_index, display_width(line_prefix)


def display_width(value: str) -> int:
    col = 0
    for ch in value:
        col += char_display_width(ch, col)
    return col


def caret_from_position(text: str, line_index: int, column: int) -> int:
    """Map a (line, display column) cell to the nearest byte offset.

    Rows past the end land on the last line; columns past the end of the
    line land on its end. A click on the right half of a wide character
    lands before it.
    """
    lines = text.split("\n")
    line_index = max(0, min(line_index, len(lines) - 1))
    offset = sum(len(_encode(line)) + 1 for line in lines[:line_index])
    col = 0
    for ch in lines[line_index]:
        width = char_display_width(ch, col)
        if col + width > column:
            break
        col += width
        offset += len(_encode(ch))
    return offset


@dataclass
class ViewportSize:
    rows: int
    cols: int


def follow_caret(v_scroll: int, h_scroll: int, line: int, column: int, size: ViewportSize) -> tuple[int, int]:
    """Return the smallest scroll change that keeps ``(line, column)`` visible."""
    rows = max(1, size.rows)
    cols = max(1, size.cols)
    if line < v_scroll:
        v_scroll = line
    elif line >= v_scroll + rows:
        v_scroll = line - rows + 1
    if column < h_scroll:
        h_scroll = column
    elif column >= h_scroll + cols:
        h_scroll = column - cols + 1
    return max(0, v_scroll), max(0, h_scroll)


__all__ = [
    "ViewportSize",
    "caret_from_position",
    "caret_line_column",
    "delete_back",
    "delete_forward",
    "display_width",
    "end_of_text",
    "floor_boundary",
    "follow_caret",
    "insert_text",
    "is_char_boundary",
    "move_down",
    "move_left",
    "move_right",
    "move_up",
]
