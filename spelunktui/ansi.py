"""ANSI-aware text measurement and line shaping utilities.

Clipping, slicing, padding, and wrapping that keep escape sequences intact,
so pane contents line up when color codes and wide characters are present.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
TAB_STOP = 4
RESET = "\033[0m"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next tab stop, combining marks take no columns, and
    East Asian wide/fullwidth characters take two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def sanitize_terminal_text(text: str) -> str:
    """Replace control bytes from backend data so they cannot drive the terminal."""
    return _CONTROL_RE.sub("\N{REPLACEMENT CHARACTER}", text.replace("\r\n", "\n"))


def ansi_display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def slice_ansi_line(text: str, start_cols: int, max_cols: int) -> str:
    """Return the ``max_cols`` wide window of a styled line starting at ``start_cols``.

    Escape sequences are kept verbatim. When the window starts after a style
    change, the latest SGR sequence is re-emitted so visible text keeps its
    color. Tabs become spaces; a wide character that straddles an edge is
    dropped rather than split.
    """
    if max_cols <= 0 or not text:
        return ""
    start_cols = max(0, start_cols)

    out: list[str] = []
    col = 0
    shown = 0
    pending_sgr = ""
    i = 0
    n = len(text)
    while i < n and shown < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                seq = match.group(0)
                if col >= start_cols:
                    out.append(seq)
                elif seq.endswith("m"):
                    pending_sgr = seq
                i = match.end()
                continue
        ch = text[i]
        i += 1
        w = char_display_width(ch, col)
        if col + w <= start_cols:
            col += w
            continue
        if pending_sgr:
            out.append(pending_sgr)
            pending_sgr = ""
        if col < start_cols:
            # wide char cut by the left edge
            pad = min(col + w - start_cols, max_cols - shown)
            out.append(" " * pad)
            shown += pad
            col += w
            continue
        if ch == "\t":
            spaces = min(w, max_cols - shown)
            out.append(" " * spaces)
            shown += spaces
            col += w
            continue
        if shown + w > max_cols:
            break
        out.append(ch)
        shown += w
        col += w
    return "".join(out)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns."""
    return slice_ansi_line(text, 0, max_cols)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip then pad a styled line to exactly ``width`` columns, resetting style."""
    if width <= 0:
        return ""
    clipped = clip_ansi_line(text, width)
    pad = width - ansi_display_width(clipped)
    suffix = RESET if "\x1b" in clipped else ""
    return f"{clipped}{suffix}{' ' * max(0, pad)}"


def center_ansi_line(text: str, width: int) -> str:
    used = ansi_display_width(text)
    if used >= width:
        return fit_ansi_line(text, width)
    return fit_ansi_line(" " * ((width - used) // 2) + text, width)


def wrap_ansi_line(text: str, width: int) -> list[str]:
    """Soft-wrap a styled line into chunks of at most ``width`` columns.

    Each continuation chunk re-opens the style that was active where the
    previous chunk was cut.
    """
    if width <= 0 or not text:
        return [""]

    wrapped: list[str] = []
    chunk: list[str] = []
    active_sgr = ""
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                seq = match.group(0)
                chunk.append(seq)
                if seq.endswith("m"):
                    active_sgr = "" if seq in {RESET, "\033[m", "\033[39;49;00m"} else active_sgr + seq
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > width and col > 0:
            wrapped.append("".join(chunk))
            chunk = [active_sgr] if active_sgr else []
            col = 0
            w = char_display_width(ch, col)
        chunk.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1
    wrapped.append("".join(chunk))
    return wrapped


__all__ = [
    "ANSI_ESCAPE_RE",
    "RESET",
    "ansi_display_width",
    "center_ansi_line",
    "char_display_width",
    "clip_ansi_line",
    "fit_ansi_line",
    "sanitize_terminal_text",
    "slice_ansi_line",
    "strip_ansi",
    "wrap_ansi_line",
]
