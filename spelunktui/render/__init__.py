"""Frame composition for the session view.

``build_frame`` turns the session state into one ANSI string (base view,
optional overlay, cursor placement); ``render_frame`` writes it out.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from ..ansi import ansi_display_width, fit_ansi_line
from ..layout import ScreenLayout
from ..state import InputMode, SessionState
from .boxes import dim_line
from .main_view import (
    cursor_shape,
    footer_line,
    job_status_line,
    query_cursor,
    results_box_rows,
    search_box_rows,
    sparkline_rows,
)
from .overlays import Overlay, build_overlay


@dataclass(frozen=True)
class Frame:
    text: str
    cursor: tuple[int, int] | None
    cursor_shape: str | None


class _Canvas:
    """Rows assembled from non-overlapping ``(x, text)`` segments."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._segments: list[list[tuple[int, str]]] = [[] for _ in range(height)]

    def place(self, x: int, y: int, rows: list[str]) -> None:
        for offset, text in enumerate(rows):
            row = y + offset
            if 0 <= row < self.height:
                self._segments[row].append((x, text))

    def rows(self) -> list[str]:
        out: list[str] = []
        for segments in self._segments:
            line: list[str] = []
            col = 0
            for x, text in sorted(segments, key=lambda item: item[0]):
                if x > col:
                    line.append(" " * (x - col))
                    col = x
                line.append(text)
                col += ansi_display_width(text)
            out.append(fit_ansi_line("".join(line), self.width))
        return out


def build_frame(
    state: SessionState,
    layout: ScreenLayout,
    *,
    web_url: str | None,
    now: float,
) -> Frame:
    width, height = layout.width, layout.height
    canvas = _Canvas(width, height)
    canvas.place(layout.search.x, layout.search.y, search_box_rows(state, layout.search))
    canvas.place(layout.sparkline.x, layout.sparkline.y, sparkline_rows(state, layout.sparkline))
    if layout.status.height:
        canvas.place(layout.status.x, layout.status.y, [job_status_line(state, layout.status.width, web_url, now)])
    canvas.place(layout.content.x, layout.content.y, results_box_rows(state, layout))
    if layout.footer.height:
        canvas.place(layout.footer.x, layout.footer.y, [footer_line(state.theme, layout.footer.width)])

    rows = canvas.rows()
    overlay: Overlay | None = build_overlay(state, width, height)
    cursor: tuple[int, int] | None = None
    if overlay is not None:
        rows = [dim_line(row, state.theme.backdrop) for row in rows]
        cursor = overlay.cursor
    elif state.input_mode is InputMode.EDITING:
        cursor = query_cursor(state, layout.search)

    out: list[str] = ["\033[?25l\033[H"]
    out.append("\r\n".join(rows))
    if overlay is not None:
        for offset, text in enumerate(overlay.rows):
            out.append(f"\033[{overlay.rect.y + offset + 1};{overlay.rect.x + 1}H{text}")
    shape = cursor_shape(state) if cursor is not None else None
    if cursor is not None and shape is not None:
        out.append(f"\033[{cursor[1] + 1};{cursor[0] + 1}H\033[?25h")
    else:
        cursor = None
    return Frame("".join(out), cursor, shape)


def render_frame(frame: Frame, fd: int | None = None) -> None:
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, frame.text.encode("utf-8", errors="replace"))


__all__ = ["Frame", "build_frame", "render_frame"]
