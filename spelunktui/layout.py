"""Screen geometry for the session view.

All rectangles are 0-based ``(x, y)`` cells. Rendering and mouse hit-testing
both derive from ``compute_layout`` so a click always lands on the pane that
was drawn there.
"""

from __future__ import annotations

from dataclasses import dataclass

from .state import ViewMode

MARGIN = 1
HEADER_HEIGHT = 5
SEARCH_WIDTH_PERCENT = 70


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, col: int, row: int) -> bool:
        return self.x <= col < self.right and self.y <= row < self.bottom

    def inner(self) -> Rect:
        """The area inside a one-cell border."""
        return Rect(self.x + 1, self.y + 1, max(0, self.width - 2), max(0, self.height - 2))


@dataclass(frozen=True)
class ScreenLayout:
    width: int
    height: int
    search: Rect
    sparkline: Rect
    status: Rect
    content: Rect
    list_pane: Rect
    detail_pane: Rect | None
    footer: Rect

    @property
    def search_text(self) -> Rect:
        return self.search.inner()


def compute_layout(width: int, height: int, view_mode: ViewMode) -> ScreenLayout:
    inner_x = MARGIN
    inner_w = max(1, width - 2 * MARGIN)
    top = MARGIN
    bottom = max(top + 1, height - MARGIN)

    header_h = min(HEADER_HEIGHT, max(0, bottom - top))
    search_w = max(1, inner_w * SEARCH_WIDTH_PERCENT // 100)
    search = Rect(inner_x, top, search_w, header_h)
    sparkline = Rect(inner_x + search_w, top, max(0, inner_w - search_w), header_h)

    status = Rect(inner_x, search.bottom, inner_w, 1 if bottom - search.bottom > 0 else 0)
    footer_y = max(status.bottom, bottom - 1)
    footer = Rect(inner_x, footer_y, inner_w, 1 if bottom - status.bottom > 1 else 0)
    content = Rect(inner_x, status.bottom, inner_w, max(0, footer.y - status.bottom))

    body = content.inner()
    if view_mode is ViewMode.TABLE:
        list_w = max(0, (body.width - 1) // 2)
        list_pane = Rect(body.x, body.y, list_w, body.height)
        detail_pane = Rect(body.x + list_w + 1, body.y, max(0, body.width - list_w - 1), body.height)
    else:
        list_pane = body
        detail_pane = None

    return ScreenLayout(
        width=width,
        height=height,
        search=search,
        sparkline=sparkline,
        status=status,
        content=content,
        list_pane=list_pane,
        detail_pane=detail_pane,
        footer=footer,
    )


def centered_rect(percent_x: int, percent_y: int, width: int, height: int) -> Rect:
    """Rectangle of the given screen percentages, centered on the screen."""
    w = max(3, min(width, width * percent_x // 100))
    h = max(3, min(height, height * percent_y // 100))
    return Rect((width - w) // 2, (height - h) // 2, w, h)


__all__ = ["Rect", "ScreenLayout", "centered_rect", "compute_layout"]
