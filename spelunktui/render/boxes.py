"""Rounded-border boxes composed as fixed-width ANSI rows."""

from __future__ import annotations

from ..ansi import RESET, ansi_display_width, center_ansi_line, clip_ansi_line, fit_ansi_line, strip_ansi


def _border_with_label(left: str, right: str, width: int, label: str, style: str) -> str:
    inner = max(0, width - 2)
    if not label or inner < 3:
        return f"{style}{left}{'─' * inner}{right}{RESET}"
    text = clip_ansi_line(label, inner - 2)
    fill = inner - 2 - ansi_display_width(text)
    return f"{style}{left}─{RESET}{text}{RESET}{style}─{'─' * fill}{right}{RESET}"


def box_rows(
    width: int,
    height: int,
    body: list[str],
    *,
    border: str,
    title: str = "",
    bottom_label: str = "",
) -> list[str]:
    """Return ``height`` rows of exactly ``width`` columns framing ``body``.

    ``body`` rows are clipped and padded to the inner width; missing rows are
    blank. Titles sit in the top border, ``bottom_label`` in the bottom one.
    """
    if width <= 0 or height <= 0:
        return []
    if width < 2 or height < 2:
        return [fit_ansi_line("", width) for _ in range(height)]
    inner_w = width - 2
    rows = [_border_with_label("╭", "╮", width, title, border)]
    for index in range(height - 2):
        content = body[index] if index < len(body) else ""
        rows.append(f"{border}│{RESET}{fit_ansi_line(content, inner_w)}{border}│{RESET}")
    rows.append(_border_with_label("╰", "╯", width, bottom_label, border))
    return rows


def centered_body(text: str, inner_w: int, inner_h: int) -> list[str]:
    """Body rows with ``text`` centered both ways."""
    rows = ["" for _ in range(max(0, inner_h))]
    if rows:
        rows[(inner_h - 1) // 2] = center_ansi_line(text, inner_w)
    return rows


def dim_line(text: str, style: str) -> str:
    """Re-style a rendered row as plain dimmed text."""
    return f"{style}{strip_ansi(text)}{RESET}"


__all__ = ["box_rows", "centered_body", "dim_line"]
