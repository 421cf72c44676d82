"""Keyboard shortcut table shown by the Help overlay."""

from __future__ import annotations

from ..ansi import RESET, fit_ansi_line
from ..ui_theme import UITheme

KEY_COLUMN_WIDTH = 25

SHORTCUTS: tuple[tuple[str, str], ...] = (
    ("General", ""),
    ("Ctrl+/", "Show this Help"),
    ("q", "Quit"),
    ("e", "Enter Search Input Mode"),
    ("t / Ctrl+t", "Select Theme"),
    ("", ""),
    ("Search Input", ""),
    ("Enter", "Run Search"),
    ("Shift+Enter / Ctrl+j", "Newline (Standard Mode)"),
    ("Ctrl+x", "Edit Query in External Editor"),
    ("Ctrl+v", "Toggle Vim/Standard Mode"),
    ("Esc", "Leave Search Input"),
    ("", ""),
    ("Results & Navigation", ""),
    ("j / k / Down / Up", "Scroll / Navigate"),
    ("Ctrl+j / Ctrl+k", "Fast Scroll"),
    ("Ctrl+r", "Clear Results"),
    ("Ctrl+s", "Save Search"),
    ("Ctrl+l", "Load Saved Search"),
    ("Shift+E", "Open Job in Browser"),
    ("Ctrl+v / Ctrl+m", "Toggle Raw/Table View"),
    ("Ctrl+x", "Open Results in External Editor"),
    ("/ / n / N", "Local Regex Search / Next / Prev"),
    ("", ""),
    ("Pane Navigation", ""),
    ("Tab", "Cycle Focus (Search > List > Detail)"),
    ("h / l / Left / Right", "Focus Panes"),
)


def help_rows(theme: UITheme) -> list[str]:
    """Shortcut table rows; section headings are the entries with no description."""
    rows: list[str] = []
    for key, description in SHORTCUTS:
        if not description:
            rows.append(f"{theme.title_secondary}{theme.bold}{key}{RESET}" if key else "")
            continue
        rows.append(f"{theme.text}{fit_ansi_line(key, KEY_COLUMN_WIDTH)} {description}{RESET}")
    return rows


__all__ = ["KEY_COLUMN_WIDTH", "SHORTCUTS", "help_rows"]
