"""Pygments highlighting for the event detail pane."""

from __future__ import annotations

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalTrueColorFormatter
from pygments.lexers import YamlLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .ansi import sanitize_terminal_text

FALLBACK_STYLE = "monokai"

_YAML_LEXER = YamlLexer(stripnl=False, ensurenl=False)
_FORMATTERS: dict[str, TerminalTrueColorFormatter] = {}
_VALID_STYLES: set[str] = set()
_INVALID_STYLES: set[str] = set()


def normalize_style(style: str) -> str:
    """Return ``style`` when pygments knows it, else the fallback style."""
    if style in _VALID_STYLES:
        return style
    if style in _INVALID_STYLES:
        return FALLBACK_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        _INVALID_STYLES.add(style)
        return FALLBACK_STYLE
    _VALID_STYLES.add(style)
    return style


def _formatter_for_style(style: str) -> TerminalTrueColorFormatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = TerminalTrueColorFormatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def highlight_yaml(source: str, style: str) -> list[str]:
    """Colorize YAML text and split it into display lines."""
    clean = sanitize_terminal_text(source)
    if not clean:
        return []
    rendered = pygments_highlight(clean, _YAML_LEXER, _formatter_for_style(normalize_style(style)))
    lines = rendered.split("\n")
    if lines and lines[-1] in {"", "\033[39m", "\033[39;49;00m"}:
        lines.pop()
    return lines


__all__ = ["FALLBACK_STYLE", "highlight_yaml", "normalize_style"]
