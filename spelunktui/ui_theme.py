"""UI theme definitions and selection helpers.

Each theme pairs an ANSI palette for the chrome with the pygments style used
for the YAML detail pane, so switching theme changes both in one place.
"""

from __future__ import annotations

from dataclasses import dataclass


def _rgb(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"


def _rgb_bg(r: int, g: int, b: int) -> str:
    return f"\033[48;2;{r};{g};{b}m"


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette plus its paired syntax style."""

    name: str
    syntax_style: str
    border: str
    text: str
    input_edit: str
    title_main: str
    title_secondary: str
    highlight: str
    selected: str
    label: str
    dim: str
    error: str
    reset: str = "\033[0m"
    bold: str = "\033[1m"
    underline: str = "\033[4m"
    backdrop: str = "\033[2m"


DEFAULT_THEME = UITheme(
    name="Default",
    syntax_style="native",
    border="\033[32m",
    text="\033[37m",
    input_edit="\033[33m",
    title_main="\033[32m",
    title_secondary="\033[36m",
    highlight="\033[35m",
    selected="\033[45;97m",
    label="\033[36m",
    dim="\033[90m",
    error="\033[31m",
)

COLOR_POP_THEME = UITheme(
    name="ColorPop",
    syntax_style="monokai",
    border="\033[36m",
    text="\033[37m",
    input_edit="\033[31m",
    title_main="\033[33m",
    title_secondary="\033[32m",
    highlight="\033[34m",
    selected="\033[44;97m",
    label="\033[32m",
    dim="\033[37;2m",
    error="\033[31m",
)

SPLUNK_THEME = UITheme(
    name="Splunk",
    syntax_style="gruvbox-dark",
    border=_rgb(115, 165, 52),
    text=_rgb(255, 255, 255),
    input_edit=_rgb(245, 130, 32),
    title_main=_rgb(115, 165, 52),
    title_secondary=_rgb(0, 122, 195),
    highlight=_rgb(214, 61, 139),
    selected=_rgb_bg(214, 61, 139) + "\033[97m",
    label=_rgb(45, 156, 219),
    dim=_rgb(164, 164, 164),
    error=_rgb(208, 2, 27),
)

NEON_THEME = UITheme(
    name="Neon",
    syntax_style="dracula",
    border=_rgb(0, 255, 0),
    text="\033[97m",
    input_edit=_rgb(255, 20, 147),
    title_main=_rgb(0, 255, 0),
    title_secondary="\033[36m",
    highlight=_rgb(255, 20, 147),
    selected=_rgb_bg(255, 20, 147) + "\033[97m",
    label=_rgb(0, 255, 0),
    dim="\033[90m",
    error="\033[31m",
)

_THEMES: dict[str, UITheme] = {
    theme.name: theme for theme in (DEFAULT_THEME, COLOR_POP_THEME, SPLUNK_THEME, NEON_THEME)
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable theme names in menu order."""
    return tuple(_THEMES.keys())


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name (case-insensitive), falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    for theme_name in _THEMES:
        if theme_name.lower() == candidate:
            return theme_name
    return DEFAULT_THEME.name


def resolve_theme(name: str | None) -> UITheme:
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "COLOR_POP_THEME",
    "SPLUNK_THEME",
    "NEON_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
