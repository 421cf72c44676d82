"""Result browser: raw/table views, selection, local regex filter, detail cache.

All functions operate on ``SessionState`` in place and return whether they
changed anything worth redrawing.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import NamedTuple

import yaml

from .ansi import sanitize_terminal_text
from .errors import InvalidRegexError
from .highlight import highlight_yaml
from .state import SessionState, ViewFocus, ViewMode

FAST_SCROLL_STEP = 10
SPARKLINE_BUCKETS = 40
RAW_VISIBLE_PRIVATE_KEYS = frozenset({"_time", "_raw"})
TABLE_TIME_WIDTH = 24
TABLE_SOURCETYPE_WIDTH = 20
NO_SELECTION_TEXT = "Select an event to view details."
MAX_JSON_DEPTH = 128


class RawLine(NamedTuple):
    """One logical row of the Raw view; ``key is None`` marks an event separator."""

    event_index: int
    key: str | None
    value: str


def _value_text(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def raw_event_lines(results: list[dict]) -> list[RawLine]:
    """Flatten events into ``key: value`` rows with a rule between events.

    Keys starting with ``_`` are skipped except ``_time`` and ``_raw``.
    Multi-line values continue on rows with an empty key.
    """
    lines: list[RawLine] = []
    for index, event in enumerate(results):
        if index > 0:
            lines.append(RawLine(index, None, ""))
        for key, value in event.items():
            if key.startswith("_") and key not in RAW_VISIBLE_PRIVATE_KEYS:
                continue
            parts = sanitize_terminal_text(_value_text(value)).split("\n")
            lines.append(RawLine(index, key, parts[0]))
            lines.extend(RawLine(index, "", part) for part in parts[1:])
    return lines


def event_at_row(lines: list[RawLine], row: int) -> int | None:
    if not lines:
        return None
    return lines[max(0, min(row, len(lines) - 1))].event_index


def row_for_event(lines: list[RawLine], event_index: int) -> int:
    for row, line in enumerate(lines):
        if line.event_index == event_index and line.key is not None:
            return row
    return 0


def table_row(event: dict) -> tuple[str, str, str]:
    """Return the (Time, Sourcetype, Message) cells for one event."""
    raw = sanitize_terminal_text(_value_text(event.get("_raw", "")))
    return (
        sanitize_terminal_text(_value_text(event.get("_time", ""))),
        sanitize_terminal_text(_value_text(event.get("sourcetype", ""))),
        raw.split("\n", 1)[0],
    )


def _reject_constant(name: str) -> object:
    raise ValueError(f"non-standard JSON constant {name}")


def _nesting_depth(value: object, limit: int) -> int:
    """Container nesting of ``value``, counted without recursion; stops early past ``limit``."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        item, level = stack.pop()
        if isinstance(item, dict):
            children = item.values()
        elif isinstance(item, list):
            children = item
        else:
            continue
        deepest = max(deepest, level)
        if deepest > limit:
            break
        stack.extend((child, level + 1) for child in children)
    return deepest


def recursive_json_parse(value: object, depth: int = 0) -> object:
    """Re-parse string values that are themselves JSON.

    Nesting is capped at ``MAX_JSON_DEPTH``; a string whose parsed form would
    go deeper is kept as text.
    """
    if isinstance(value, str):
        try:
            parsed = json.loads(value, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            return value
        if depth + _nesting_depth(parsed, MAX_JSON_DEPTH) > MAX_JSON_DEPTH:
            return value
        return recursive_json_parse(parsed, depth)
    if depth >= MAX_JSON_DEPTH:
        return value
    if isinstance(value, dict):
        return {key: recursive_json_parse(item, depth + 1) for key, item in value.items()}
    if isinstance(value, list):
        return [recursive_json_parse(item, depth + 1) for item in value]
    return value


def _dump_yaml(value: object) -> str:
    return yaml.safe_dump(
        value,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10_000,
    )


def event_to_yaml(event: dict) -> str:
    try:
        return _dump_yaml(recursive_json_parse(event))
    except RecursionError:
        return _dump_yaml({key: _value_text(item) for key, item in event.items()})


def refresh_detail(state: SessionState) -> bool:
    """Rebuild the highlighted detail lines when selection, theme, or results changed."""
    index = state.selection
    if index is None or not (0 <= index < len(state.results)):
        if state.detail_key is None and not state.detail_lines:
            return False
        state.detail_key = None
        state.detail_lines = []
        return True
    key = (index, state.theme.name, state.results_version)
    if key == state.detail_key:
        return False
    state.detail_lines = highlight_yaml(event_to_yaml(state.results[index]), state.theme.syntax_style)
    state.detail_key = key
    return True


def _parse_event_time(value: object) -> float | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.strip()).timestamp()
    except ValueError:
        return None


def sparkline_buckets(results: list[dict], buckets: int = SPARKLINE_BUCKETS) -> list[int]:
    """Count events per time bucket between the earliest and latest ``_time``."""
    times = [t for t in (_parse_event_time(event.get("_time")) for event in results) if t is not None]
    counts = [0] * buckets
    if len(times) < 2:
        return counts
    low, high = min(times), max(times)
    span = high - low
    if span <= 0:
        return counts
    for t in times:
        idx = int((t - low) / span * (buckets - 1))
        counts[min(idx, buckets - 1)] += 1
    return counts


def set_selection(state: SessionState, index: int | None) -> None:
    if index is not None and not state.results:
        index = None
    if index is not None:
        index = max(0, min(index, len(state.results) - 1))
    if index != state.selection:
        state.selection = index
        state.detail_scroll = 0
    refresh_detail(state)
    state.dirty = True


def move_selection(state: SessionState, delta: int) -> bool:
    """Step the table selection, clamping at both ends."""
    if not state.results:
        return False
    if state.selection is None:
        set_selection(state, 0)
        return True
    set_selection(state, state.selection + delta)
    return True


def scroll_raw(state: SessionState, delta: int) -> bool:
    if not state.results:
        return False
    total = len(raw_event_lines(state.results))
    new_offset = max(0, min(state.scroll_offset + delta, max(0, total - 1)))
    if new_offset == state.scroll_offset:
        return False
    state.scroll_offset = new_offset
    state.dirty = True
    return True


def scroll_detail(state: SessionState, delta: int) -> bool:
    if state.selection is None:
        return False
    new_scroll = max(0, min(state.detail_scroll + delta, max(0, len(state.detail_lines) - 1)))
    if new_scroll == state.detail_scroll:
        return False
    state.detail_scroll = new_scroll
    state.dirty = True
    return True


def navigate(state: SessionState, delta: int) -> bool:
    """Apply a vertical move to whichever results pane has focus."""
    if state.view_mode is ViewMode.RAW_EVENTS:
        return scroll_raw(state, delta)
    if state.view_focus is ViewFocus.CONTENT_DETAIL:
        return scroll_detail(state, delta)
    return move_selection(state, delta)


def toggle_view_mode(state: SessionState) -> None:
    """Switch Raw <-> Table, carrying the focused event across."""
    lines = raw_event_lines(state.results)
    if state.view_mode is ViewMode.RAW_EVENTS:
        state.view_mode = ViewMode.TABLE
        set_selection(state, event_at_row(lines, state.scroll_offset))
    else:
        state.view_mode = ViewMode.RAW_EVENTS
        if state.selection is not None and lines:
            state.scroll_offset = row_for_event(lines, state.selection)
        if state.view_focus is ViewFocus.CONTENT_DETAIL:
            state.view_focus = ViewFocus.CONTENT_LIST
    state.set_status(f"Switched to {state.view_mode.value} mode.")


def follow_table_selection(state: SessionState, visible_rows: int) -> None:
    """Scroll the table so the selected row stays inside ``visible_rows``."""
    rows = max(1, visible_rows)
    offset = state.table_offset
    if state.selection is not None:
        if state.selection < offset:
            offset = state.selection
        elif state.selection >= offset + rows:
            offset = state.selection - rows + 1
    offset = max(0, min(offset, max(0, len(state.results) - rows)))
    if offset != state.table_offset:
        state.table_offset = offset
        state.dirty = True


def jump_to_event(state: SessionState, index: int) -> None:
    if state.view_mode is ViewMode.TABLE:
        set_selection(state, index)
        state.detail_scroll = 0
    else:
        state.scroll_offset = row_for_event(raw_event_lines(state.results), index)
    state.dirty = True


def compile_local_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a case-insensitive local filter, raising ``InvalidRegexError``."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise InvalidRegexError(str(exc)) from exc


def run_local_filter(state: SessionState) -> bool:
    """Compile the pending local pattern and jump to its first match.

    Returns False when the pattern is blank; invalid patterns leave the
    previous matches untouched and report the compile error.
    """
    pattern = state.local_filter.query
    if not pattern.strip():
        return False
    try:
        regex = compile_local_pattern(pattern)
    except InvalidRegexError as exc:
        state.set_status(f"Invalid Regex: {exc}")
        return True
    matches = [
        index
        for index, event in enumerate(state.results)
        if regex.search(event["_raw"] if isinstance(event.get("_raw"), str) else "")
    ]
    state.local_filter.matches = matches
    if not matches:
        state.local_filter.cursor = None
        state.set_status(f"No matches found for '{pattern}'")
        return True
    state.local_filter.cursor = 0
    jump_to_event(state, matches[0])
    state.set_status(f"Found {len(matches)} matches. (1/{len(matches)})")
    return True


def step_match(state: SessionState, delta: int) -> bool:
    """Move to the next (``+1``) or previous (``-1``) local match, wrapping."""
    matches = state.local_filter.matches
    if not matches:
        return False
    cursor = state.local_filter.cursor
    if cursor is None:
        cursor = 0 if delta > 0 else len(matches) - 1
    else:
        cursor = (cursor + delta) % len(matches)
    state.local_filter.cursor = cursor
    jump_to_event(state, matches[cursor])
    state.set_status(f"Match {cursor + 1}/{len(matches)}")
    return True


__all__ = [
    "FAST_SCROLL_STEP",
    "NO_SELECTION_TEXT",
    "RawLine",
    "compile_local_pattern",
    "event_at_row",
    "event_to_yaml",
    "follow_table_selection",
    "jump_to_event",
    "move_selection",
    "navigate",
    "raw_event_lines",
    "recursive_json_parse",
    "refresh_detail",
    "row_for_event",
    "run_local_filter",
    "scroll_detail",
    "scroll_raw",
    "set_selection",
    "sparkline_buckets",
    "step_match",
    "table_row",
]
