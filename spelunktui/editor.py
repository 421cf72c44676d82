"""External editor hand-off for the query buffer and fetched results.

Runs ``$EDITOR`` (default ``vi``) while the TUI is suspended. Returns an
error message string instead of raising for UI-friendly handling.
"""

from __future__ import annotations

import json
import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"
SCRATCH_DIRNAME = "spelunktui"
RESULTS_FILENAME = "results.json"
QUERY_FILENAME = "query.spl"


def scratch_dir() -> Path:
    path = Path(tempfile.gettempdir()) / SCRATCH_DIRNAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_results_file(results: list[dict], directory: Path | None = None) -> Path:
    target = (scratch_dir() if directory is None else directory) / RESULTS_FILENAME
    target.write_text(json.dumps(results, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return target


def write_query_file(query: str, directory: Path | None = None) -> Path:
    target = (scratch_dir() if directory is None else directory) / QUERY_FILENAME
    with target.open("w", encoding="utf-8", newline="") as handle:
        handle.write(query)
    return target


def read_query_file(path: Path) -> str:
    """Read an edited query, dropping the trailing newline most editors add."""
    with path.open("r", encoding="utf-8", newline="") as handle:
        text = handle.read()
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def editor_command() -> list[str]:
    editor_env = os.environ.get("EDITOR", "").strip() or DEFAULT_EDITOR
    return shlex.split(editor_env) or [DEFAULT_EDITOR]


def launch_editor(
    target: Path,
    disable_tui_mode: Callable[[], None],
    enable_tui_mode: Callable[[], None],
) -> str | None:
    try:
        cmd = editor_command()
    except ValueError as exc:
        return f"Cannot edit: invalid $EDITOR ({exc})."

    disable_tui_mode()
    try:
        subprocess.run([*cmd, str(target)], check=False)
    except OSError as exc:
        logger.warning("editor %r failed to start: %s", cmd, exc)
        return f"Failed to launch editor: {exc}"
    finally:
        enable_tui_mode()
    return None


__all__ = [
    "DEFAULT_EDITOR",
    "editor_command",
    "launch_editor",
    "read_query_file",
    "write_query_file",
    "write_results_file",
]
