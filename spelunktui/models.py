"""Backend payload models shared by the client and the session."""

from __future__ import annotations

from dataclasses import dataclass, field


def _as_int(value: object) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


def _as_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true"}
    return bool(value)


@dataclass(frozen=True)
class JobStatus:
    """Snapshot of one search job's ``content`` block."""

    is_done: bool
    dispatch_state: str
    result_count: int = 0
    run_duration: float = 0.0
    scan_count: int = 0
    event_count: int = 0
    done_progress: float | None = None
    messages: tuple[dict, ...] = field(default_factory=tuple)

    @classmethod
    def from_content(cls, content: dict) -> JobStatus:
        """Build a status from the backend's camelCase job content map.

        Numeric counters the backend leaves out default to zero; the backend
        sometimes sends booleans and numbers as strings.
        """
        progress = content.get("doneProgress")
        messages = content.get("messages") or ()
        return cls(
            is_done=_as_bool(content.get("isDone", False)),
            dispatch_state=str(content.get("dispatchState", "")),
            result_count=_as_int(content.get("resultCount", 0)),
            run_duration=_as_float(content.get("runDuration", 0.0)),
            scan_count=_as_int(content.get("scanCount", 0)),
            event_count=_as_int(content.get("eventCount", 0)),
            done_progress=None if progress is None else _as_float(progress),
            messages=tuple(m for m in messages if isinstance(m, dict)),
        )


__all__ = ["JobStatus"]
