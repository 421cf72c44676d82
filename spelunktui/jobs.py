"""Search job lifecycle: submit, poll, fetch.

Network calls run on short-lived daemon threads. They never touch session
state; instead they put ``JobEvent`` values on a queue that the event loop
drains through ``JobController.drain_events``. Events carry the sid (or the
submit generation) they were started for, and anything that no longer
matches the current job is dropped.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Protocol

from .models import JobStatus
from .results import refresh_detail, set_selection
from .state import JobRecord, SessionState, ViewMode

logger = logging.getLogger(__name__)

RESULTS_PAGE_SIZE = 100
FIRST_POLL_DELAY = 0.25
MAX_POLL_DELAY = 2.0


class SearchBackend(Protocol):
    def create_search(self, query: str) -> str: ...

    def get_status(self, sid: str) -> JobStatus: ...

    def fetch_results(self, sid: str, count: int = 100, offset: int = 0) -> list[dict]: ...

    def build_web_url(self, sid: str) -> str: ...


@dataclass(frozen=True)
class JobCreated:
    generation: int
    sid: str


@dataclass(frozen=True)
class JobCreateFailed:
    generation: int
    error: str


@dataclass(frozen=True)
class StatusPolled:
    sid: str
    status: JobStatus


@dataclass(frozen=True)
class StatusPollFailed:
    sid: str
    error: str


@dataclass(frozen=True)
class ResultsFetched:
    sid: str
    results: list[dict]


@dataclass(frozen=True)
class ResultsFetchFailed:
    sid: str
    error: str


JobEvent = JobCreated | JobCreateFailed | StatusPolled | StatusPollFailed | ResultsFetched | ResultsFetchFailed


def format_query(query: str) -> str:
    """Trim ``query`` and prefix ``| search`` unless it already starts with a pipe."""
    trimmed = query.strip()
    if trimmed.startswith("|"):
        return trimmed
    return f"| search {trimmed}"


def poll_delay(attempt: int) -> float:
    """Seconds to wait before poll ``attempt`` (0-based): doubling, capped."""
    return min(MAX_POLL_DELAY, FIRST_POLL_DELAY * (2 ** max(0, attempt)))


def _spawn_daemon(target: Callable[[], None]) -> None:
    threading.Thread(target=target, name="spelunktui-job", daemon=True).start()


class JobController:
    """Owns the single active job and the worker threads that serve it."""

    def __init__(
        self,
        backend: SearchBackend,
        *,
        spawn: Callable[[Callable[[], None]], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._spawn = _spawn_daemon if spawn is None else spawn
        self._clock = clock
        self._events: Queue[JobEvent] = Queue()

    def post(self, event: JobEvent) -> None:
        self._events.put(event)

    def web_url(self, state: SessionState) -> str | None:
        if state.job is None:
            return None
        return self._backend.build_web_url(state.job.sid)

    def submit(self, state: SessionState) -> bool:
        """Start a new job for the current query; blank queries are ignored."""
        trimmed = state.query.strip()
        if not trimmed:
            return False
        spl = format_query(trimmed)
        state.submit_generation += 1
        generation = state.submit_generation
        state.pending_submit = generation
        state.job = None
        state.reset_results()
        state.set_status(f"Creating search job for '{trimmed}'...")

        def work() -> None:
            try:
                sid = self._backend.create_search(spl)
            except Exception as exc:
                self.post(JobCreateFailed(generation, str(exc)))
                return
            self.post(JobCreated(generation, sid))

        self._spawn(work)
        return True

    def clear(self, state: SessionState) -> None:
        """Forget the job and its results; in-flight work becomes stale."""
        state.submit_generation += 1
        state.pending_submit = None
        state.job = None
        state.reset_results()
        state.set_status("Results cleared.")

    def maybe_poll(self, state: SessionState, now: float | None = None) -> bool:
        """Spawn one status/fetch task if the active job is due for it."""
        job = state.job
        if job is None or job.results_fetched or job.is_fetching or job.error is not None:
            return False
        now = self._clock() if now is None else now
        if now < job.next_poll_at:
            return False
        job.is_fetching = True
        sid = job.sid

        def work() -> None:
            try:
                status = self._backend.get_status(sid)
            except Exception as exc:
                self.post(StatusPollFailed(sid, str(exc)))
                return
            self.post(StatusPolled(sid, status))
            if not status.is_done:
                return
            try:
                results = self._backend.fetch_results(sid, count=RESULTS_PAGE_SIZE, offset=0)
            except Exception as exc:
                self.post(ResultsFetchFailed(sid, str(exc)))
                return
            self.post(ResultsFetched(sid, results))

        self._spawn(work)
        return True

    def drain_events(self, state: SessionState) -> bool:
        changed = False
        while True:
            try:
                event = self._events.get_nowait()
            except Empty:
                return changed
            changed = self.apply(state, event) or changed

    def apply(self, state: SessionState, event: JobEvent) -> bool:
        """Fold one worker event into ``state``; returns False for stale events."""
        if isinstance(event, (JobCreated, JobCreateFailed)):
            if state.pending_submit != event.generation:
                logger.debug("dropping stale %s for generation %d", type(event).__name__, event.generation)
                return False
            state.pending_submit = None
            if isinstance(event, JobCreateFailed):
                logger.error("search creation failed: %s", event.error)
                state.set_status(f"Search failed: {event.error}")
                return True
            now = self._clock()
            state.job = JobRecord(sid=event.sid, created_at=now, next_poll_at=now + poll_delay(0))
            state.set_status(f"Job created (SID: {event.sid}). Running...")
            return True

        job = state.job
        if job is None or job.sid != event.sid:
            logger.debug("dropping stale %s for sid %s", type(event).__name__, event.sid)
            return False

        if isinstance(event, StatusPolled):
            job.status = event.status
            if event.status.is_done:
                state.set_status("Job done. Fetching results...")
            else:
                job.is_fetching = False
                job.poll_attempts += 1
                job.next_poll_at = self._clock() + poll_delay(job.poll_attempts)
                state.set_status(f"Job running... Dispatched: {event.status.dispatch_state}")
            return True

        if isinstance(event, StatusPollFailed):
            logger.warning("status poll for %s failed: %s", event.sid, event.error)
            job.is_fetching = False
            job.poll_attempts += 1
            job.next_poll_at = self._clock() + poll_delay(job.poll_attempts)
            return True

        job.is_fetching = False
        if isinstance(event, ResultsFetchFailed):
            logger.error("fetching results for %s failed: %s", event.sid, event.error)
            job.error = event.error
            state.set_status(f"Failed to fetch results: {event.error}")
            return True

        state.reset_results()
        state.results = list(event.results)
        job.results_fetched = True
        if state.view_mode is ViewMode.TABLE and state.results:
            set_selection(state, 0)
        else:
            refresh_detail(state)
        state.set_status(f"Loaded {len(state.results)} results.")
        return True


__all__ = [
    "JobController",
    "JobCreateFailed",
    "JobCreated",
    "JobEvent",
    "MAX_POLL_DELAY",
    "RESULTS_PAGE_SIZE",
    "ResultsFetchFailed",
    "ResultsFetched",
    "SearchBackend",
    "StatusPollFailed",
    "StatusPolled",
    "format_query",
    "poll_delay",
]
