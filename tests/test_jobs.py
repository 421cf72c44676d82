"""Job lifecycle tests: submit, poll backoff, fetch, and stale-event drops.

Worker tasks run inline through an injected spawn function so every event
lands on the queue before ``drain_events`` is called.
"""

from __future__ import annotations

import unittest

from spelunktui import jobs as jobs_mod
from spelunktui.errors import NetworkError
from spelunktui.jobs import JobController, JobCreated, ResultsFetched, StatusPolled
from spelunktui.models import JobStatus
from spelunktui.state import SessionState, ViewMode


class _FakeBackend:
    def __init__(self) -> None:
        self.created: list[str] = []
        self.status_calls: list[str] = []
        self.fetch_calls: list[tuple[str, int, int]] = []
        self.next_sid = "sid-1"
        self.statuses: list[JobStatus] = []
        self.results: list[dict] = []
        self.create_error: Exception | None = None
        self.fetch_error: Exception | None = None

    def create_search(self, query: str) -> str:
        self.created.append(query)
        if self.create_error is not None:
            raise self.create_error
        return self.next_sid

    def get_status(self, sid: str) -> JobStatus:
        self.status_calls.append(sid)
        return self.statuses.pop(0)

    def fetch_results(self, sid: str, count: int = 100, offset: int = 0) -> list[dict]:
        self.fetch_calls.append((sid, count, offset))
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.results)

    def build_web_url(self, sid: str) -> str:
        return f"https://splunk.example:8000/en-US/app/search/search?sid={sid}"


class _Clock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _controller(backend: _FakeBackend, clock: _Clock | None = None) -> JobController:
    return JobController(backend, spawn=lambda work: work(), clock=clock or _Clock())


class FormatQueryTests(unittest.TestCase):
    def test_plain_query_gets_search_prefix(self) -> None:
        self.assertEqual(jobs_mod.format_query("index=main"), "| search index=main")

    def test_pipe_query_is_kept_and_trimmed(self) -> None:
        self.assertEqual(jobs_mod.format_query("  | tstats count  "), "| tstats count")

    def test_poll_delay_doubles_and_caps(self) -> None:
        delays = [jobs_mod.poll_delay(attempt) for attempt in range(6)]
        self.assertEqual(delays, [0.25, 0.5, 1.0, 2.0, 2.0, 2.0])


class SubmitTests(unittest.TestCase):
    def test_submit_creates_job_with_formatted_query(self) -> None:
        backend = _FakeBackend()
        clock = _Clock(50.0)
        controller = _controller(backend, clock)
        state = SessionState(query="index=main")

        self.assertTrue(controller.submit(state))
        self.assertTrue(controller.drain_events(state))

        self.assertEqual(backend.created, ["| search index=main"])
        self.assertIsNotNone(state.job)
        self.assertEqual(state.job.sid, "sid-1")
        self.assertEqual(state.job.phase, "created")
        self.assertEqual(state.job.created_at, 50.0)
        self.assertIsNone(state.pending_submit)
        self.assertIn("sid-1", state.status_message)

    def test_blank_query_is_ignored(self) -> None:
        backend = _FakeBackend()
        controller = _controller(backend)
        state = SessionState(query="   \n ")

        self.assertFalse(controller.submit(state))
        self.assertEqual(backend.created, [])
        self.assertIsNone(state.pending_submit)

    def test_create_failure_reports_status(self) -> None:
        backend = _FakeBackend()
        backend.create_error = NetworkError("connection refused")
        controller = _controller(backend)
        state = SessionState(query="index=main")

        controller.submit(state)
        controller.drain_events(state)

        self.assertIsNone(state.job)
        self.assertEqual(state.status_message, "Search failed: connection refused")

    def test_submit_drops_previous_results(self) -> None:
        backend = _FakeBackend()
        controller = _controller(backend)
        state = SessionState(query="index=main", results=[{"_raw": "old"}], selection=0)

        controller.submit(state)

        self.assertEqual(state.results, [])
        self.assertIsNone(state.selection)


class PollTests(unittest.TestCase):
    def _running_state(self, backend: _FakeBackend, clock: _Clock) -> tuple[JobController, SessionState]:
        controller = _controller(backend, clock)
        state = SessionState(query="index=main")
        controller.submit(state)
        controller.drain_events(state)
        return controller, state

    def test_poll_waits_for_backoff_deadline(self) -> None:
        backend = _FakeBackend()
        clock = _Clock(10.0)
        controller, state = self._running_state(backend, clock)

        self.assertFalse(controller.maybe_poll(state))
        self.assertEqual(backend.status_calls, [])

        clock.now = 10.25
        backend.statuses.append(JobStatus(is_done=False, dispatch_state="PARSING"))
        self.assertTrue(controller.maybe_poll(state))
        self.assertEqual(backend.status_calls, ["sid-1"])

    def test_running_status_clears_in_flight_flag_without_fetch(self) -> None:
        backend = _FakeBackend()
        clock = _Clock(10.0)
        controller, state = self._running_state(backend, clock)
        backend.statuses.append(
            JobStatus.from_content({"isDone": False, "dispatchState": "PARSING", "resultCount": 0})
        )

        clock.now = 11.0
        controller.maybe_poll(state)
        controller.drain_events(state)

        job = state.job
        self.assertFalse(job.is_fetching)
        self.assertEqual(job.phase, "running")
        self.assertEqual(job.poll_attempts, 1)
        self.assertEqual(job.next_poll_at, 11.5)
        self.assertEqual(backend.fetch_calls, [])
        self.assertEqual(state.status_message, "Job running... Dispatched: PARSING")

    def test_done_status_fetches_results(self) -> None:
        backend = _FakeBackend()
        clock = _Clock(10.0)
        controller, state = self._running_state(backend, clock)
        backend.statuses.append(JobStatus.from_content({"isDone": True, "resultCount": 3}))
        backend.results = [{"_raw": "a"}, {"_raw": "b"}, {"_raw": "c"}]

        clock.now = 11.0
        controller.maybe_poll(state)
        controller.drain_events(state)

        self.assertEqual(len(state.results), 3)
        self.assertTrue(state.results_fetched)
        self.assertEqual(state.job.phase, "done")
        self.assertEqual(state.status_message, "Loaded 3 results.")
        self.assertEqual(backend.fetch_calls, [("sid-1", 100, 0)])
        self.assertEqual(state.selection, 0)
        self.assertFalse(controller.maybe_poll(state))

    def test_raw_view_does_not_select_after_fetch(self) -> None:
        backend = _FakeBackend()
        clock = _Clock(10.0)
        controller, state = self._running_state(backend, clock)
        state.view_mode = ViewMode.RAW_EVENTS
        backend.statuses.append(JobStatus(is_done=True, dispatch_state="DONE", result_count=1))
        backend.results = [{"_raw": "a"}]

        clock.now = 11.0
        controller.maybe_poll(state)
        controller.drain_events(state)

        self.assertIsNone(state.selection)
        self.assertEqual(state.results, [{"_raw": "a"}])

    def test_fetch_failure_marks_job_failed(self) -> None:
        backend = _FakeBackend()
        clock = _Clock(10.0)
        controller, state = self._running_state(backend, clock)
        backend.statuses.append(JobStatus(is_done=True, dispatch_state="DONE"))
        backend.fetch_error = NetworkError("timed out")

        clock.now = 11.0
        controller.maybe_poll(state)
        controller.drain_events(state)

        self.assertEqual(state.job.phase, "failed")
        self.assertEqual(state.status_message, "Failed to fetch results: timed out")
        self.assertFalse(controller.maybe_poll(state))


class StaleEventTests(unittest.TestCase):
    def test_events_for_replaced_job_are_dropped(self) -> None:
        backend = _FakeBackend()
        controller = _controller(backend)
        state = SessionState(query="index=main")
        controller.submit(state)
        controller.drain_events(state)

        stale = ResultsFetched("other-sid", [{"_raw": "late"}])
        self.assertFalse(controller.apply(state, stale))
        self.assertEqual(state.results, [])

    def test_create_event_from_superseded_submit_is_dropped(self) -> None:
        backend = _FakeBackend()
        controller = JobController(backend, spawn=lambda work: None, clock=_Clock())
        state = SessionState(query="index=main")
        controller.submit(state)
        first_generation = state.submit_generation
        controller.submit(state)

        self.assertFalse(controller.apply(state, JobCreated(first_generation, "old")))
        self.assertTrue(controller.apply(state, JobCreated(state.submit_generation, "new")))
        self.assertEqual(state.job.sid, "new")

    def test_clear_invalidates_in_flight_work(self) -> None:
        backend = _FakeBackend()
        controller = _controller(backend)
        state = SessionState(query="index=main")
        controller.submit(state)
        controller.drain_events(state)

        controller.clear(state)

        self.assertIsNone(state.job)
        self.assertEqual(state.status_message, "Results cleared.")
        self.assertFalse(controller.apply(state, StatusPolled("sid-1", JobStatus(True, "DONE"))))

    def test_web_url_follows_active_job(self) -> None:
        backend = _FakeBackend()
        controller = _controller(backend)
        state = SessionState(query="index=main")
        self.assertIsNone(controller.web_url(state))

        controller.submit(state)
        controller.drain_events(state)

        self.assertTrue(controller.web_url(state).endswith("sid=sid-1"))


if __name__ == "__main__":
    unittest.main()
