"""REST client for the Splunk search-job endpoints.

Only the calls the session needs: create a job, poll its status, fetch one
page of results, and derive the web UI link for a job.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from .errors import BackendStatusError, NetworkError, ParseResponseError
from .models import JobStatus

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
MANAGEMENT_PORT = ":8089"
WEB_SEARCH_PATH = "/en-US/app/search/search"


class SplunkClient:
    """Bearer-token client over one pooled ``httpx.Client``."""

    def __init__(
        self,
        base_url: str,
        token: str,
        verify_ssl: bool = True,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.verify_ssl = verify_ssl
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}"},
            verify=verify_ssl,
            timeout=timeout,
            transport=transport,
        )

    def _request(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, endpoint, **kwargs)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {endpoint} failed: {exc}") from exc
        if not response.is_success:
            raise BackendStatusError(response.status_code, response.text)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError as exc:
            raise ParseResponseError(f"Failed to parse response: {exc}") from exc
        if not isinstance(data, dict):
            raise ParseResponseError("Failed to parse response: expected a JSON object")
        return data

    def create_search(self, query: str) -> str:
        """Dispatch ``query`` as a normal (async) search job and return its SID."""
        response = self._request(
            "POST",
            "/services/search/jobs",
            data={"search": query, "output_mode": "json", "exec_mode": "normal"},
        )
        sid = self._json(response).get("sid")
        if not isinstance(sid, str) or not sid:
            raise ParseResponseError("Failed to parse search creation response: no sid")
        logger.info("created search job %s", sid)
        return sid

    def get_status(self, sid: str) -> JobStatus:
        response = self._request(
            "GET",
            f"/services/search/jobs/{quote(sid, safe='')}",
            params={"output_mode": "json"},
        )
        data = self._json(response)
        try:
            content = data["entry"][0]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ParseResponseError(f"Failed to parse job status response: {exc!r}") from exc
        if not isinstance(content, dict):
            raise ParseResponseError("Failed to parse job status response: content is not an object")
        return JobStatus.from_content(content)

    def fetch_results(self, sid: str, count: int = 100, offset: int = 0) -> list[dict]:
        response = self._request(
            "GET",
            f"/services/search/jobs/{quote(sid, safe='')}/results",
            params={"output_mode": "json", "count": count, "offset": offset},
        )
        results = self._json(response).get("results", [])
        if not isinstance(results, list):
            raise ParseResponseError("Failed to parse results response: results is not a list")
        return [row for row in results if isinstance(row, dict)]

    def build_web_url(self, sid: str) -> str:
        """Return the search app URL for ``sid`` on the web port."""
        web_base = self.base_url.replace(MANAGEMENT_PORT, "")
        return f"{web_base}{WEB_SEARCH_PATH}?sid={quote(sid, safe='')}"

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SplunkClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = ["SplunkClient", "DEFAULT_TIMEOUT_SECONDS"]
