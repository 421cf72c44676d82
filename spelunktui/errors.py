"""Error kinds raised across the client, config, and session layers.

UI code catches these and turns them into status-line messages; only
configuration problems at startup are allowed to end the process.
"""

from __future__ import annotations


class SpelunkError(Exception):
    """Base class for all application errors."""


class ConfigMissingError(SpelunkError):
    """Required connection settings are absent after all config layers."""


class NetworkError(SpelunkError):
    """Transport-level failure talking to the search backend."""


class BackendStatusError(SpelunkError):
    """Backend answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"API Error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class ParseResponseError(SpelunkError):
    """Backend payload was not the JSON shape we expect."""


class InvalidRegexError(SpelunkError):
    """User-supplied local filter pattern failed to compile."""


class InvalidInputError(SpelunkError):
    """Empty query, empty save name, or similar rejected input."""


__all__ = [
    "SpelunkError",
    "ConfigMissingError",
    "NetworkError",
    "BackendStatusError",
    "ParseResponseError",
    "InvalidRegexError",
    "InvalidInputError",
]
