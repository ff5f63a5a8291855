"""Error types shared across yavs.

Only feed retrieval can fail in a way callers must handle. Malformed feed
entries are logged and skipped inside the parser and never raised.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FEED_UNREACHABLE = "FEED_UNREACHABLE"
    FEED_TIMEOUT = "FEED_TIMEOUT"
    FEED_HTTP_ERROR = "FEED_HTTP_ERROR"


class YavsError(Exception):
    """Base error carrying a machine-readable code.

    ``recoverable`` tells the caller whether retrying the same operation
    later may succeed (timeouts, transport errors, 5xx responses).
    """

    def __init__(self, code: ErrorCode, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class FetchError(YavsError):
    """The feed could not be retrieved. The cache is left untouched."""
