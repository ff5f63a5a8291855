"""Feed retrieval over HTTP.

The feed body is streamed rather than buffered: ``Fetcher.stream`` hands
out the body chunks inside an ``async with`` block and the underlying
response is released when the block exits, whether parsing finished,
raised, or was cancelled.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx
import structlog

from yavs import __version__
from yavs.config import FetcherSettings
from yavs.errors import ErrorCode, FetchError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    """Create the shared client used for every feed fetch."""
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        headers={"User-Agent": f"yavs/{__version__}"},
    )


class Fetcher:
    """Streams the feed body. No retries: the caller decides when to try again."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @asynccontextmanager
    async def stream(self, url: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open *url* and yield an iterator over its body chunks.

        Raises ``FetchError`` for transport failures, timeouts and non-2xx
        statuses, including failures that happen while the body is read.
        """
        try:
            async with self._client.stream("GET", url) as response:
                if not response.is_success:
                    status = response.status_code
                    raise FetchError(
                        ErrorCode.FEED_HTTP_ERROR,
                        f"HTTP {status} fetching {url}",
                        recoverable=status >= 500,
                    )
                log.debug("feed_stream_opened", url=url, status=response.status_code)
                yield response.aiter_bytes()
        except httpx.TimeoutException as exc:
            raise FetchError(
                ErrorCode.FEED_TIMEOUT,
                f"Timed out fetching {url}",
                recoverable=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                ErrorCode.FEED_UNREACHABLE,
                f"Could not fetch {url}: {exc}",
                recoverable=True,
            ) from exc
