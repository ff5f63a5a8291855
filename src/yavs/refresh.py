"""Feed refresh: fetch, parse, merge.

Three triggers share ``FeedRefresher.refresh``:

* startup, once, before the server accepts requests (failure is fatal);
* the periodic loop, when a positive interval is configured (failure is
  logged and the loop carries on);
* the on-demand endpoint (failure becomes a 500).

A failed fetch never reaches the store, so the previous cache keeps
serving. Timer and on-demand refreshes may overlap; the store's write
lock serialises their merges and the later merge wins per key.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from yavs.errors import YavsError
from yavs.parser import parse_stream

if TYPE_CHECKING:
    from yavs.config import Settings
    from yavs.fetcher import Fetcher
    from yavs.models.vanity import VanityRecord
    from yavs.state import AppState
    from yavs.store import VanityStore

log = structlog.get_logger()


class FeedRefresher:
    def __init__(self, store: VanityStore, fetcher: Fetcher, feed_url: str) -> None:
        self._store = store
        self._fetcher = fetcher
        self._feed_url = feed_url

    @property
    def feed_url(self) -> str:
        return self._feed_url

    async def refresh(self, trigger: str = "manual") -> int:
        """Fetch the whole feed and merge it. Returns the number of records merged.

        Raises ``FetchError`` without touching the store if the feed cannot
        be retrieved.
        """
        log.info("feed_refresh_started", url=self._feed_url, trigger=trigger)
        started = time.perf_counter()
        batch: list[VanityRecord] = []
        try:
            async with self._fetcher.stream(self._feed_url) as chunks:
                async for record in parse_stream(chunks):
                    batch.append(record)
        except YavsError as exc:
            log.warning(
                "feed_refresh_failed",
                url=self._feed_url,
                trigger=trigger,
                code=exc.code,
                error=exc.message,
            )
            raise

        count = await self._store.merge(batch)
        log.info(
            "feed_refresh_complete",
            trigger=trigger,
            count=count,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return count


async def run_refresh_loop(refresher: FeedRefresher, interval_seconds: float) -> None:
    """Refresh every *interval_seconds* until cancelled. Failures never end the loop."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await refresher.refresh(trigger="timer")
        except YavsError:
            # Already logged by refresh(); keep serving the previous cache.
            continue
        except Exception:
            log.error("feed_refresh_failed", url=refresher.feed_url, trigger="timer", exc_info=True)


def warn_disabled_triggers(settings: Settings) -> None:
    """Warn about refresh triggers switched off by configuration. Runs before startup."""
    if settings.feed.refresh_seconds <= 0:
        log.warning(
            "refresh_loop_disabled",
            reason="refresh interval is not positive; the cache only refreshes at startup "
            "and on demand",
        )
    if not settings.feed.refresh_path:
        log.warning(
            "refresh_path_disabled",
            reason="refresh path not set; the cache cannot be refreshed manually",
        )


def start_refresh_loop(state: AppState) -> asyncio.Task[None] | None:
    """Start the periodic refresh task, or return ``None`` if it is disabled."""
    interval = state.settings.feed.refresh_seconds
    if interval <= 0:
        return None
    log.info("refresh_loop_started", interval_seconds=interval)
    return asyncio.create_task(
        run_refresh_loop(state.refresher, interval), name="yavs-refresh-loop"
    )
