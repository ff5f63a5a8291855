"""Integration test fixtures.

Provides a fully wired AppState (store, fetcher, refresher) around an
un-mocked httpx client; tests mock the feed with respx. The app is driven
through FastAPI's TestClient, which runs the lifespan in its own event
loop, so these fixtures are synchronous.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from yavs.config import Settings
from yavs.fetcher import Fetcher
from yavs.refresh import FeedRefresher
from yavs.state import AppState
from yavs.store import VanityStore

if TYPE_CHECKING:
    from collections.abc import Callable


def make_state(settings: Settings) -> AppState:
    store = VanityStore(lock_hold_warning_ms=settings.cache.lock_hold_warning_ms)
    client = httpx.AsyncClient()
    fetcher = Fetcher(client)
    return AppState(
        settings=settings,
        store=store,
        http_client=client,
        fetcher=fetcher,
        refresher=FeedRefresher(store, fetcher, settings.feed.url),
    )


@pytest.fixture()
def state_factory(feed_url: str) -> Callable[..., AppState]:
    """Build an AppState for *feed_url* with optional feed settings overrides."""

    def factory(**feed: object) -> AppState:
        return make_state(Settings(feed={"url": feed_url, **feed}))

    return factory


@pytest.fixture()
def app_state(state_factory: Callable[..., AppState]) -> AppState:
    return state_factory()
