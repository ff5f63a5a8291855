"""Unit-specific fixtures (no network; HTTP is mocked with respx)."""

from __future__ import annotations

import httpx
import pytest

from yavs.fetcher import Fetcher
from yavs.refresh import FeedRefresher
from yavs.store import VanityStore


@pytest.fixture()
def store() -> VanityStore:
    return VanityStore()


@pytest.fixture()
async def fetcher():
    async with httpx.AsyncClient() as client:
        yield Fetcher(client)


@pytest.fixture()
def refresher(store: VanityStore, fetcher: Fetcher, feed_url: str) -> FeedRefresher:
    return FeedRefresher(store, fetcher, feed_url)
