"""Application state shared by the HTTP handlers and the refresh loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncio

    import httpx

    from yavs.config import Settings
    from yavs.fetcher import Fetcher
    from yavs.refresh import FeedRefresher
    from yavs.store import VanityStore


@dataclass
class AppState:
    settings: Settings
    store: VanityStore
    refresher: FeedRefresher
    http_client: httpx.AsyncClient | None = None
    fetcher: Fetcher | None = None
    refresh_task: asyncio.Task[None] | None = None
