"""HTTP server: vanity pages, the refresh endpoint, and process startup.

Startup order:
  1. Parse flags into Settings and configure logging.
  2. Open the HTTP client and load the feed once (``bootstrap``). A
     failed initial load ends the process with status 1.
  3. Serve. The lifespan starts the periodic refresh task, if enabled,
     and cancels it on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from fastapi.templating import Jinja2Templates

from yavs import __version__
from yavs.errors import FetchError, YavsError
from yavs.fetcher import Fetcher, build_http_client
from yavs.refresh import FeedRefresher, start_refresh_loop, warn_disabled_triggers
from yavs.state import AppState
from yavs.store import VanityStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from yavs.config import Settings

log = structlog.get_logger()

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

NOT_FOUND_BODY = "404 page not found"
SERVER_ERROR_BODY = "Internal Server Error"


def get_state(request: Request) -> AppState:
    return request.app.state.yavs


async def refresh_feed(state: AppState = Depends(get_state)) -> Response:
    """On-demand refresh. Runs inside the request; no authentication."""
    try:
        count = await state.refresher.refresh(trigger="on_demand")
    except YavsError:
        return PlainTextResponse(SERVER_ERROR_BODY, status_code=500)
    return PlainTextResponse(f"{count} packages refreshed")


async def serve_package(request: Request, name: str, state: AppState = Depends(get_state)) -> Response:
    record = await state.store.lookup(name)
    if record is None:
        return PlainTextResponse(NOT_FOUND_BODY, status_code=404)
    return templates.TemplateResponse(request, "package.html", {"record": record})


def create_app(state: AppState) -> FastAPI:
    """Build the ASGI app around an already bootstrapped *state*."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state.refresh_task = start_refresh_loop(state)
        try:
            yield
        finally:
            task, state.refresh_task = state.refresh_task, None
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                log.info("refresh_loop_stopped")

    # Every path is a potential package name, so the generated docs routes are off.
    app = FastAPI(
        title="yavs",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.yavs = state

    refresh_path = state.settings.feed.refresh_path
    if refresh_path:
        # Registered before the catch-all so it shadows a package of the same name.
        app.add_api_route(refresh_path, refresh_feed, methods=["GET"])
    app.add_api_route("/{name:path}", serve_package, methods=["GET"])
    return app


@asynccontextmanager
async def bootstrap(settings: Settings) -> AsyncIterator[AppState]:
    """Wire the components and load the feed once.

    Raises ``FetchError`` if the initial load fails; there is no older
    cache to fall back on at this point.
    """
    store = VanityStore(lock_hold_warning_ms=settings.cache.lock_hold_warning_ms)
    async with build_http_client(settings.fetcher) as client:
        fetcher = Fetcher(client)
        refresher = FeedRefresher(store, fetcher, settings.feed.url)
        state = AppState(
            settings=settings,
            store=store,
            http_client=client,
            fetcher=fetcher,
            refresher=refresher,
        )
        count = await refresher.refresh(trigger="startup")
        log.info("packages_loaded", count=count, domain=settings.domain)
        yield state


async def run(settings: Settings) -> int:
    """Bootstrap and serve until shutdown. Returns the process exit status."""
    if not settings.feed.url:
        log.error("feed_url_missing")
        return 2
    warn_disabled_triggers(settings)
    try:
        async with bootstrap(settings) as state:
            config = uvicorn.Config(
                create_app(state),
                host=settings.server.host,
                port=settings.server.port,
                log_config=None,
            )
            await uvicorn.Server(config).serve()
    except FetchError as exc:
        log.critical("startup_refresh_failed", url=settings.feed.url, code=exc.code, error=exc.message)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    from yavs.cli import parse_args
    from yavs.logging_config import setup_logging

    settings = parse_args(argv)
    setup_logging(settings.logging)
    log.info(
        "server_starting",
        domain=settings.domain,
        host=settings.server.host,
        port=settings.server.port,
        version=__version__,
    )
    sys.exit(asyncio.run(run(settings)))


if __name__ == "__main__":
    main()
