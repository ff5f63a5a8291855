"""Reader/writer lock for coroutines sharing one event loop."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    Writer-preferring: once a writer is waiting, new readers queue behind
    it, so steady lookup traffic cannot postpone a refresh forever.
    Acquisition has no timeout.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and not self._writers_waiting)
            self._readers += 1
        try:
            yield
        finally:
            # Bookkeeping happens before any await so cancellation cannot skip it.
            self._readers -= 1
            if not self._readers:
                await asyncio.shield(self._notify())

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and not self._readers)
            finally:
                self._writers_waiting -= 1
                # A cancelled writer may have been the only thing holding readers back.
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            self._writer = False
            await asyncio.shield(self._notify())

    async def _notify(self) -> None:
        async with self._cond:
            self._cond.notify_all()
