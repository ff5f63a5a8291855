"""In-memory vanity record cache.

The store owns the name -> record mapping. Request handlers read it
concurrently through ``lookup``; the refresh path is the only writer and
applies each fetched batch through a single ``merge`` call. A merge holds
the write lock for the whole batch, so a lookup sees either all of a
refresh or none of it.

Refresh is merge-by-key, never a wipe: names missing from a new batch
keep their previous record.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from yavs.locks import ReadWriteLock

if TYPE_CHECKING:
    from collections.abc import Iterable

    from yavs.models.vanity import VanityRecord

log = structlog.get_logger()


class VanityStore:
    def __init__(self, *, lock_hold_warning_ms: float = 250.0) -> None:
        self._records: dict[str, VanityRecord] = {}
        self._lock = ReadWriteLock()
        self._lock_hold_warning_ms = lock_hold_warning_ms

    async def lookup(self, name: str) -> VanityRecord | None:
        """Return the record for *name*, or ``None`` if it has never been merged."""
        async with self._lock.read():
            return self._records.get(name)

    async def merge(self, records: Iterable[VanityRecord]) -> int:
        """Apply *records* in one exclusive section. Returns the batch size.

        Later records win over earlier ones with the same name, and the
        batch wins over what was cached before.
        """
        batch = list(records)
        requested = time.perf_counter()
        async with self._lock.write():
            acquired = time.perf_counter()
            for record in batch:
                self._records[record.name] = record
            released = time.perf_counter()

        wait_ms = round((acquired - requested) * 1000, 3)
        held_ms = round((released - acquired) * 1000, 3)
        log.info("cache_merge_complete", count=len(batch), wait_ms=wait_ms, held_ms=held_ms)
        if held_ms > self._lock_hold_warning_ms:
            log.warning(
                "cache_write_lock_slow",
                held_ms=held_ms,
                threshold_ms=self._lock_hold_warning_ms,
                count=len(batch),
            )
        return len(batch)

    async def size(self) -> int:
        async with self._lock.read():
            return len(self._records)
