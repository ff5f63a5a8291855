"""Feed parsing: whitespace-delimited tokens grouped into records.

The feed is free text of the form::

    <name> <vcs> <repo-url>
    <name> <vcs> <repo-url>

Any run of whitespace (newlines included) separates tokens, and every
three tokens make one entry. A malformed entry is logged and skipped;
parsing resumes with the next three tokens, so one bad line never
empties the batch.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from yavs.models.vanity import VanityRecord

if TYPE_CHECKING:
    from collections.abc import AsyncIterable, AsyncIterator, Iterator

log = structlog.get_logger()

_WHITESPACE = re.compile(rb"\s+")
_FIELDS_PER_ENTRY = 3


class FeedParser:
    """Incremental parser. Chunk boundaries may fall anywhere, even mid-token."""

    def __init__(self) -> None:
        self._partial = b""
        self._tokens: list[bytes] = []
        self._entry = 0

    def feed(self, chunk: bytes) -> list[VanityRecord]:
        """Consume *chunk* and return the records it completed."""
        if not chunk:
            return []
        pieces = _WHITESPACE.split(self._partial + chunk)
        # The last piece may continue in the next chunk; empty if chunk ended on whitespace.
        self._partial = pieces.pop()
        self._tokens.extend(p for p in pieces if p)
        return self._drain()

    def close(self) -> list[VanityRecord]:
        """Flush the final token. A trailing partial entry is logged and dropped."""
        if self._partial:
            self._tokens.append(self._partial)
            self._partial = b""
        records = self._drain()
        if self._tokens:
            self._entry += 1
            log.warning(
                "feed_entry_skipped",
                entry=self._entry,
                reason="incomplete",
                tokens=len(self._tokens),
            )
            self._tokens.clear()
        return records

    def _drain(self) -> list[VanityRecord]:
        records: list[VanityRecord] = []
        while len(self._tokens) >= _FIELDS_PER_ENTRY:
            raw = self._tokens[:_FIELDS_PER_ENTRY]
            del self._tokens[:_FIELDS_PER_ENTRY]
            self._entry += 1
            record = self._build(raw)
            if record is not None:
                records.append(record)
        return records

    def _build(self, raw: list[bytes]) -> VanityRecord | None:
        try:
            name, vcs, repo_url = (token.decode("utf-8") for token in raw)
        except UnicodeDecodeError as exc:
            log.warning("feed_entry_skipped", entry=self._entry, reason="undecodable", error=str(exc))
            return None
        try:
            return VanityRecord(name=name, vcs=vcs, repo_url=repo_url)
        except ValidationError as exc:
            log.warning(
                "feed_entry_skipped",
                entry=self._entry,
                reason="invalid",
                name=name,
                errors=exc.error_count(),
            )
            return None


async def parse_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[VanityRecord]:
    """Lazily parse a chunked byte stream. Single pass; not restartable."""
    parser = FeedParser()
    async for chunk in chunks:
        for record in parser.feed(chunk):
            yield record
    for record in parser.close():
        yield record


def parse_bytes(data: bytes) -> Iterator[VanityRecord]:
    """Parse a complete feed body."""
    parser = FeedParser()
    yield from parser.feed(data)
    yield from parser.close()
