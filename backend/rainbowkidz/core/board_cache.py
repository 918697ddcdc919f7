"""Board Reference Cache — slug → numeric id table with a single TTL.

Invariants:
    - The whole table is refetched on first use and whenever now - refreshed_at >= ttl
    - A refresh replaces the table wholesale (slugs removed upstream disappear)
    - A failed refresh raises BoardFetchError; an expired table is never served
    - At most one refresh per TTL: concurrent callers wait on the in-flight refresh

Design Decisions:
    - Fail loud over stale-on-error: masking a data-store outage hides it from operators
    - asyncio.Lock only around the refresh; reads of a fresh table never await
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from rainbowkidz.core.errors import BoardFetchError, DataStoreError

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0

BoardFetcher = Callable[[], Awaitable[list[dict]]]


class BoardCache:
    """Caches the boards table for `ttl_seconds` and resolves slugs to ids."""

    def __init__(
        self,
        fetch_boards: BoardFetcher,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch_boards = fetch_boards
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._table: dict[str, int] | None = None
        self._refreshed_at = 0.0
        self._lock = asyncio.Lock()

    def _is_fresh(self) -> bool:
        return (
            self._table is not None
            and self.clock() - self._refreshed_at < self.ttl_seconds
        )

    async def resolve(self, slug: str) -> int | None:
        """Return the board id for `slug`, or None if the board does not exist."""
        if not self._is_fresh():
            async with self._lock:
                if not self._is_fresh():
                    await self._refresh()
        return self._table.get(slug)

    def invalidate(self) -> None:
        self._table = None
        self._refreshed_at = 0.0

    async def _refresh(self) -> None:
        started = self.clock()
        try:
            boards = await self._fetch_boards()
        except DataStoreError as e:
            self.invalidate()
            logger.error(f"Board table refresh failed: {e.message}")
            raise BoardFetchError(e.message, e.status_code)
        self._table = {b["slug"]: b["id"] for b in boards}
        self._refreshed_at = started
        logger.info(f"Board table refreshed ({len(self._table)} boards)")
