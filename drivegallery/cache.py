"""
Time-bounded in-memory cache for aggregation results.

One `ResourceCache` exists per resource type. It holds the result of the
last complete aggregation pass and serves it until it ages past the
freshness window. Concurrent misses share a single in-flight refresh.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from drivegallery.schemas import CacheStatus

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600

T = TypeVar("T", bound=Sequence)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    data: Optional[T] = None
    last_updated: Optional[float] = None


class ResourceCache(Generic[T]):
    def __init__(
        self,
        name: str,
        loader: Callable[[], Awaitable[T]],
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self._loader = loader
        self._clock = clock
        self.entry: CacheEntry[T] = CacheEntry()
        self._pending: Optional[asyncio.Future] = None

    def is_fresh(self) -> bool:
        if self.entry.data is None or self.entry.last_updated is None:
            return False
        return self._clock() - self.entry.last_updated < self.ttl_seconds

    def age_seconds(self) -> Optional[float]:
        if self.entry.last_updated is None:
            return None
        return self._clock() - self.entry.last_updated

    async def get(self, force_refresh: bool = False) -> T:
        """
        Return cached data while fresh, otherwise run one aggregation pass.

        A failed pass leaves the previous entry untouched and re-raises.
        """
        entry = self.entry
        if not force_refresh and self.is_fresh():
            return entry.data

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._refresh())
            self._pending.add_done_callback(self._clear_pending)
        else:
            logger.debug("Joining in-flight %s refresh", self.name)
        # A disconnecting caller must not cancel the refresh others await.
        return await asyncio.shield(self._pending)

    async def _refresh(self) -> T:
        started = self._clock()
        logger.info("Refreshing %s cache", self.name)
        data = await self._loader()
        self.entry = CacheEntry(data=data, last_updated=self._clock())
        logger.info(
            "Cached %d %s in %.2fs", len(data), self.name, self._clock() - started
        )
        return data

    def _clear_pending(self, future: asyncio.Future) -> None:
        if self._pending is future:
            self._pending = None
        if not future.cancelled() and future.exception() is not None:
            logger.warning("%s refresh failed: %s", self.name, future.exception())

    def status(self) -> CacheStatus:
        last_updated = self.entry.last_updated
        return CacheStatus(
            cached=self.entry.data is not None,
            fresh=self.is_fresh(),
            lastUpdated=(
                datetime.fromtimestamp(last_updated, tz=timezone.utc)
                if last_updated is not None
                else None
            ),
            ageSeconds=self.age_seconds(),
            count=len(self.entry.data) if self.entry.data is not None else None,
        )
