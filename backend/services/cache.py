"""Single-value in-memory cache that prefers stale data over failure.

A value is served from memory while it is younger than the TTL. Once it
expires the next get() calls the upstream fetch; if that fails, the expired
value is returned instead of an error. Only when nothing was ever fetched
does the failure reach the caller.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
upstream may be called once per worker per TTL window.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from errors import NoValueAvailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at_ms: int


class StaleTolerantCache(Generic[T]):
    """Serve a cached value within ``ttl_ms``, refresh it on demand, and fall
    back to the expired value when the refresh fails.

    Without ``single_flight`` concurrent callers that all see an expired entry
    each call ``fetch``; the last successful write wins. With it, callers that
    arrive while a refresh is running await that same refresh and share its
    outcome: the new value, the stale fallback, or NoValueAvailable.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        ttl_ms: int,
        now: Callable[[], int] = epoch_ms,
        name: str = "value",
        single_flight: bool = False,
    ):
        if ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be positive, got {ttl_ms}")
        self._fetch = fetch
        self._ttl_ms = ttl_ms
        self._now = now
        self._name = name
        self._entry: CacheEntry[T] | None = None
        self._single_flight = single_flight
        self._inflight: asyncio.Task[T] | None = None

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def entry(self) -> CacheEntry[T] | None:
        return self._entry

    def is_fresh(self) -> bool:
        entry = self._entry
        if entry is None:
            return False
        # Wall clock; a negative age means it stepped back, so treat as expired.
        age_ms = self._now() - entry.fetched_at_ms
        return 0 <= age_ms < self._ttl_ms

    async def get(self) -> T:
        if self.is_fresh():
            logger.debug("Cache hit for %s", self._name)
            return self._entry.value

        if not self._single_flight:
            return await self._refresh()

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._refresh())
            self._inflight.add_done_callback(self._clear_inflight)
        # A cancelled caller must not cancel the shared refresh.
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _refresh(self) -> T:
        try:
            value = await self._fetch()
        except Exception as e:
            stale = self._entry
            if stale is not None:
                logger.warning(
                    "Failed to fetch %s, serving value from %d ms ago: %s",
                    self._name,
                    self._now() - stale.fetched_at_ms,
                    e,
                )
                return stale.value
            logger.error("Failed to fetch %s and no cached value exists: %s", self._name, e)
            raise NoValueAvailable(f"Failed to fetch {self._name}") from e

        self._entry = CacheEntry(value=value, fetched_at_ms=self._now())
        logger.info("Refreshed %s", self._name)
        return value
