"""Shared fixtures: fake clock, scripted upstream fetch and an ASGI test client."""

from __future__ import annotations

from typing import Any, AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from errors import FetchError
from services.cache import StaleTolerantCache


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, start_ms: int = 0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class ScriptedFetch:
    """Async fetch that replays a list of outcomes; exceptions are raised."""

    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def btc_payload(price: str = "67000.00") -> dict:
    return {
        "price": price,
        "timestamp": 1718000000,
        "24h_price_change": "120.50",
        "24h_price_change_percent": "0.18",
        "24h_high": "67500.00",
        "24h_low": "66100.00",
        "24h_volume": "20123.4",
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def upstream_down() -> FetchError:
    return FetchError("Bitcoin API request failed: connection refused")


@pytest_asyncio.fixture
async def make_client(clock: FakeClock):
    """Build an app around a cache fed by the given outcomes and yield a client."""
    from app import create_app

    clients: list[AsyncClient] = []

    async def _make(outcomes: list[Any]) -> tuple[AsyncClient, ScriptedFetch]:
        fetch = ScriptedFetch(outcomes)
        cache = StaleTolerantCache(fetch=fetch, ttl_ms=10_000, now=clock, name="bitcoin info")
        app = create_app(bitcoin_cache=cache)
        ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(ac)
        return ac, fetch

    yield _make

    for ac in clients:
        await ac.aclose()


@pytest_asyncio.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Client against the module-level app (real cache, no upstream calls made)."""
    from app import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
