"""Bitcoin price route, served through the stale-tolerant cache."""

from fastapi import APIRouter, Request

from services.cache import StaleTolerantCache

router = APIRouter()


@router.get("/bitcoin-info")
async def bitcoin_info(request: Request) -> dict:
    """Latest bitcoin snapshot; stale data is served if the upstream is down.

    NoValueAvailable propagates to the centralized handler and becomes a 502.
    """
    cache: StaleTolerantCache[dict] = request.app.state.bitcoin_cache
    return await cache.get()
