"""API Ninjas bitcoin client.

Returns the upstream payload as-is once the expected fields are present.
Every failure mode is reported as FetchError so the cache can treat them alike.
"""

import logging

import httpx

from config import settings
from errors import FetchError

logger = logging.getLogger(__name__)

BITCOIN_INFO_FIELDS = (
    "price",
    "timestamp",
    "24h_price_change",
    "24h_price_change_percent",
    "24h_high",
    "24h_low",
    "24h_volume",
)


async def _request(client: httpx.AsyncClient) -> dict:
    headers = {}
    if settings.bitcoin_api_key:
        headers["X-Api-Key"] = settings.bitcoin_api_key

    try:
        resp = await client.get(settings.bitcoin_api_url, headers=headers)
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPError as e:
        raise FetchError(f"Bitcoin API request failed: {e}") from e
    except ValueError as e:
        raise FetchError(f"Bitcoin API returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise FetchError(f"Unexpected bitcoin payload type: {type(data).__name__}")

    missing = [field for field in BITCOIN_INFO_FIELDS if field not in data]
    if missing:
        raise FetchError(f"Bitcoin payload missing fields: {missing}")

    return data


async def fetch_bitcoin_info(client: httpx.AsyncClient | None = None) -> dict:
    """Fetch the latest bitcoin price snapshot from the upstream API.

    Args:
        client: Optional shared client. A short-lived one is created when omitted.

    Raises:
        FetchError: on transport errors, non-2xx status or a malformed payload.
    """
    logger.info("Fetching bitcoin info from %s", settings.bitcoin_api_url)
    if client is not None:
        return await _request(client)

    async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as client:
        return await _request(client)
