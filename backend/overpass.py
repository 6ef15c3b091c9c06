"""Overpass API client with mirror failover.

Public Overpass instances are rate limited and go down regularly, so every
query is tried against a list of equivalent mirrors, in order, until one
answers. There is no retry against the same mirror and no backoff between
mirrors; the request deadline set by the caller bounds the total time.
"""

import logging

import httpx

import config
from errors import AllEndpointsFailedError

logger = logging.getLogger(__name__)


async def fetch_overpass(
    client: httpx.AsyncClient,
    query: str,
    endpoints: list[str] | None = None,
) -> dict:
    """POST an Overpass QL query, falling back through ``endpoints``.

    Returns the decoded JSON of the first mirror that answers with a 2xx
    status and a JSON body. Raises AllEndpointsFailedError if none does.
    """
    endpoints = list(endpoints if endpoints is not None else config.OVERPASS_ENDPOINTS)
    if not endpoints:
        raise AllEndpointsFailedError("No Overpass endpoints configured", endpoints)

    headers = {"Content-Type": "text/plain", "User-Agent": config.USER_AGENT}
    body = query.strip()

    for url in endpoints:
        try:
            resp = await client.post(url, content=body, headers=headers)
            if not resp.is_success:
                logger.warning("Overpass failed: %s (HTTP %d)", url, resp.status_code)
                continue
            data = resp.json()
            if not isinstance(data, dict):
                logger.warning("Overpass failed: %s (unexpected %s body)", url, type(data).__name__)
                continue
            return data
        except httpx.HTTPError as exc:
            logger.warning("Overpass failed: %s (%s)", url, exc.__class__.__name__)
        except ValueError:
            logger.warning("Overpass failed: %s (invalid JSON)", url)

    raise AllEndpointsFailedError("All Overpass endpoints failed", endpoints)
