"""Hacker News Firebase API client (the upstream gateway).

The upstream has no batch endpoint: every call resolves exactly one item or
one list. Fan-out and caching live in the cache/fetcher services, not here.

Error contract:
- Unknown, deleted or unsupported items resolve to None (not an error)
- Network errors, timeouts, non-2xx statuses, undecodable bodies and
  malformed payloads raise UpstreamError; callers decide whether to degrade
  or surface it
- The timeout bounds the whole call (connect, request and body read), so a
  server trickling bytes cannot hold a call open past it
- The client never retries
"""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from hnstore.schemas.items import Item, RecentChanges, parse_item
from hnstore.settings import get_settings

logger = logging.getLogger("uvicorn.error")

# List name -> endpoint path
LIST_ENDPOINTS = {
    "top": "topstories",
    "new": "newstories",
    "best": "beststories",
    "ask": "askstories",
    "show": "showstories",
    "job": "jobstories",
}


class UpstreamError(RuntimeError):
    """Transient upstream failure (network, timeout, 5xx). Safe to retry later."""


class HNClient:
    """Client for the Hacker News Firebase API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: API root (default: settings.hn_api_base_url).
            timeout: Absolute per-request timeout in seconds (default: settings).
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        settings = get_settings()
        self.base_url = (base_url or settings.hn_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.upstream_timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get_json(self, path: str) -> Any:
        client = await self._get_client()
        try:
            async with asyncio.timeout(self.timeout):
                response = await client.get(path)
                response.raise_for_status()
                return response.json()
        except TimeoutError as e:
            raise UpstreamError(f"GET {path} timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(f"GET {path} returned invalid JSON") from e

    async def fetch_item(self, item_id: int) -> Item | None:
        """Return the item with the given id, or None if it does not resolve."""
        payload = await self._get_json(f"/item/{item_id}.json")
        item = parse_item(payload)
        if item is None and payload is not None:
            logger.debug(f"Upstream item {item_id} is deleted or of an unsupported type")
        return item

    async def fetch_list(self, name: str) -> list[int]:
        """Return a ranked id list: top, new, best, ask, show or job."""
        endpoint = LIST_ENDPOINTS.get(name)
        if endpoint is None:
            raise ValueError(f"Unknown list {name!r}; expected one of {sorted(LIST_ENDPOINTS)}")
        payload = await self._get_json(f"/{endpoint}.json")
        if not isinstance(payload, list):
            raise UpstreamError(f"Unexpected payload for list {name!r}")
        try:
            return [int(x) for x in payload]
        except (TypeError, ValueError) as e:
            raise UpstreamError(f"Unexpected entry in list {name!r}: {e}") from e

    async def fetch_max_id(self) -> int:
        """Return the id of the newest item."""
        payload = await self._get_json("/maxitem.json")
        if not isinstance(payload, int):
            raise UpstreamError("Unexpected payload for maxitem")
        return payload

    async def fetch_updates(self) -> RecentChanges:
        """Return items and profiles that changed recently."""
        payload = await self._get_json("/updates.json")
        if not isinstance(payload, dict):
            raise UpstreamError("Unexpected payload for updates")
        try:
            return RecentChanges.model_validate(payload)
        except ValidationError as e:
            raise UpstreamError(f"Unexpected payload for updates: {e.error_count()} errors") from e


# Singleton client instance
_client: HNClient | None = None


def get_hn_client() -> HNClient:
    """Get HN client singleton."""
    global _client
    if _client is None:
        _client = HNClient()
    return _client


async def close_hn_client() -> None:
    """Close and forget the singleton client."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
