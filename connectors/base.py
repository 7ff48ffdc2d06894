"""
Base connector class for race-calendar feeds.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from datetime import datetime
from dataclasses import dataclass
import asyncio
import logging

import httpx

from cache import CachePort, NullCache
from models.schema import ScheduleEntry

logger = logging.getLogger(__name__)

USER_AGENT = "F1CatchupAddon/1.0.0"


@dataclass
class RawSeasonPayload:
    """Raw (parsed JSON) payload from a calendar feed."""
    content: Any
    url: str
    retrieved_at: datetime
    metadata: Dict[str, Any]


class CalendarConnector(ABC):
    """
    Abstract base class for F1 calendar feeds.

    Each connector is responsible for:
    1. Fetching raw season data from its upstream API
    2. Extracting ScheduleEntry objects from the raw payload

    ``get_schedule`` wraps both and never raises.
    """

    def __init__(
        self,
        base_url: str,
        cache: Optional[CachePort] = None,
        cache_ttl: float = 86400,
        timeout: float = 15.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._cache = cache if cache is not None else NullCache()
        self._transport = transport

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique connector identifier."""
        pass

    @abstractmethod
    async def fetch_season(self, client: httpx.AsyncClient, season: int) -> RawSeasonPayload:
        """
        Fetch raw data for a season.

        Raises:
            httpx.HTTPError: If fetch fails
        """
        pass

    @abstractmethod
    def extract(self, raw: RawSeasonPayload) -> List[ScheduleEntry]:
        """Extract ordered schedule entries from a raw payload."""
        pass

    async def get_schedule(self, season: int) -> List[ScheduleEntry]:
        """
        Fetch and normalize a season's schedule.

        Returns an empty list on any upstream failure.
        """
        try:
            async with self._client() as client:
                raw = await self.fetch_season(client, season)
            return self.extract(raw)
        except Exception as e:
            logger.warning(f"{self.id}: schedule for {season} unavailable: {e}")
            return []

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=self._transport,
        )

    async def _get_json(self, client: httpx.AsyncClient, url: str, cache_key: str) -> Any:
        """GET a JSON document through the cache."""
        try:
            cached = self._cache.get(cache_key)
        except Exception as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            cached = None
        if cached is not None:
            return cached

        response = await self._http_get(client, url)
        data = response.json()

        try:
            self._cache.put(cache_key, data, self.cache_ttl)
        except Exception as e:
            logger.warning(f"Cache write failed for {cache_key}: {e}")
        return data

    async def _http_get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        """
        HTTP GET with retries on server and transport errors.

        Raises:
            httpx.HTTPError: On request failure
        """
        for attempt in range(self.max_retries + 1):
            try:
                response = await client.get(url)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Client errors (4xx) are not worth retrying
                if e.response.status_code < 500 or attempt == self.max_retries:
                    raise
            except httpx.TransportError:
                if attempt == self.max_retries:
                    raise
            await asyncio.sleep(self.retry_backoff * (2 ** attempt))

        raise httpx.HTTPError(f"Failed to fetch {url} after {self.max_retries + 1} attempts")
