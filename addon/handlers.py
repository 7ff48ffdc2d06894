"""
Stremio resource handlers: catalog, meta and stream.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
import pytz

from cache import CachePort, InMemoryCache
from catalog import TVDB_SERIES_ID, FixedSlotNumbering, SessionCatalogBuilder, get_numbering_policy
from connectors import CalendarService, ErgastConnector, OpenF1Connector
from search import (
    ResponseAssembler,
    SearchAggregator,
    StreamResolver,
    get_search_provider,
)

from .config import AddonConfig
from .manifest import GENRES, SERIES_NAME, image_urls

logger = logging.getLogger(__name__)

SEASON_PREFIX = "f1catchup:"
TVDB_SERIES = f"tvdb:{TVDB_SERIES_ID}"


def season_id(year: int) -> str:
    return f"{SEASON_PREFIX}{year}"


def parse_season_id(value: str) -> Optional[int]:
    """Year of a ``f1catchup:<year>`` season id, or None."""
    if not value.startswith(SEASON_PREFIX):
        return None
    try:
        return int(value[len(SEASON_PREFIX):])
    except ValueError:
        return None


class AddonHandlers:
    """Catalog, meta and stream handlers over the calendar and search pipeline."""

    def __init__(
        self,
        config: AddonConfig,
        calendar: CalendarService,
        catalog: SessionCatalogBuilder,
        resolver: StreamResolver,
        current_year: Optional[int] = None,
        tvdb_catalog: Optional[SessionCatalogBuilder] = None,
    ):
        self.config = config
        self.calendar = calendar
        self.catalog = catalog
        self.resolver = resolver
        self.tvdb_catalog = tvdb_catalog or SessionCatalogBuilder(
            FixedSlotNumbering(config.testing_episodes), id_prefix=TVDB_SERIES
        )
        self._current_year = current_year

    @property
    def current_year(self) -> int:
        return self._current_year or datetime.now(pytz.utc).year

    def seasons(self) -> List[int]:
        """Catalog seasons, newest first."""
        return list(range(self.current_year, self.config.min_season - 1, -1))

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    async def catalog_page(self, origin: str, skip: int = 0) -> Dict[str, Any]:
        # The whole catalog fits on the first page
        if skip > 0:
            return {"metas": []}
        return {"metas": [self._season_meta(year, origin) for year in self.seasons()]}

    async def meta(self, meta_id: str, origin: str) -> Dict[str, Any]:
        if meta_id == TVDB_SERIES:
            return {"meta": await self._tvdb_series_meta(origin)}

        year = parse_season_id(meta_id)
        if year is None:
            return {"meta": None}

        schedule = await self.calendar.get_schedule(year)
        episodes = self.catalog.build_episodes(year, schedule)
        logger.info(f"Season {year}: {len(schedule)} events, {len(episodes)} episodes")

        meta = self._season_meta(year, origin)
        meta["videos"] = [episode.to_video() for episode in episodes]
        return {"meta": meta}

    async def streams(self, stream_id: str, credential: Optional[str]) -> Dict[str, Any]:
        return await self.resolver.resolve(stream_id, credential or self.config.torbox_api_key)

    async def _tvdb_series_meta(self, origin: str) -> Dict[str, Any]:
        """
        Every configured TVDB season as one series, newest season first.

        Video ids follow the TVDB mapping so other addons can resolve them.
        """
        years = sorted(self.tvdb_catalog.policy.testing_episodes, reverse=True)
        schedules = await asyncio.gather(*(self.calendar.get_schedule(year) for year in years))

        videos: List[Dict[str, Any]] = []
        for year, schedule in zip(years, schedules):
            videos.extend(e.to_video() for e in self.tvdb_catalog.build_episodes(year, schedule))
        logger.info(f"TVDB series: {len(years)} seasons, {len(videos)} episodes")

        images = image_urls(origin)
        return {
            "id": TVDB_SERIES,
            "type": "series",
            "name": SERIES_NAME,
            "poster": images["poster"],
            "logo": images["logo"],
            "background": images["background"],
            "description": "Formula 1 World Championship. All practice sessions, qualifying, sprints and races.",
            "genres": GENRES,
            "videos": videos,
        }

    def _season_meta(self, year: int, origin: str) -> Dict[str, Any]:
        images = image_urls(origin)
        return {
            "id": season_id(year),
            "type": "series",
            "name": f"{SERIES_NAME} {year}",
            "poster": images["poster"],
            "logo": images["logo"],
            "background": images["background"],
            "description": f"{SERIES_NAME} {year} season\nAll practice sessions, qualifying, sprints and races.",
            "releaseInfo": str(year),
            "genres": GENRES,
        }


def create_handlers(
    config: AddonConfig,
    cache: Optional[CachePort] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    current_year: Optional[int] = None,
) -> AddonHandlers:
    """
    Wire the full addon from configuration.

    ``transport`` replaces the network for every outbound client.
    """
    cache = cache if cache is not None else InMemoryCache()
    connector_args = dict(
        cache=cache,
        cache_ttl=config.cache_ttl,
        timeout=config.http_timeout,
        transport=transport,
    )
    calendar = CalendarService(
        current=OpenF1Connector(config.openf1_api_base, **connector_args),
        legacy=ErgastConnector(config.ergast_api_base, **connector_args),
    )

    policy = get_numbering_policy(config.numbering, config.testing_episodes)
    tvdb_numbering = FixedSlotNumbering(config.testing_episodes)
    resolver = StreamResolver(
        calendar=calendar,
        numbering=tvdb_numbering,
        aggregator=SearchAggregator(
            get_search_provider("torbox", config.search_api_base),
            timeout=config.http_timeout,
            transport=transport,
        ),
        assembler=ResponseAssembler(max_streams=config.max_streams),
    )
    return AddonHandlers(
        config,
        calendar,
        SessionCatalogBuilder(policy),
        resolver,
        current_year=current_year,
        tvdb_catalog=SessionCatalogBuilder(tvdb_numbering, id_prefix=TVDB_SERIES),
    )
