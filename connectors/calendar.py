"""
Calendar service: picks the feed for a season and falls back between them.
"""

from typing import List
import logging

from .base import CalendarConnector
from models.enums import ErrorKind
from models.schema import ScheduleEntry

logger = logging.getLogger(__name__)


class CalendarService:
    """
    Season schedule lookup over two interchangeable feeds.

    Seasons from ``current_first_season`` on use the current feed and fall
    back to the legacy feed when it yields nothing; older seasons use the
    legacy feed only. Never raises.
    """

    def __init__(
        self,
        current: CalendarConnector,
        legacy: CalendarConnector,
        current_first_season: int = 2023,
    ):
        self._current = current
        self._legacy = legacy
        self._current_first_season = current_first_season

    async def get_schedule(self, year: int) -> List[ScheduleEntry]:
        if year >= self._current_first_season:
            entries = await self._current.get_schedule(year)
            if entries:
                return entries
            logger.info(f"{self._current.id} returned no schedule for {year}, trying {self._legacy.id}")

        entries = await self._legacy.get_schedule(year)
        if not entries:
            logger.warning(f"No schedule available for {year} ({ErrorKind.UPSTREAM_UNAVAILABLE.value})")
        return entries
