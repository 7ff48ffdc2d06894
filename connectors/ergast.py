"""
Formula 1 connector for the Ergast-compatible Jolpica API (legacy feed).

Each race record carries its sessions under named keys
(FirstPractice, SprintQualifying, ...) plus its own date/time for the race.
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
import logging

import httpx

from .base import CalendarConnector, RawSeasonPayload
from models.schema import ScheduleEntry, SessionOccurrence
from models.sessions import SESSION_DEFS, LEGACY_FIELD_ALIASES
from utils.timezone_utils import sort_key

logger = logging.getLogger(__name__)


class ErgastConnector(CalendarConnector):
    """Calendar connector for Ergast-shaped race tables."""

    DEFAULT_BASE = "https://api.jolpi.ca/ergast/f1"

    def __init__(self, base_url: str = DEFAULT_BASE, **kwargs):
        super().__init__(base_url, **kwargs)

    @property
    def id(self) -> str:
        return "f1_ergast"

    async def fetch_season(self, client: httpx.AsyncClient, season: int) -> RawSeasonPayload:
        url = f"{self.base_url}/{season}.json?limit=100"
        data = await self._get_json(client, url, f"ergast-races-{season}")
        return RawSeasonPayload(
            content=data,
            url=url,
            retrieved_at=datetime.utcnow(),
            metadata={"season": season},
        )

    def extract(self, raw: RawSeasonPayload) -> List[ScheduleEntry]:
        races = _race_table(raw.content)
        if not races:
            logger.warning(f"No races found for season {raw.metadata.get('season')}")
            return []

        rows = []
        for race in races:
            try:
                sessions = self._parse_sessions(race)
            except Exception as e:
                logger.warning(f"Failed to parse race {race.get('raceName')}: {e}")
                continue
            rows.append((sort_key(race.get("date"), race.get("time")), race, sessions))

        rows.sort(key=lambda row: row[0])

        entries = []
        for round_number, (_, race, sessions) in enumerate(rows, start=1):
            location = race.get("Circuit", {}).get("Location", {})
            entries.append(
                ScheduleEntry(
                    round=round_number,
                    name=race.get("raceName", f"Round {round_number}"),
                    location=location.get("locality") or "",
                    country=location.get("country") or location.get("locality") or "",
                    circuit=race.get("Circuit", {}).get("circuitName"),
                    sessions=sessions,
                )
            )
        return entries

    def _parse_sessions(self, race: Dict[str, Any]) -> List[SessionOccurrence]:
        sessions = []
        for d in SESSION_DEFS:
            if d.api_field is None:
                date, time = race.get("date"), race.get("time")
            else:
                block = _first_block(race, LEGACY_FIELD_ALIASES.get(d.api_field, [d.api_field]))
                if block is None:
                    continue
                date, time = block.get("date"), block.get("time")
            sessions.append(
                SessionOccurrence(
                    kind=d.kind.value,
                    name=d.name,
                    search_term=d.search_term,
                    date=date,
                    time=time,
                )
            )
        return sessions


def _race_table(content: Any) -> List[Dict[str, Any]]:
    if not isinstance(content, dict):
        return []
    races = content.get("MRData", {}).get("RaceTable", {}).get("Races")
    if not isinstance(races, list):
        return []
    return [r for r in races if isinstance(r, dict)]


def _first_block(race: Dict[str, Any], fields: List[str]) -> Optional[Dict[str, Any]]:
    for field in fields:
        block = race.get(field)
        if isinstance(block, dict):
            return block
    return None
