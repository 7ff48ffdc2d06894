"""
Session Catalog Builder — expands a season schedule into catalog episodes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from models.schema import Episode, ScheduleEntry, SessionOccurrence, SessionRef
from utils.timezone_utils import format_release_date

from .numbering import NumberingPolicy

logger = logging.getLogger(__name__)

FLAG_CDN = "https://flagcdn.com/w320"

COUNTRY_FLAGS: Dict[str, str] = {
    "australia": "au", "china": "cn", "japan": "jp", "bahrain": "bh",
    "saudi arabia": "sa", "usa": "us", "united states": "us", "italy": "it",
    "monaco": "mc", "spain": "es", "canada": "ca", "austria": "at",
    "uk": "gb", "great britain": "gb", "united kingdom": "gb",
    "belgium": "be", "hungary": "hu",
    "netherlands": "nl", "azerbaijan": "az", "singapore": "sg", "mexico": "mx",
    "brazil": "br", "qatar": "qa", "uae": "ae", "abu dhabi": "ae",
    "united arab emirates": "ae",
    "portugal": "pt", "turkey": "tr", "turkiye": "tr",
    "russia": "ru", "germany": "de",
    "france": "fr", "malaysia": "my", "korea": "kr", "south korea": "kr",
    "india": "in", "vietnam": "vn",
    "las vegas": "us", "miami": "us", "emilia romagna": "it", "imola": "it",
    "south africa": "za", "thailand": "th", "argentina": "ar",
    "switzerland": "ch", "sweden": "se", "morocco": "ma", "rwanda": "rw",
}


def get_flag_url(country: str) -> str:
    """Flag image for a country name; unknown countries get the UN flag."""
    code = COUNTRY_FLAGS.get((country or "").lower().strip(), "un")
    return f"{FLAG_CDN}/{code}.png"


class SessionCatalogBuilder:
    """
    Builds the ordered episode list of a season under a numbering policy.

    With ``id_prefix`` set, episodes are identified as
    ``<id_prefix>:<year>:<episode>`` instead of by session identity.
    """

    def __init__(self, policy: NumberingPolicy, id_prefix: Optional[str] = None):
        self.policy = policy
        self.id_prefix = id_prefix

    def build_episodes(self, year: int, schedule: List[ScheduleEntry]) -> List[Episode]:
        episodes = [
            self._episode(year, entry, session, number)
            for entry, session, number in self.policy.assign(year, schedule)
        ]
        logger.debug(f"Built {len(episodes)} episodes for {year} ({self.policy.name})")
        return episodes

    def _episode(
        self,
        year: int,
        entry: ScheduleEntry,
        session: SessionOccurrence,
        number: int,
    ) -> Episode:
        ref = SessionRef(year=year, round=entry.round, kind=session.kind)

        if entry.is_testing:
            title = f"{session.name} ({entry.location})"
            overview = f"Pre-Season Testing - {session.name}"
        else:
            title = f"{entry.name} - {session.name}"
            overview = f"Round {entry.round} - {entry.name} ({session.name})"

        episode_id = f"{self.id_prefix}:{year}:{number}" if self.id_prefix else ref.to_id()
        return Episode(
            id=episode_id,
            title=title,
            season=year,
            episode=number,
            released=format_release_date(session.date, session.time, year),
            overview=overview,
            thumbnail=get_flag_url(entry.country or entry.location),
        )
