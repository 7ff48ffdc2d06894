"""
Query Generator — builds free-text search queries for one session.

Queries mimic how releases are commonly named
("Formula 1 2024 Round 05 China Sprint Qualifying",
"Formula1 2024 R05 Chinese Sprint Qualifying"). Order is only a tie-break
hint; relevance is decided by the scorer.
"""

from __future__ import annotations

import re
from typing import List

from models.schema import ScheduleEntry
from models.sessions import SESSION_DEFS_BY_KIND

SERIES_NAME = "Formula 1"
SERIES_COMPACT = "Formula1"

MIN_QUERIES = 3
MAX_QUERIES = 5

_PRIX_SUFFIX = re.compile(r"\s*(grand\s+prix|prix)\s*$", re.IGNORECASE)


def clean_race_name(name: str) -> str:
    """Strip a trailing "Grand Prix" / "Prix" from a race name."""
    return _PRIX_SUFFIX.sub("", name or "").strip()


def search_term_for(entry: ScheduleEntry, kind: str) -> str:
    """Colloquial search term for a session kind of this entry."""
    session = entry.get_session(kind)
    if session is not None:
        return session.search_term
    definition = SESSION_DEFS_BY_KIND.get(kind)
    return definition.search_term if definition else kind


class QueryGenerator:
    """Generate 3 to 5 search strings for a (schedule entry, session) pair."""

    def __init__(self, season_year: int, series_name: str = SERIES_NAME):
        self._year = season_year
        self._series = series_name

    def build_queries(self, entry: ScheduleEntry, kind: str) -> List[str]:
        rr = f"{entry.round:02d}"
        term = search_term_for(entry, kind)
        location = entry.location or entry.country
        race_name = clean_race_name(entry.name) or location

        candidates = [
            f"{self._series} {self._year} Round {rr} {location} {term}",
            f"{self._series} {self._year} R{rr} {race_name} {term}",
            f"{SERIES_COMPACT} {self._year} R{rr} {location} {term}",
        ]
        if entry.country and entry.country.lower() != (location or "").lower():
            candidates.append(f"{self._series} {self._year} Round {rr} {entry.country} {term}")
        candidates.append(f"{SERIES_COMPACT} {self._year} Round {rr} {race_name} {term}")

        queries: List[str] = []
        seen = set()
        for q in candidates:
            q = " ".join(q.split())
            key = q.lower()
            if key in seen:
                continue
            seen.add(key)
            queries.append(q)

        return queries[:MAX_QUERIES]
