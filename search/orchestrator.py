"""
Stream resolver — wires calendar, query generation, search, scoring and
response assembly together for one stream request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from catalog.numbering import TVDB_SERIES_ID, FixedSlotNumbering
from connectors.calendar import CalendarService
from models.enums import ErrorKind
from models.schema import ScheduleEntry, SessionOccurrence, SessionRef

from .aggregator import SearchAggregator
from .assembler import ResponseAssembler
from .client import EpisodeLookup
from .query_gen import QueryGenerator
from .ranking import ResultRanker

logger = logging.getLogger(__name__)

TVDB_PREFIX = "tvdb"


@dataclass
class Target:
    """A resolved session together with the schedule it was found in."""

    ref: SessionRef
    entry: ScheduleEntry
    session: SessionOccurrence
    schedule: List[ScheduleEntry]


class StreamResolver:
    """Resolves a session identifier into a Stremio stream response."""

    def __init__(
        self,
        calendar: CalendarService,
        numbering: FixedSlotNumbering,
        aggregator: SearchAggregator,
        assembler: ResponseAssembler,
    ):
        self.calendar = calendar
        self.numbering = numbering
        self.aggregator = aggregator
        self.assembler = assembler

    async def resolve(self, stream_id: str, credential: Optional[str]) -> Dict[str, List[Dict[str, Any]]]:
        """
        Resolve ``stream_id`` into ``{"streams": [...]}``.

        Unknown or malformed identifiers, and sessions missing from the
        schedule, resolve to an empty stream list.
        """
        target = await self._find_session(stream_id)
        if target is None:
            logger.info(f"No session found for stream id {stream_id}")
            return {"streams": []}

        ref, entry, session = target.ref, target.entry, target.session
        label = f"{entry.name} - {session.name}"

        queries = QueryGenerator(ref.year).build_queries(entry, ref.kind)
        lookup = self._lookup_for(target)
        logger.info(
            f"Resolving {ref.to_id()} ({label}) with {len(queries)} queries"
            f"{f', lookup E{lookup.episode}' if lookup else ''}"
        )

        outcome = await self.aggregator.search(queries, credential, lookup)
        candidates = ResultRanker(ref.kind).rank(outcome.candidates)

        error_kind = outcome.error_kind
        if error_kind is None and not candidates:
            error_kind = ErrorKind.NO_RESULTS

        return self.assembler.assemble(
            candidates,
            outcome.lookup_succeeded,
            error_kind,
            label,
        )

    # ------------------------------------------------------------------
    # Identifier handling
    # ------------------------------------------------------------------

    async def _find_session(self, stream_id: str) -> Optional[Target]:
        if stream_id.startswith(f"{TVDB_PREFIX}:"):
            return await self._find_tvdb_episode(stream_id)

        try:
            ref = SessionRef.parse(stream_id)
        except ValueError as e:
            logger.warning(f"Rejected stream id: {e}")
            return None

        schedule = await self.calendar.get_schedule(ref.year)
        for entry in schedule:
            if entry.round != ref.round:
                continue
            session = entry.get_session(ref.kind)
            if session is not None:
                return Target(ref, entry, session, schedule)
        return None

    async def _find_tvdb_episode(self, stream_id: str) -> Optional[Target]:
        """``tvdb:<series>:<year>:<episode>`` reversed through the fixed-slot numbering."""
        parts = stream_id.split(":")
        if len(parts) != 4 or parts[1] != str(TVDB_SERIES_ID):
            logger.warning(f"Rejected stream id: {stream_id}")
            return None
        try:
            year, episode = int(parts[2]), int(parts[3])
        except ValueError:
            logger.warning(f"Rejected stream id: {stream_id}")
            return None

        if self.numbering.locate(year, episode) is None:
            return None

        # Shared slots never clash within one weekend, so each episode maps
        # back to exactly one session.
        schedule = await self.calendar.get_schedule(year)
        for entry, session, number in self.numbering.assign(year, schedule):
            if number == episode:
                ref = SessionRef(year=year, round=entry.round, kind=session.kind)
                return Target(ref, entry, session, schedule)
        return None

    def _lookup_for(self, target: Target) -> Optional[EpisodeLookup]:
        """Identifier lookup for the session, if the numbering gives it an episode."""
        for entry, session, number in self.numbering.assign(target.ref.year, target.schedule):
            if entry is target.entry and session.kind == target.session.kind:
                return EpisodeLookup(f"{TVDB_PREFIX}:{TVDB_SERIES_ID}", target.ref.year, number)
        return None
