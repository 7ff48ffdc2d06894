"""
Formula 1 connector for the OpenF1 API (current feed).

OpenF1 exposes meetings (race weekends and test events) and a flat list of
sessions tagged by name. Sessions are classified into the closed kind set;
test meetings become round 0 entries with numbered testing sessions.
"""

from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime
import asyncio
import logging

import httpx

from .base import CalendarConnector, RawSeasonPayload
from models.enums import SessionKind
from models.schema import ScheduleEntry, SessionOccurrence
from models.sessions import SESSION_DEFS, testing_kind
from normalizer.engine import SessionKindClassifier
from utils.timezone_utils import parse_iso_datetime, split_utc

logger = logging.getLogger(__name__)

_LATEST = datetime.max


class OpenF1Connector(CalendarConnector):
    """Calendar connector using the OpenF1 meetings and sessions endpoints."""

    DEFAULT_BASE = "https://api.openf1.org/v1"

    def __init__(self, base_url: str = DEFAULT_BASE, **kwargs):
        super().__init__(base_url, **kwargs)

    @property
    def id(self) -> str:
        return "f1_openf1"

    async def fetch_season(self, client: httpx.AsyncClient, season: int) -> RawSeasonPayload:
        """Fetch meetings and sessions for a season concurrently."""
        meetings_url = f"{self.base_url}/meetings?year={season}"
        sessions_url = f"{self.base_url}/sessions?year={season}"

        meetings, sessions = await asyncio.gather(
            self._get_json(client, meetings_url, f"openf1-meetings-{season}"),
            self._get_json(client, sessions_url, f"openf1-sessions-{season}"),
        )

        return RawSeasonPayload(
            content={"meetings": meetings, "sessions": sessions},
            url=meetings_url,
            retrieved_at=datetime.utcnow(),
            metadata={"season": season},
        )

    def extract(self, raw: RawSeasonPayload) -> List[ScheduleEntry]:
        """Build testing entries (round 0) followed by numbered race weekends."""
        meetings = raw.content.get("meetings")
        sessions = raw.content.get("sessions")
        if not isinstance(meetings, list) or not isinstance(sessions, list):
            logger.warning(f"Unexpected OpenF1 payload shape for {raw.metadata.get('season')}")
            return []

        by_meeting: Dict[Any, List[Dict[str, Any]]] = {}
        for session in sessions:
            if isinstance(session, dict):
                by_meeting.setdefault(session.get("meeting_key"), []).append(session)

        meetings = sorted(
            (m for m in meetings if isinstance(m, dict)),
            key=lambda m: _start_key(m.get("date_start")),
        )

        testing = [m for m in meetings if _is_testing(m)]
        race_weekends = [m for m in meetings if not _is_testing(m)]

        entries = self._extract_testing(testing, by_meeting)
        entries.extend(self._extract_race_weekends(race_weekends, by_meeting))
        return entries

    def _extract_testing(
        self,
        meetings: List[Dict[str, Any]],
        by_meeting: Dict[Any, List[Dict[str, Any]]],
    ) -> List[ScheduleEntry]:
        entries = []
        # Slot numbers run across every test meeting of the season
        counter = 0
        for meeting in meetings:
            meeting_sessions = sorted(
                by_meeting.get(meeting.get("meeting_key"), []),
                key=lambda s: _start_key(s.get("date_start")),
            )
            occurrences = []
            for session in meeting_sessions:
                counter += 1
                name = session.get("session_name") or f"Day {counter}"
                date, time = split_utc(session.get("date_start"))
                occurrences.append(
                    SessionOccurrence(
                        kind=testing_kind(counter),
                        name=name,
                        search_term=f"Testing {name}",
                        date=date,
                        time=time,
                    )
                )

            entries.append(
                ScheduleEntry(
                    round=0,
                    is_testing=True,
                    name=meeting.get("meeting_name", "Pre-Season Testing"),
                    location=meeting.get("location") or "",
                    country=meeting.get("country_name") or meeting.get("location") or "",
                    circuit=meeting.get("circuit_short_name"),
                    sessions=occurrences,
                )
            )
        return entries

    def _extract_race_weekends(
        self,
        meetings: List[Dict[str, Any]],
        by_meeting: Dict[Any, List[Dict[str, Any]]],
    ) -> List[ScheduleEntry]:
        rows: List[Tuple[datetime, Dict[str, Any], Dict[str, Tuple[Optional[str], Optional[str]]]]] = []

        for meeting in meetings:
            slots: Dict[str, Tuple[Optional[str], Optional[str]]] = {}
            race_start = None
            for session in by_meeting.get(meeting.get("meeting_key"), []):
                kind = SessionKindClassifier.classify(session.get("session_name"))
                if kind is None:
                    continue
                slots[kind.value] = split_utc(session.get("date_start"))
                if kind == SessionKind.GRAND_PRIX:
                    race_start = session.get("date_start")

            canonical_start = race_start or meeting.get("date_start")
            if SessionKind.GRAND_PRIX.value not in slots:
                slots[SessionKind.GRAND_PRIX.value] = split_utc(canonical_start)

            rows.append((_start_key(canonical_start), meeting, slots))

        rows.sort(key=lambda row: row[0])

        entries = []
        for round_number, (_, meeting, slots) in enumerate(rows, start=1):
            occurrences = [
                SessionOccurrence(
                    kind=d.kind.value,
                    name=d.name,
                    search_term=d.search_term,
                    date=slots[d.kind.value][0],
                    time=slots[d.kind.value][1],
                )
                for d in SESSION_DEFS
                if d.kind.value in slots
            ]
            entries.append(
                ScheduleEntry(
                    round=round_number,
                    name=meeting.get("meeting_name", f"Round {round_number}"),
                    location=meeting.get("location") or "",
                    country=meeting.get("country_name") or meeting.get("location") or "",
                    circuit=meeting.get("circuit_short_name"),
                    sessions=occurrences,
                )
            )
        return entries


def _is_testing(meeting: Dict[str, Any]) -> bool:
    return "test" in (meeting.get("meeting_name") or "").lower()


def _start_key(value: Optional[str]) -> datetime:
    dt = parse_iso_datetime(value)
    if dt is None:
        return _LATEST
    return dt.replace(tzinfo=None)
