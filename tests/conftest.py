"""
Shared fixtures: sample schedules, upstream payloads and a fake calendar.
"""

from typing import Dict, List

import pytest

from models.schema import ScheduleEntry, SessionOccurrence
from models.sessions import SESSION_DEFS_BY_KIND


def make_weekend(round_number, name, location, country, kinds, date="2024-03-02"):
    sessions = []
    for kind in kinds:
        d = SESSION_DEFS_BY_KIND[kind]
        sessions.append(
            SessionOccurrence(
                kind=kind, name=d.name, search_term=d.search_term,
                date=date, time="15:00:00Z",
            )
        )
    return ScheduleEntry(
        round=round_number, name=name, location=location,
        country=country, sessions=sessions,
    )


def make_testing(location="Sakhir", country="Bahrain", days=3):
    sessions = [
        SessionOccurrence(
            kind=f"test{n}", name=f"Day {n}", search_term=f"Testing Day {n}",
            date=f"2024-02-2{n}", time="07:00:00",
        )
        for n in range(1, days + 1)
    ]
    return ScheduleEntry(
        round=0, is_testing=True, name="Pre-Season Testing",
        location=location, country=country, sessions=sessions,
    )


STANDARD = ["fp1", "fp2", "fp3", "qualifying", "grandprix"]
SPRINT = ["fp1", "sprintquali", "sprint", "qualifying", "grandprix"]


@pytest.fixture
def schedule_2024() -> List[ScheduleEntry]:
    return [
        make_testing(),
        make_weekend(1, "Bahrain Grand Prix", "Sakhir", "Bahrain", STANDARD),
        make_weekend(5, "Chinese Grand Prix", "Shanghai", "China", SPRINT, date="2024-04-20"),
    ]


class FakeCalendar:
    """Calendar stand-in returning canned schedules and recording lookups."""

    def __init__(self, schedules: Dict[int, List[ScheduleEntry]]):
        self.schedules = schedules
        self.requested: List[int] = []

    async def get_schedule(self, year: int) -> List[ScheduleEntry]:
        self.requested.append(year)
        return self.schedules.get(year, [])


@pytest.fixture
def fake_calendar(schedule_2024):
    return FakeCalendar({2024: schedule_2024})


# ===================================================================
# Upstream payloads
# ===================================================================


@pytest.fixture
def openf1_meetings():
    # Deliberately out of chronological order
    return [
        {
            "meeting_key": 1230, "meeting_name": "Saudi Arabian Grand Prix",
            "location": "Jeddah", "country_name": "Saudi Arabia",
            "circuit_short_name": "Jeddah", "date_start": "2024-03-07T13:30:00+00:00",
        },
        {
            "meeting_key": 1229, "meeting_name": "Bahrain Grand Prix",
            "location": "Sakhir", "country_name": "Bahrain",
            "circuit_short_name": "Sakhir", "date_start": "2024-02-29T11:30:00+00:00",
        },
        {
            "meeting_key": 1228, "meeting_name": "Pre-Season Testing",
            "location": "Sakhir", "country_name": "Bahrain",
            "circuit_short_name": "Sakhir", "date_start": "2024-02-21T07:00:00+00:00",
        },
    ]


@pytest.fixture
def openf1_sessions():
    def s(meeting_key, name, start):
        return {"meeting_key": meeting_key, "session_name": name, "date_start": start}

    return [
        s(1228, "Day 2", "2024-02-22T07:00:00+00:00"),
        s(1228, "Day 1", "2024-02-21T07:00:00+00:00"),
        s(1228, "Day 3", "2024-02-23T07:00:00+00:00"),
        s(1229, "Practice 1", "2024-02-29T11:30:00+00:00"),
        s(1229, "Practice 2", "2024-02-29T15:00:00+00:00"),
        s(1229, "Practice 3", "2024-03-01T12:30:00+00:00"),
        s(1229, "Qualifying", "2024-03-01T16:00:00+00:00"),
        s(1229, "Race", "2024-03-02T15:00:00+00:00"),
        s(1230, "Shakedown", "2024-03-07T09:00:00+00:00"),
        s(1230, "Practice 1", "2024-03-07T13:30:00+00:00"),
        s(1230, "Sprint Qualifying", "2024-03-07T17:30:00+00:00"),
        s(1230, "Sprint", "2024-03-08T13:30:00+00:00"),
        s(1230, "Qualifying", "2024-03-08T17:00:00+00:00"),
        s(1230, "Race", "2024-03-09T17:00:00+00:00"),
    ]


@pytest.fixture
def ergast_races():
    # 2023 shape: sprint qualifying reported as SprintShootout
    return {
        "MRData": {
            "RaceTable": {
                "season": "2023",
                "Races": [
                    {
                        "season": "2023", "round": "4",
                        "raceName": "Azerbaijan Grand Prix",
                        "Circuit": {
                            "circuitName": "Baku City Circuit",
                            "Location": {"locality": "Baku", "country": "Azerbaijan"},
                        },
                        "date": "2023-04-30", "time": "11:00:00Z",
                        "FirstPractice": {"date": "2023-04-28", "time": "09:30:00Z"},
                        "Qualifying": {"date": "2023-04-28", "time": "13:00:00Z"},
                        "SprintShootout": {"date": "2023-04-29", "time": "08:30:00Z"},
                        "Sprint": {"date": "2023-04-29", "time": "12:30:00Z"},
                    },
                    {
                        "season": "2023", "round": "1",
                        "raceName": "Bahrain Grand Prix",
                        "Circuit": {
                            "circuitName": "Bahrain International Circuit",
                            "Location": {"locality": "Sakhir", "country": "Bahrain"},
                        },
                        "date": "2023-03-05", "time": "15:00:00Z",
                        "FirstPractice": {"date": "2023-03-03", "time": "11:30:00Z"},
                        "SecondPractice": {"date": "2023-03-03", "time": "15:00:00Z"},
                        "ThirdPractice": {"date": "2023-03-04", "time": "11:30:00Z"},
                        "Qualifying": {"date": "2023-03-04", "time": "15:00:00Z"},
                    },
                ],
            }
        }
    }
