"""
Session definitions shared by the calendar connectors, the catalog builder
and the query generator.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .enums import SessionKind, TESTING_PREFIX, is_testing_kind


@dataclass(frozen=True)
class SessionDef:
    """Static description of a race-weekend session kind."""

    kind: SessionKind
    name: str
    search_term: str
    # Field name on a legacy (Ergast) race record; None for the race itself
    api_field: Optional[str] = None


# Canonical weekend order. The race is always last.
SESSION_DEFS: List[SessionDef] = [
    SessionDef(SessionKind.FP1, "FP1", "Practice 1", "FirstPractice"),
    SessionDef(SessionKind.FP2, "FP2", "Practice 2", "SecondPractice"),
    SessionDef(SessionKind.FP3, "FP3", "Practice 3", "ThirdPractice"),
    SessionDef(SessionKind.SPRINT_QUALIFYING, "Sprint Qualifying", "Sprint Qualifying", "SprintQualifying"),
    SessionDef(SessionKind.SPRINT, "Sprint", "Sprint", "Sprint"),
    SessionDef(SessionKind.QUALIFYING, "Qualifying", "Qualifying", "Qualifying"),
    SessionDef(SessionKind.GRAND_PRIX, "Grand Prix", "Race", None),
]

SESSION_DEFS_BY_KIND: Dict[str, SessionDef] = {d.kind.value: d for d in SESSION_DEFS}

# 2023 named the sprint qualifying session "Sprint Shootout"
LEGACY_FIELD_ALIASES: Dict[str, List[str]] = {
    "SprintQualifying": ["SprintQualifying", "SprintShootout"],
}


def is_known_kind(kind: str) -> bool:
    return kind in SESSION_DEFS_BY_KIND or is_testing_kind(kind)


def testing_kind(number: int) -> str:
    return f"{TESTING_PREFIX}{number}"
