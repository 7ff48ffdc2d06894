"""
Episode numbering policies.

Episode and season numbers are presentation only; lookups always go
through the (year, round, kind) identity.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from models.enums import SessionKind
from models.schema import ScheduleEntry, SessionOccurrence

logger = logging.getLogger(__name__)

Numbered = Tuple[ScheduleEntry, SessionOccurrence, int]

# TheTVDB "Formula 1" series, which numbers every season as one block
TVDB_SERIES_ID = 387219

# Testing episodes at the start of each TVDB season
DEFAULT_TESTING_EPISODES: Dict[int, int] = {
    2023: 6,
    2024: 5,
    2025: 6,
}

# Offset of each session inside a race weekend's five-slot block.
# Sprint weekends reuse slots 2 and 3 for sprint qualifying and the sprint.
SESSION_SLOTS: Dict[str, int] = {
    SessionKind.FP1.value: 1,
    SessionKind.FP2.value: 2,
    SessionKind.FP3.value: 3,
    SessionKind.SPRINT_QUALIFYING.value: 2,
    SessionKind.SPRINT.value: 3,
    SessionKind.QUALIFYING.value: 4,
    SessionKind.GRAND_PRIX.value: 5,
}

SLOTS_PER_ROUND = 5


class NumberingPolicy(ABC):
    """Assigns episode numbers to every session of a season."""

    name: str = ""

    @abstractmethod
    def assign(self, year: int, schedule: List[ScheduleEntry]) -> List[Numbered]:
        """Return (entry, session, episode) for every numbered session."""
        ...


class SequentialNumbering(NumberingPolicy):
    """1-based numbering across all sessions in round order, per year."""

    name = "sequential"

    def assign(self, year: int, schedule: List[ScheduleEntry]) -> List[Numbered]:
        numbered: List[Numbered] = []
        episode = 0
        for entry in sorted(schedule, key=lambda e: e.round):
            for session in entry.sessions:
                episode += 1
                numbered.append((entry, session, episode))
        return numbered


class FixedSlotNumbering(NumberingPolicy):
    """
    TVDB-compatible numbering.

    Testing sessions take episodes 1..n, then every round owns a block of
    five slots: ``testing_count + (round - 1) * 5 + slot``. Years without a
    configured testing count get no race episodes.
    """

    name = "tvdb"

    def __init__(self, testing_episodes: Optional[Dict[int, int]] = None):
        self.testing_episodes = dict(
            DEFAULT_TESTING_EPISODES if testing_episodes is None else testing_episodes
        )

    def episode_for(self, year: int, round_number: int, kind: str) -> Optional[int]:
        testing_count = self.testing_episodes.get(year)
        slot = SESSION_SLOTS.get(kind)
        if testing_count is None or slot is None or round_number < 1:
            return None
        return testing_count + (round_number - 1) * SLOTS_PER_ROUND + slot

    def locate(self, year: int, episode: int) -> Optional[Tuple[int, int]]:
        """
        Reverse an episode number into ``(round, slot)``.

        Returns ``(0, n)`` for the n-th testing episode and None when the
        year is not configured.
        """
        testing_count = self.testing_episodes.get(year)
        if testing_count is None or episode < 1:
            return None
        if episode <= testing_count:
            return (0, episode)
        offset = episode - testing_count - 1
        return (offset // SLOTS_PER_ROUND + 1, offset % SLOTS_PER_ROUND + 1)

    def assign(self, year: int, schedule: List[ScheduleEntry]) -> List[Numbered]:
        testing_count = self.testing_episodes.get(year)
        if testing_count is None:
            return []

        numbered: List[Numbered] = []
        testing_counter = 1
        for entry in sorted(schedule, key=lambda e: e.round):
            if entry.is_testing:
                for session in entry.sessions:
                    # Numbers past the testing block belong to round 1
                    if testing_counter > testing_count:
                        logger.warning(
                            f"{year}: skipping testing session {session.kind}, "
                            f"only {testing_count} testing episodes configured"
                        )
                        continue
                    numbered.append((entry, session, testing_counter))
                    testing_counter += 1
                continue

            for session in entry.sessions:
                episode = self.episode_for(year, entry.round, session.kind)
                if episode:
                    numbered.append((entry, session, episode))
        return numbered


def get_numbering_policy(
    name: str,
    testing_episodes: Optional[Dict[int, int]] = None,
) -> NumberingPolicy:
    """Factory: create a numbering policy by name."""
    if name == SequentialNumbering.name:
        return SequentialNumbering()
    if name == FixedSlotNumbering.name:
        return FixedSlotNumbering(testing_episodes)
    raise ValueError(
        f"Unknown numbering policy '{name}'. Choose from: {[SequentialNumbering.name, FixedSlotNumbering.name]}"
    )
