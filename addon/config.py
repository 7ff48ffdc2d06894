"""
Addon configuration, loaded from the environment (optionally via a .env file).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from catalog.numbering import DEFAULT_TESTING_EPISODES

logger = logging.getLogger(__name__)


def parse_testing_episodes(value: str) -> Dict[int, int]:
    """
    Parse ``"2023:6,2024:5"`` into ``{2023: 6, 2024: 5}``.

    Malformed pairs are skipped with a warning.
    """
    counts: Dict[int, int] = {}
    for pair in (value or "").split(","):
        pair = pair.strip()
        if not pair:
            continue
        try:
            year, count = pair.split(":")
            counts[int(year)] = int(count)
        except ValueError:
            logger.warning(f"Ignoring malformed TESTING_EPISODES entry: {pair!r}")
    return counts


@dataclass
class AddonConfig:
    """Addon configuration."""

    torbox_api_key: Optional[str] = None
    search_api_base: str = "https://search-api.torbox.app"
    openf1_api_base: str = "https://api.openf1.org/v1"
    ergast_api_base: str = "https://api.jolpi.ca/ergast/f1"

    # Catalog
    numbering: str = "tvdb"  # tvdb | sequential
    testing_episodes: Dict[int, int] = field(
        default_factory=lambda: dict(DEFAULT_TESTING_EPISODES)
    )
    min_season: int = 2023

    cache_ttl: float = 86400
    http_timeout: float = 15.0
    max_streams: int = 20
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> AddonConfig:
        """Load configuration from environment variables."""
        if dotenv:
            load_dotenv()
        testing = os.getenv("TESTING_EPISODES")
        return cls(
            torbox_api_key=os.getenv("TORBOX_API_KEY") or None,
            search_api_base=os.getenv("SEARCH_API_BASE", "https://search-api.torbox.app"),
            openf1_api_base=os.getenv("OPENF1_API_BASE", "https://api.openf1.org/v1"),
            ergast_api_base=os.getenv("ERGAST_API_BASE", "https://api.jolpi.ca/ergast/f1"),
            numbering=os.getenv("NUMBERING", "tvdb").lower(),
            testing_episodes=(
                parse_testing_episodes(testing) if testing
                else dict(DEFAULT_TESTING_EPISODES)
            ),
            min_season=int(os.getenv("MIN_SEASON", "2023")),
            cache_ttl=float(os.getenv("CACHE_TTL", "86400")),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", "15")),
            max_streams=int(os.getenv("MAX_STREAMS", "20")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
