"""
Cache port for upstream HTTP responses.

Components receive a ``CachePort`` explicitly; nothing reaches for a
process-wide cache handle.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple


class CachePort(ABC):
    """Key -> JSON-compatible value store with per-entry TTL."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or expired entry."""
        ...

    @abstractmethod
    def put(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        ...


class InMemoryCache(CachePort):
    """
    Per-process TTL cache.

    Entries are served as-is until their TTL elapses; there is no
    revalidation. A serverless instance keeps it for its warm lifetime.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def put(self, key: str, value: Any, ttl: float) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries = {}
        return count

    def __len__(self) -> int:
        return len(self._entries)


class NullCache(CachePort):
    """Cache that never stores anything."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def put(self, key: str, value: Any, ttl: float) -> None:
        return None
