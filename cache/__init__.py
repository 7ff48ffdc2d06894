"""
Cache package initialization.
"""

from .store import CachePort, InMemoryCache, NullCache

__all__ = ["CachePort", "InMemoryCache", "NullCache"]
