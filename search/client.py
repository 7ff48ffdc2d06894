"""
Search provider client and candidate normalization.

Supports:
  - TorBox search API (torrent and usenet partitions, bearer auth)

One call targets one (query or identifier lookup, content type) pair and
always returns a ``CallResult``; network and shape errors never escape.
"""

from __future__ import annotations

import base64
import binascii
import logging
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, quote, urlsplit

import httpx

from models.enums import CallStatus, ContentType

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Data classes
# ------------------------------------------------------------------

@dataclass
class SearchCandidate:
    """Single search hit, normalized across torrent and usenet shapes."""

    title: str
    content_type: ContentType
    dedupe_key: str
    size: int = 0
    seeders: int = 0
    info_hash: Optional[str] = None
    url: Optional[str] = None
    # populated later by scoring / lookup merge
    relevance_score: int = 0
    from_lookup: bool = False

    @property
    def sort_seeders(self) -> int:
        return self.seeders if self.content_type == ContentType.TORRENT else 0


@dataclass(frozen=True)
class EpisodeLookup:
    """Identifier-based lookup by canonical series/season/episode."""

    series_id: str  # e.g. "tvdb:387219"
    season: int
    episode: int


@dataclass
class CallResult:
    """Outcome of one provider call."""

    content_type: ContentType
    status: CallStatus
    candidates: List[SearchCandidate] = field(default_factory=list)
    label: str = ""


# ------------------------------------------------------------------
# Envelope normalization
# ------------------------------------------------------------------

def _path(*keys: str) -> Callable[[Any], Optional[list]]:
    def matcher(body: Any) -> Optional[list]:
        node = body
        for key in keys:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node if isinstance(node, list) else None
    return matcher


# Tried in order; the first matcher that yields a list wins
ENVELOPE_MATCHERS: List[Tuple[str, Callable[[Any], Optional[list]]]] = [
    ("data.torrents", _path("data", "torrents")),
    ("data.nzbs", _path("data", "nzbs")),
    ("data.results", _path("data", "results")),
    ("data", _path("data")),
    ("torrents", _path("torrents")),
    ("nzbs", _path("nzbs")),
    ("results", _path("results")),
    ("list", lambda body: body if isinstance(body, list) else None),
]


def extract_items(body: Any) -> List[Dict[str, Any]]:
    """Return the result array of a provider envelope, or [] for unknown shapes."""
    for name, matcher in ENVELOPE_MATCHERS:
        items = matcher(body)
        if items is not None:
            return [item for item in items if isinstance(item, dict)]
    return []


def to_candidate(item: Dict[str, Any], content_type: ContentType) -> Optional[SearchCandidate]:
    """
    Normalize one provider item.

    Dedupe key precedence: content hash, provider id, then ``title:size``.
    Items without a title or without anything playable are dropped.
    """
    title = item.get("raw_title") or item.get("title") or item.get("name")
    if not title:
        return None

    size = _to_int(item.get("size"))
    info_hash = str(item.get("hash") or item.get("info_hash") or "").lower() or None
    native_id = item.get("id")

    if content_type == ContentType.TORRENT:
        seeders = _to_int(item.get("last_known_seeders", item.get("seeders")))
        url = item.get("magnet") or item.get("magnet_link")
        info_hash = info_hash or info_hash_from_magnet(url)
        # Torrents play by info hash only
        if not info_hash:
            return None
    else:
        seeders = 0
        url = item.get("nzb") or item.get("link") or item.get("download_url")
        if not url:
            return None

    if info_hash:
        dedupe_key = info_hash
    elif native_id not in (None, ""):
        dedupe_key = f"id:{native_id}"
    else:
        dedupe_key = f"{title}:{size}"

    return SearchCandidate(
        title=str(title),
        content_type=content_type,
        dedupe_key=dedupe_key,
        size=size,
        seeders=seeders,
        info_hash=info_hash if content_type == ContentType.TORRENT else None,
        url=url,
    )


# ------------------------------------------------------------------
# Abstract provider
# ------------------------------------------------------------------

ENTITLEMENT_MARKERS = ("plan", "subscription", "upgrade", "tier", "paid")


class SearchProvider(ABC):
    """Abstract search backend with several content-type endpoints."""

    content_types: Tuple[ContentType, ...] = (ContentType.TORRENT, ContentType.USENET)

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    def search_url(self, query: str, content_type: ContentType) -> Tuple[str, Dict[str, str]]:
        """URL and query params for a free-text search."""
        ...

    @abstractmethod
    def lookup_url(self, lookup: EpisodeLookup, content_type: ContentType) -> Tuple[str, Dict[str, str]]:
        """URL and query params for an identifier lookup."""
        ...

    async def search(
        self,
        client: httpx.AsyncClient,
        query: str,
        content_type: ContentType,
        credential: str,
    ) -> CallResult:
        url, params = self.search_url(query, content_type)
        return await self._call(client, url, params, content_type, credential, label=query)

    async def lookup(
        self,
        client: httpx.AsyncClient,
        lookup: EpisodeLookup,
        content_type: ContentType,
        credential: str,
    ) -> CallResult:
        url, params = self.lookup_url(lookup, content_type)
        label = f"{lookup.series_id} S{lookup.season}E{lookup.episode}"
        return await self._call(client, url, params, content_type, credential, label=label)

    async def _call(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Dict[str, str],
        content_type: ContentType,
        credential: str,
        label: str,
    ) -> CallResult:
        headers = {"Authorization": f"Bearer {credential}"}
        try:
            response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"{self.provider_name} {content_type.value} '{label}' failed: {e}")
            return CallResult(content_type, CallStatus.FAILED, label=label)

        body = _json_or_none(response)

        if response.status_code in (401, 403):
            status = CallStatus.ENTITLEMENT if _mentions_entitlement(body) else CallStatus.AUTH_FAILED
            logger.warning(f"{self.provider_name} {content_type.value} '{label}' rejected: HTTP {response.status_code}")
            return CallResult(content_type, status, label=label)

        if response.status_code >= 400:
            logger.warning(f"{self.provider_name} {content_type.value} '{label}' failed: HTTP {response.status_code}")
            return CallResult(content_type, CallStatus.FAILED, label=label)

        if isinstance(body, dict) and body.get("success") is False:
            status = CallStatus.ENTITLEMENT if _mentions_entitlement(body) else CallStatus.FAILED
            logger.warning(f"{self.provider_name} {content_type.value} '{label}' unsuccessful: {_error_text(body)}")
            return CallResult(content_type, status, label=label)

        candidates = []
        for item in extract_items(body):
            candidate = to_candidate(item, content_type)
            if candidate is not None:
                candidates.append(candidate)

        logger.debug(f"{self.provider_name} {content_type.value} '{label}': {len(candidates)} results")
        return CallResult(content_type, CallStatus.OK, candidates, label=label)


# ------------------------------------------------------------------
# TorBox search API
# ------------------------------------------------------------------

class TorBoxSearchProvider(SearchProvider):
    """Search via the TorBox search API (https://search-api.torbox.app)."""

    API_URL = "https://search-api.torbox.app"

    PATHS = {
        ContentType.TORRENT: "torrents",
        ContentType.USENET: "usenet",
    }

    def __init__(self, api_url: Optional[str] = None):
        self._api_url = (api_url or self.API_URL).rstrip("/")

    @property
    def provider_name(self) -> str:
        return "torbox"

    def search_url(self, query: str, content_type: ContentType) -> Tuple[str, Dict[str, str]]:
        path = self.PATHS[content_type]
        return (
            f"{self._api_url}/{path}/search/{quote(query, safe='')}",
            {"metadata": "false", "check_cache": "false"},
        )

    def lookup_url(self, lookup: EpisodeLookup, content_type: ContentType) -> Tuple[str, Dict[str, str]]:
        path = self.PATHS[content_type]
        return (
            f"{self._api_url}/{path}/{quote(lookup.series_id, safe=':')}",
            {
                "season": str(lookup.season),
                "episode": str(lookup.episode),
                "metadata": "false",
                "check_cache": "false",
            },
        )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def info_hash_from_magnet(magnet: Optional[str]) -> Optional[str]:
    """Lowercase hex ``btih`` of a magnet link; base32 hashes are converted."""
    if not magnet or not str(magnet).startswith("magnet:?"):
        return None
    for topic in parse_qs(urlsplit(str(magnet)).query).get("xt", []):
        if not topic.lower().startswith("urn:btih:"):
            continue
        value = topic[len("urn:btih:"):]
        if len(value) == 40 and all(c in string.hexdigits for c in value):
            return value.lower()
        if len(value) == 32:
            try:
                return base64.b32decode(value.upper()).hex()
            except (binascii.Error, ValueError):
                return None
    return None


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_text(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    parts = [body.get(key) for key in ("error", "detail", "message")]
    return " ".join(str(p) for p in parts if p)


def _mentions_entitlement(body: Any) -> bool:
    text = _error_text(body).lower()
    return any(marker in text for marker in ENTITLEMENT_MARKERS)


def get_search_provider(provider: str = "torbox", api_url: Optional[str] = None) -> SearchProvider:
    """Factory — create a search provider by name."""
    providers = {
        "torbox": TorBoxSearchProvider,
    }
    cls = providers.get(provider)
    if not cls:
        raise ValueError(
            f"Unknown provider '{provider}'. Choose from: {list(providers.keys())}"
        )
    return cls(api_url=api_url)
