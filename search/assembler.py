"""
Response Assembler — rank, truncate and render candidates as Stremio streams.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from models.enums import ContentType, ErrorKind
from models.schema import Stream

from .client import SearchCandidate

logger = logging.getLogger(__name__)

ADDON_NAME = "F1 Catchup"
MAX_STREAMS = 20

API_KEY_URL = "https://torbox.app/settings"
UPGRADE_URL = "https://torbox.app/subscription"

_QUALITY = [
    (re.compile(r"2160p|\b4k\b|\buhd\b", re.IGNORECASE), "4K"),
    (re.compile(r"1080p", re.IGNORECASE), "1080p"),
    (re.compile(r"720p", re.IGNORECASE), "720p"),
    (re.compile(r"480p|\bsd\b", re.IGNORECASE), "SD"),
]


def detect_quality(title: str) -> Optional[str]:
    for pattern, label in _QUALITY:
        if pattern.search(title):
            return label
    return None


def format_size(size: int) -> str:
    if size <= 0:
        return "?"
    gb = size / (1024 ** 3)
    if gb >= 1:
        return f"{gb:.2f} GB"
    return f"{size / (1024 ** 2):.0f} MB"


def sort_key(candidate: SearchCandidate):
    """Score desc, lookup hits first, torrent before usenet, seeders desc."""
    return (
        -candidate.relevance_score,
        not candidate.from_lookup,
        candidate.content_type != ContentType.TORRENT,
        -candidate.sort_seeders,
    )


class ResponseAssembler:
    """Turns scored candidates (or a failure) into a Stremio stream response."""

    def __init__(self, max_streams: int = MAX_STREAMS, addon_name: str = ADDON_NAME):
        self.max_streams = max_streams
        self.addon_name = addon_name

    def assemble(
        self,
        candidates: List[SearchCandidate],
        lookup_succeeded: bool,
        error_kind: Optional[ErrorKind],
        label: str,
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Build the ``{"streams": [...]}`` response.

        Args:
            candidates: Scored candidates, skips already removed
            lookup_succeeded: Whether the identifier lookup contributed results
            error_kind: Escalated error from the aggregator, if any
            label: "<race> - <session>" used in the no-results placeholder
        """
        # A credential failure is terminal even if candidates were gathered
        if error_kind == ErrorKind.INVALID_CREDENTIAL:
            return {"streams": [self._invalid_credential()]}
        if error_kind == ErrorKind.INSUFFICIENT_ENTITLEMENT:
            return {"streams": [self._insufficient_entitlement()]}

        if not candidates:
            return {"streams": [self._no_results(label, error_kind)]}

        ranked = sorted(candidates, key=sort_key)[: self.max_streams]
        logger.info(
            f"Returning {len(ranked)} of {len(candidates)} streams for {label}"
            f"{' (identifier lookup hit)' if lookup_succeeded else ''}"
        )
        return {"streams": [self.render(c) for c in ranked]}

    def render(self, candidate: SearchCandidate) -> Dict[str, Any]:
        """Stremio stream for one candidate; scoring and dedupe fields stay behind."""
        quality = detect_quality(candidate.title)
        name = f"{self.addon_name}\n{quality}" if quality else self.addon_name

        if candidate.content_type == ContentType.TORRENT:
            details = f"{format_size(candidate.size)}  |  {candidate.seeders} seeders"
        else:
            details = f"{format_size(candidate.size)}  |  Usenet"

        stream = Stream(
            name=name,
            title=f"{candidate.title}\n{details}",
            infoHash=candidate.info_hash,
            url=None if candidate.info_hash else candidate.url,
            behaviorHints={"bingeGroup": f"f1catchup-{(quality or 'unknown').lower()}"},
        )
        return stream.to_dict()

    # ------------------------------------------------------------------
    # Placeholders
    # ------------------------------------------------------------------

    def _placeholder(self, title: str, link: str) -> Dict[str, Any]:
        return Stream(name=self.addon_name, title=title, externalUrl=link).to_dict()

    def _invalid_credential(self) -> Dict[str, Any]:
        return self._placeholder(
            "Invalid TorBox API key\nCheck or replace your key in the addon settings",
            API_KEY_URL,
        )

    def _insufficient_entitlement(self) -> Dict[str, Any]:
        return self._placeholder(
            "TorBox search requires a paid plan\nUpgrade your subscription to search for streams",
            UPGRADE_URL,
        )

    def _no_results(self, label: str, error_kind: Optional[ErrorKind]) -> Dict[str, Any]:
        if error_kind == ErrorKind.NO_CREDENTIAL:
            return self._placeholder(
                f"No streams found for {label}\nAdd a TorBox API key to enable search",
                API_KEY_URL,
            )
        return self._placeholder(f"No streams found for {label}", API_KEY_URL)
