"""
Search Aggregator — fans queries out over every provider endpoint.

Two independent groups run concurrently for a stream request:
  1. free-text queries × content-type endpoints
  2. optional identifier lookup × content-type endpoints

Each group is settled with ``as_completed``: every call finishes, failures
are discarded, nothing cancels a sibling. Results are merged on the calling
task once all producers are done, so the dedupe set needs no locking.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, List, Optional, Sequence, Set

import httpx

from models.enums import CallStatus, ErrorKind

from .client import CallResult, EpisodeLookup, SearchCandidate, SearchProvider

logger = logging.getLogger(__name__)

LOOKUP_SCORE = 100

_REJECTED = (CallStatus.AUTH_FAILED, CallStatus.ENTITLEMENT)


@dataclass
class SearchOutcome:
    """Merged result of one aggregated search."""

    candidates: List[SearchCandidate] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    lookup_succeeded: bool = False
    # Stats
    total_calls: int = 0
    failed_calls: int = 0


async def settle(calls: Sequence[Awaitable[CallResult]]) -> List[CallResult]:
    """Await every call, returning results in completion order; failures are dropped."""
    settled: List[CallResult] = []
    for future in asyncio.as_completed([asyncio.ensure_future(c) for c in calls]):
        try:
            settled.append(await future)
        except Exception as e:
            logger.warning(f"Search call raised, discarding: {e!r}")
    return settled


def escalation(results: List[CallResult], expected_calls: int) -> Optional[ErrorKind]:
    """
    Credential error for a group, or None.

    Only a rejection by every call escalates; a partial rejection is just a
    zero-result call.
    """
    if expected_calls == 0 or len(results) != expected_calls:
        return None
    if not all(r.status in _REJECTED for r in results):
        return None
    if any(r.status == CallStatus.ENTITLEMENT for r in results):
        return ErrorKind.INSUFFICIENT_ENTITLEMENT
    return ErrorKind.INVALID_CREDENTIAL


class SearchAggregator:
    """Runs and merges concurrent searches against one provider."""

    def __init__(
        self,
        provider: SearchProvider,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._provider = provider
        self._timeout = timeout
        self._transport = transport

    async def search(
        self,
        queries: Sequence[str],
        credential: Optional[str],
        lookup: Optional[EpisodeLookup] = None,
    ) -> SearchOutcome:
        if not credential:
            logger.info("No search credential configured, skipping search")
            return SearchOutcome(error_kind=ErrorKind.NO_CREDENTIAL)

        content_types = self._provider.content_types

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            text_calls = [
                self._provider.search(client, query, ct, credential)
                for query in queries
                for ct in content_types
            ]
            lookup_calls = []
            if lookup is not None:
                lookup_calls = [
                    self._provider.lookup(client, lookup, ct, credential)
                    for ct in content_types
                ]

            text_results, lookup_results = await asyncio.gather(
                settle(text_calls),
                settle(lookup_calls),
            )

        outcome = SearchOutcome(total_calls=len(text_calls) + len(lookup_calls))
        outcome.failed_calls = sum(
            1 for r in text_results + lookup_results if r.status != CallStatus.OK
        ) + (outcome.total_calls - len(text_results) - len(lookup_results))

        outcome.error_kind = escalation(text_results, len(text_calls))
        if outcome.error_kind is not None:
            logger.warning(f"All {len(text_calls)} search calls rejected: {outcome.error_kind.value}")
            return outcome

        seen: Set[str] = set()

        lookup_candidates = self._merge(lookup_results, seen)
        for candidate in lookup_candidates:
            candidate.relevance_score = LOOKUP_SCORE
            candidate.from_lookup = True
        outcome.lookup_succeeded = bool(lookup_candidates)

        outcome.candidates = lookup_candidates + self._merge(text_results, seen)

        logger.info(
            f"Search merged {len(outcome.candidates)} candidates "
            f"({len(lookup_candidates)} from lookup) from {outcome.total_calls} calls, "
            f"{outcome.failed_calls} failed"
        )
        return outcome

    @staticmethod
    def _merge(results: List[CallResult], seen: Set[str]) -> List[SearchCandidate]:
        """First candidate seen under a dedupe key wins."""
        merged: List[SearchCandidate] = []
        for result in results:
            if result.status != CallStatus.OK:
                continue
            for candidate in result.candidates:
                if candidate.dedupe_key in seen:
                    continue
                seen.add(candidate.dedupe_key)
                merged.append(candidate)
        return merged
