"""
Stream search module: builds queries for a session, fans them out over the
search provider, scores candidates and assembles the stream response.
"""

from .client import (
    SearchCandidate,
    EpisodeLookup,
    CallResult,
    SearchProvider,
    TorBoxSearchProvider,
    get_search_provider,
)
from .query_gen import QueryGenerator
from .aggregator import SearchAggregator, SearchOutcome
from .ranking import ResultRanker, ScoreResult, score
from .assembler import ResponseAssembler
from .orchestrator import StreamResolver

__all__ = [
    "SearchCandidate",
    "EpisodeLookup",
    "CallResult",
    "SearchProvider",
    "TorBoxSearchProvider",
    "get_search_provider",
    "QueryGenerator",
    "SearchAggregator",
    "SearchOutcome",
    "ResultRanker",
    "ScoreResult",
    "score",
    "ResponseAssembler",
    "StreamResolver",
]
