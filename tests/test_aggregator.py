"""
Tests for concurrent search aggregation and credential escalation.
"""

import asyncio

import httpx
import pytest

from models.enums import CallStatus, ContentType, ErrorKind
from search.aggregator import SearchAggregator, escalation, settle
from search.client import CallResult, EpisodeLookup, TorBoxSearchProvider


def _torrents(*items):
    return httpx.Response(200, json={"data": {"torrents": list(items)}})


def _nzbs(*items):
    return httpx.Response(200, json={"data": {"nzbs": list(items)}})


def _aggregator(handler):
    return SearchAggregator(TorBoxSearchProvider(), transport=httpx.MockTransport(handler))


LOOKUP = EpisodeLookup("tvdb:387219", 2024, 9)


# ===================================================================
# Settling and escalation
# ===================================================================


class TestSettle:
    @pytest.mark.asyncio
    async def test_failures_are_dropped(self):
        async def ok():
            return CallResult(ContentType.TORRENT, CallStatus.OK)

        async def boom():
            raise RuntimeError("boom")

        results = await settle([ok(), boom(), ok()])
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_completion_order(self):
        async def delayed(delay, label):
            await asyncio.sleep(delay)
            return CallResult(ContentType.TORRENT, CallStatus.OK, label=label)

        results = await settle([delayed(0.05, "slow"), delayed(0, "fast")])
        assert [r.label for r in results] == ["fast", "slow"]


class TestEscalation:
    def _results(self, *statuses):
        return [CallResult(ContentType.TORRENT, s) for s in statuses]

    def test_all_auth_failed(self):
        results = self._results(CallStatus.AUTH_FAILED, CallStatus.AUTH_FAILED)
        assert escalation(results, 2) == ErrorKind.INVALID_CREDENTIAL

    def test_any_entitlement(self):
        results = self._results(CallStatus.AUTH_FAILED, CallStatus.ENTITLEMENT)
        assert escalation(results, 2) == ErrorKind.INSUFFICIENT_ENTITLEMENT

    def test_partial_rejection(self):
        results = self._results(CallStatus.AUTH_FAILED, CallStatus.OK)
        assert escalation(results, 2) is None

    def test_missing_result_does_not_escalate(self):
        assert escalation(self._results(CallStatus.AUTH_FAILED), 2) is None

    def test_no_calls(self):
        assert escalation([], 0) is None


# ===================================================================
# Aggregated search
# ===================================================================


class TestSearchAggregator:
    @pytest.mark.asyncio
    async def test_no_credential_skips_search(self):
        calls = []

        def handler(request):
            calls.append(request)
            return _torrents()

        outcome = await _aggregator(handler).search(["q"], None)
        assert outcome.error_kind == ErrorKind.NO_CREDENTIAL
        assert outcome.candidates == []
        assert calls == []

    @pytest.mark.asyncio
    async def test_fans_out_and_dedupes(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            if "/torrents/" in request.url.path:
                return _torrents(
                    {"raw_title": "F1 2024 Bahrain Qualifying", "hash": "aaa"},
                    {"raw_title": "F1 2024 Bahrain Qualifying 720p", "hash": "bbb"},
                )
            return _nzbs({"title": "F1 2024 Bahrain Qualifying", "nzb": "https://nzb/1", "id": 1})

        outcome = await _aggregator(handler).search(["q1", "q2", "q3"], "key")
        assert len(paths) == 6
        assert outcome.error_kind is None
        assert sorted(c.dedupe_key for c in outcome.candidates) == ["aaa", "bbb", "id:1"]
        assert outcome.total_calls == 6
        assert outcome.failed_calls == 0

    @pytest.mark.asyncio
    async def test_all_unauthorized_escalates(self):
        outcome = await _aggregator(lambda r: httpx.Response(401)).search(["q1", "q2"], "bad", LOOKUP)
        assert outcome.error_kind == ErrorKind.INVALID_CREDENTIAL
        assert outcome.candidates == []

    @pytest.mark.asyncio
    async def test_partial_unauthorized_is_not_escalated(self):
        def handler(request):
            if "/torrents/" in request.url.path:
                return httpx.Response(401)
            return _nzbs({"title": "F1 2024 Race", "nzb": "https://nzb/1", "id": 1})

        outcome = await _aggregator(handler).search(["q1"], "key")
        assert outcome.error_kind is None
        assert [c.dedupe_key for c in outcome.candidates] == ["id:1"]
        assert outcome.failed_calls == 1

    @pytest.mark.asyncio
    async def test_entitlement_escalates(self):
        def handler(request):
            return httpx.Response(403, json={"detail": "Upgrade your plan to use search"})

        outcome = await _aggregator(handler).search(["q1"], "key")
        assert outcome.error_kind == ErrorKind.INSUFFICIENT_ENTITLEMENT

    @pytest.mark.asyncio
    async def test_lookup_results_merged_first(self):
        def handler(request):
            if "tvdb" in request.url.path:
                if "/torrents/" in request.url.path:
                    return _torrents({"raw_title": "Lookup Hit", "hash": "lll"}, {"raw_title": "Dup", "hash": "aaa"})
                return _nzbs()
            if "/torrents/" in request.url.path:
                return _torrents({"raw_title": "Text Hit", "hash": "aaa"}, {"raw_title": "Other", "hash": "ccc"})
            return _nzbs()

        outcome = await _aggregator(handler).search(["q1"], "key", LOOKUP)
        assert outcome.lookup_succeeded
        keys = [c.dedupe_key for c in outcome.candidates]
        assert keys == ["lll", "aaa", "ccc"]
        lookup_hits = [c for c in outcome.candidates if c.from_lookup]
        assert [c.dedupe_key for c in lookup_hits] == ["lll", "aaa"]
        assert all(c.relevance_score == 100 for c in lookup_hits)

    @pytest.mark.asyncio
    async def test_lookup_params(self):
        seen = []

        def handler(request):
            if "tvdb" in request.url.path:
                seen.append(dict(request.url.params))
            return _torrents()

        await _aggregator(handler).search(["q1"], "key", LOOKUP)
        assert len(seen) == 2
        assert all(p["season"] == "2024" and p["episode"] == "9" for p in seen)

    @pytest.mark.asyncio
    async def test_lookup_rejection_does_not_escalate(self):
        def handler(request):
            if "tvdb" in request.url.path:
                return httpx.Response(401)
            return _torrents({"raw_title": "F1 2024 Race", "hash": "aaa"})

        outcome = await _aggregator(handler).search(["q1"], "key", LOOKUP)
        assert outcome.error_kind is None
        assert not outcome.lookup_succeeded
        assert [c.dedupe_key for c in outcome.candidates] == ["aaa"]

    @pytest.mark.asyncio
    async def test_network_failures_yield_empty(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        outcome = await _aggregator(handler).search(["q1", "q2"], "key")
        assert outcome.error_kind is None
        assert outcome.candidates == []
        assert outcome.failed_calls == 4
