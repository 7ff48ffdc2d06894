"""
Tests for end-to-end stream resolution.
"""

from urllib.parse import unquote

import httpx
import pytest

from conftest import STANDARD, FakeCalendar, make_testing, make_weekend

from catalog.numbering import FixedSlotNumbering
from search.aggregator import SearchAggregator
from search.assembler import API_KEY_URL, ResponseAssembler
from search.client import TorBoxSearchProvider
from search.orchestrator import StreamResolver


class RecordingSearch:
    """Mock TorBox search API that records queries and lookups."""

    def __init__(self, torrents=None, lookup=None, status=200):
        self.torrents = torrents or []
        self.lookup = lookup or []
        self.status = status
        self.queries = []
        self.lookups = []

    def __call__(self, request):
        if self.status != 200:
            return httpx.Response(self.status)
        path = unquote(request.url.path)
        if "tvdb" in path:
            self.lookups.append(dict(request.url.params))
            items = self.lookup if path.startswith("/torrents/") else []
        else:
            self.queries.append(path.rsplit("/", 1)[-1])
            items = self.torrents if path.startswith("/torrents/") else []
        return httpx.Response(200, json={"data": items})


def _resolver(calendar, search):
    return StreamResolver(
        calendar=calendar,
        numbering=FixedSlotNumbering(),
        aggregator=SearchAggregator(TorBoxSearchProvider(), transport=httpx.MockTransport(search)),
        assembler=ResponseAssembler(),
    )


TORRENTS = [
    {"raw_title": "Formula.1.2024.R01.Bahrain.Qualifying.1080p", "hash": "q1", "last_known_seeders": 40},
    {"raw_title": "Formula.1.2024.R01.Bahrain.Sprint.Qualifying", "hash": "sq", "last_known_seeders": 90},
    {"raw_title": "Formula 1 2024 Bahrain Highlights", "hash": "hl", "last_known_seeders": 500},
]


class TestStreamResolver:
    @pytest.mark.asyncio
    async def test_resolves_session(self, fake_calendar):
        search = RecordingSearch(
            torrents=TORRENTS,
            lookup=[{"raw_title": "Formula 1 S2024E09", "hash": "lk"}],
        )
        result = await _resolver(fake_calendar, search).resolve("f1catchup:2024:1:qualifying", "key")

        hashes = [s.get("infoHash") for s in result["streams"]]
        assert hashes == ["lk", "q1", "hl"]
        assert "Formula 1 2024 Round 01 Sakhir Qualifying" in search.queries
        assert search.lookups and all(p["episode"] == "9" for p in search.lookups)
        assert fake_calendar.requested == [2024]

    @pytest.mark.asyncio
    async def test_tvdb_id_reversed(self, fake_calendar):
        search = RecordingSearch()
        await _resolver(fake_calendar, search).resolve("tvdb:387219:2024:27", "key")
        assert any(q.endswith("Shanghai Sprint Qualifying") for q in search.queries)
        assert all(p["episode"] == "27" for p in search.lookups)

    @pytest.mark.asyncio
    async def test_testing_lookup_episode(self, fake_calendar):
        search = RecordingSearch()
        await _resolver(fake_calendar, search).resolve("f1catchup:2024:0:test2", "key")
        assert any(q.endswith("Testing Day 2") for q in search.queries)
        assert all(p["episode"] == "2" for p in search.lookups)

    @pytest.mark.asyncio
    async def test_all_unauthorized_gives_one_placeholder(self, fake_calendar):
        result = await _resolver(fake_calendar, RecordingSearch(status=401)).resolve(
            "f1catchup:2024:1:qualifying", "bad"
        )
        assert len(result["streams"]) == 1
        assert result["streams"][0]["externalUrl"] == API_KEY_URL
        assert "infoHash" not in result["streams"][0]

    @pytest.mark.asyncio
    async def test_nothing_relevant_gives_not_found(self, fake_calendar):
        search = RecordingSearch(torrents=[{"raw_title": "Unrelated Movie", "hash": "x"}])
        result = await _resolver(fake_calendar, search).resolve("f1catchup:2024:1:fp1", "key")
        assert len(result["streams"]) == 1
        assert "Bahrain Grand Prix - FP1" in result["streams"][0]["title"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stream_id", [
        "f1catchup:2024:9:qualifying",
        "f1catchup:2024:1:sprint",
        "garbage",
        "tvdb:387219:2019:5",
        "tvdb:111:2024:9",
        "tvdb:387219:2024:x",
    ])
    async def test_unknown_ids_resolve_to_nothing(self, fake_calendar, stream_id):
        search = RecordingSearch(torrents=TORRENTS)
        result = await _resolver(fake_calendar, search).resolve(stream_id, "key")
        assert result == {"streams": []}
        assert search.queries == []

    @pytest.mark.asyncio
    async def test_extra_testing_day_does_not_shadow_round_one(self):
        calendar = FakeCalendar({2024: [
            make_testing(days=7),
            make_weekend(1, "Bahrain Grand Prix", "Sakhir", "Bahrain", STANDARD),
        ]})
        search = RecordingSearch()
        await _resolver(calendar, search).resolve("tvdb:387219:2024:6", "key")
        assert search.queries
        assert not any("Testing" in q for q in search.queries)
        assert all(p["episode"] == "6" for p in search.lookups)
