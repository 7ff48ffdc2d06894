"""
Tests for the schedule, identifier and stream models.
"""

import pytest
from pydantic import ValidationError

from models.enums import is_testing_kind
from models.schema import ScheduleEntry, SessionOccurrence, SessionRef, Stream
from models.sessions import is_known_kind


# ===================================================================
# Session identifiers
# ===================================================================


class TestSessionRef:
    def test_round_trip(self):
        for kind in ["fp1", "sprintquali", "grandprix", "test4"]:
            ref = SessionRef(year=2024, round=5, kind=kind)
            assert SessionRef.parse(ref.to_id()) == ref

    def test_format(self):
        assert SessionRef(year=2024, round=5, kind="sprint").to_id() == "f1catchup:2024:5:sprint"

    @pytest.mark.parametrize("value", [
        "f1catchup:2024:5",
        "other:2024:5:sprint",
        "f1catchup:year:5:sprint",
        "f1catchup:2024:x:sprint",
        "",
    ])
    def test_parse_malformed(self, value):
        with pytest.raises(ValueError):
            SessionRef.parse(value)

    def test_parse_unknown_kind(self):
        # pydantic's ValidationError is a ValueError
        with pytest.raises(ValueError):
            SessionRef.parse("f1catchup:2024:5:warmup")

    def test_frozen(self):
        ref = SessionRef(year=2024, round=5, kind="sprint")
        with pytest.raises(ValidationError):
            ref.round = 6


# ===================================================================
# Schedule entries
# ===================================================================


def _session(kind, name="x"):
    return SessionOccurrence(kind=kind, name=name, search_term=name)


class TestScheduleEntry:
    def test_race_weekend_requires_grand_prix(self):
        with pytest.raises(ValidationError):
            ScheduleEntry(round=1, name="Bahrain Grand Prix", sessions=[_session("fp1")])

    def test_testing_needs_no_grand_prix(self):
        entry = ScheduleEntry(round=0, is_testing=True, name="Testing", sessions=[_session("test1")])
        assert entry.get_session("test1") is not None
        assert entry.get_session("grandprix") is None

    def test_negative_round_rejected(self):
        with pytest.raises(ValidationError):
            ScheduleEntry(round=-1, name="x", sessions=[_session("grandprix")])

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            _session("warmup")


class TestSessionKinds:
    def test_testing_kinds(self):
        assert is_testing_kind("test1")
        assert is_testing_kind("test12")
        assert not is_testing_kind("test")
        assert not is_testing_kind("testx")

    def test_known_kinds(self):
        assert is_known_kind("qualifying")
        assert is_known_kind("test3")
        assert not is_known_kind("warmup")


# ===================================================================
# Streams
# ===================================================================


class TestStream:
    def test_requires_target(self):
        with pytest.raises(ValidationError):
            Stream(name="F1 Catchup", title="nothing")

    def test_to_dict_drops_empty_fields(self):
        stream = Stream(name="F1 Catchup", title="t", infoHash="abc")
        assert stream.to_dict() == {"name": "F1 Catchup", "title": "t", "infoHash": "abc"}
