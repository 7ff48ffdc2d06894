"""
Pydantic data models for the F1 Catchup schedule, catalog and stream schema.
"""

from typing import Any, ClassVar, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from .enums import SessionKind
from .sessions import is_known_kind


class SessionOccurrence(BaseModel):
    """One addressable session within a schedule entry."""
    kind: str = Field(..., description="Session kind value or testing slot (test1, test2, ...)")
    name: str = Field(..., description="Display name")
    search_term: str = Field(..., description="Colloquial term used in search queries")
    date: Optional[str] = Field(None, description="UTC date, YYYY-MM-DD")
    time: Optional[str] = Field(None, description="Time of day, HH:MM:SS with optional Z or offset")

    @field_validator('kind')
    @classmethod
    def validate_kind(cls, v: str) -> str:
        if not is_known_kind(v):
            raise ValueError(f"Unknown session kind: {v}")
        return v


class ScheduleEntry(BaseModel):
    """One race weekend or pre-season test event."""
    round: int = Field(..., ge=0, description="Championship round; 0 for testing")
    is_testing: bool = Field(False, description="Pre-season testing event")
    name: str = Field(..., description="Event name")
    location: str = Field("", description="Event location (city / circuit area)")
    country: str = Field("", description="Country name")
    circuit: Optional[str] = Field(None, description="Circuit short name")
    sessions: List[SessionOccurrence] = Field(default_factory=list, description="Ordered sessions")

    @model_validator(mode='after')
    def validate_race_session(self) -> 'ScheduleEntry':
        """A race weekend always carries its grand prix."""
        if not self.is_testing and self.get_session(SessionKind.GRAND_PRIX.value) is None:
            raise ValueError(f"Race weekend '{self.name}' has no grand prix session")
        return self

    def get_session(self, kind: str) -> Optional[SessionOccurrence]:
        for session in self.sessions:
            if session.kind == kind:
                return session
        return None


class SessionRef(BaseModel):
    """Stable (year, round, kind) identity of a session."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1950, le=2100)
    round: int = Field(..., ge=0)
    kind: str

    PREFIX: ClassVar[str] = "f1catchup"

    @field_validator('kind')
    @classmethod
    def validate_kind(cls, v: str) -> str:
        if not is_known_kind(v):
            raise ValueError(f"Unknown session kind: {v}")
        return v

    def to_id(self) -> str:
        return f"{self.PREFIX}:{self.year}:{self.round}:{self.kind}"

    @classmethod
    def parse(cls, value: str) -> 'SessionRef':
        """
        Parse an identifier produced by ``to_id``.

        Raises:
            ValueError: If the identifier is malformed
        """
        parts = value.split(":")
        if len(parts) != 4 or parts[0] != cls.PREFIX:
            raise ValueError(f"Not a session identifier: {value}")
        try:
            year, round_number = int(parts[1]), int(parts[2])
        except ValueError:
            raise ValueError(f"Not a session identifier: {value}")
        return cls(year=year, round=round_number, kind=parts[3])


class Episode(BaseModel):
    """Catalog episode, rendered as a Stremio video."""
    id: str = Field(..., description="Session identifier")
    title: str
    season: int = Field(..., description="Season number (the championship year)")
    episode: int = Field(..., ge=1)
    released: str = Field(..., description="ISO-8601 release timestamp")
    overview: str = ""
    thumbnail: Optional[str] = None

    def to_video(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', exclude_none=True)


class Stream(BaseModel):
    """Stremio stream object."""
    name: str
    title: str
    infoHash: Optional[str] = None
    url: Optional[str] = None
    externalUrl: Optional[str] = None
    behaviorHints: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def validate_target(self) -> 'Stream':
        """A stream must point somewhere."""
        if not (self.infoHash or self.url or self.externalUrl):
            raise ValueError("Stream needs infoHash, url or externalUrl")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', exclude_none=True)
