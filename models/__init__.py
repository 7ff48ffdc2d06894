"""
Models package initialization.
"""

from .enums import SessionKind, ContentType, ErrorKind, CallStatus, is_testing_kind
from .sessions import SessionDef, SESSION_DEFS, SESSION_DEFS_BY_KIND
from .schema import (
    SessionOccurrence,
    ScheduleEntry,
    SessionRef,
    Episode,
    Stream,
)

__all__ = [
    "SessionKind",
    "ContentType",
    "ErrorKind",
    "CallStatus",
    "is_testing_kind",
    "SessionDef",
    "SESSION_DEFS",
    "SESSION_DEFS_BY_KIND",
    "SessionOccurrence",
    "ScheduleEntry",
    "SessionRef",
    "Episode",
    "Stream",
]
