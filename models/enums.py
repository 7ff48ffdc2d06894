"""
Enumerations for F1 Catchup data models.
"""

from enum import Enum


class SessionKind(str, Enum):
    """Race-weekend session kind. Values double as identifier segments."""
    FP1 = "fp1"
    FP2 = "fp2"
    FP3 = "fp3"
    SPRINT_QUALIFYING = "sprintquali"
    SPRINT = "sprint"
    QUALIFYING = "qualifying"
    GRAND_PRIX = "grandprix"


class ContentType(str, Enum):
    """Content-type partition of the search provider."""
    TORRENT = "torrent"
    USENET = "usenet"


class ErrorKind(str, Enum):
    """Failure taxonomy surfaced by the stream pipeline."""
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    NO_CREDENTIAL = "no_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    INSUFFICIENT_ENTITLEMENT = "insufficient_entitlement"
    NO_RESULTS = "no_results"


class CallStatus(str, Enum):
    """Outcome of a single provider call."""
    OK = "OK"
    AUTH_FAILED = "AUTH_FAILED"
    ENTITLEMENT = "ENTITLEMENT"
    FAILED = "FAILED"


TESTING_PREFIX = "test"


def is_testing_kind(kind: str) -> bool:
    """True for numbered testing slots such as ``test1``."""
    return kind.startswith(TESTING_PREFIX) and kind[len(TESTING_PREFIX):].isdigit()
