"""
Relevance Scoring — classify release titles against session-specific rules.

Every session kind owns a rule:
  - must groups:   title must contain a keyword from one of the groups
  - not keywords:  presence means the title covers a different session
  - match guard:   kind-specific check that rejects over-eager matches

Decision, in priority order:
  wrong session (and not a full pack)  ->   0, skip
  must match                           -> 100
  full weekend pack                    ->  30
  franchise mention only               ->  10
  anything else                        ->   0, skip
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from models.enums import SessionKind, is_testing_kind

from .client import SearchCandidate

SCORE_MATCH = 100
SCORE_FULL_PACK = 30
SCORE_FRANCHISE = 10
SCORE_SKIP = 0

FULL_PACK_KEYWORDS = ("weekend", "complete", "all sessions")
FRANCHISE_KEYWORDS = ("formula 1", "formula one", "formula1", "f1")

# Every marker that names a session other than the race itself
SESSION_MARKERS = (
    "practice", "fp1", "fp2", "fp3",
    "qualifying", "quali", "sprint", "shootout",
)


@dataclass(frozen=True)
class ScoreResult:
    """Relevance of one title. A score of 0 always means skip."""

    score: int
    skip: bool

    @classmethod
    def of(cls, score: int) -> "ScoreResult":
        return cls(score=score, skip=score == SCORE_SKIP)


# ------------------------------------------------------------------
# Keyword matching
# ------------------------------------------------------------------

def normalize_title(title: str) -> str:
    """Lowercase, turn ``.`` / ``_`` separators into spaces, collapse whitespace."""
    text = re.sub(r"[._]+", " ", (title or "").lower())
    return " ".join(text.split())


def find_keyword(text: str, keyword: str) -> List[int]:
    """Start offsets of ``keyword`` in ``text``, anchored at a word start."""
    pattern = r"(?<![a-z0-9])" + re.escape(keyword)
    return [m.start() for m in re.finditer(pattern, text)]


def contains_any(text: str, keywords) -> bool:
    return any(find_keyword(text, kw) for kw in keywords)


# ------------------------------------------------------------------
# Match guards
# ------------------------------------------------------------------

# A guard receives (text, keyword, offset) for one must-keyword hit and
# returns True if that hit is valid for the session.
MatchGuard = Callable[[str, str, int], bool]


def _sprint_guard(text: str, keyword: str, offset: int) -> bool:
    """A bare "sprint" followed by quali/shootout is sprint qualifying."""
    rest = text[offset + len(keyword):].lstrip()
    return not (rest.startswith("quali") or rest.startswith("shootout"))


def _qualifying_guard(text: str, keyword: str, offset: int) -> bool:
    """A "quali" preceded by "sprint" is sprint qualifying."""
    preceding = text[max(0, offset - 8):offset].rstrip()
    return not preceding.endswith("sprint")


def _race_guard(text: str, keyword: str, offset: int) -> bool:
    """
    Race titles routinely carry "Grand Prix" as the event name, so a race
    hit only counts when no other session marker is present.
    """
    return not contains_any(text, SESSION_MARKERS)


def _always(text: str, keyword: str, offset: int) -> bool:
    return True


# ------------------------------------------------------------------
# Rule table
# ------------------------------------------------------------------

@dataclass(frozen=True)
class SessionRule:
    """Keyword rule for one session kind."""

    must_groups: Tuple[Tuple[str, ...], ...]
    not_keywords: Tuple[str, ...] = ()
    guard: MatchGuard = _always
    # A must-keyword hit rejected by the guard signals a different session
    rejected_hit_is_wrong_session: bool = False


SESSION_RULES: Dict[str, SessionRule] = {
    SessionKind.FP1.value: SessionRule(
        must_groups=(("fp1",), ("practice 1", "free practice 1", "practice one")),
        not_keywords=("fp2", "fp3", "practice 2", "practice 3", "practice two", "practice three",
                      "qualifying", "quali", "sprint", "shootout", "race"),
    ),
    SessionKind.FP2.value: SessionRule(
        must_groups=(("fp2",), ("practice 2", "free practice 2", "practice two")),
        not_keywords=("fp1", "fp3", "practice 1", "practice 3", "practice one", "practice three",
                      "qualifying", "quali", "sprint", "shootout", "race"),
    ),
    SessionKind.FP3.value: SessionRule(
        must_groups=(("fp3",), ("practice 3", "free practice 3", "practice three")),
        not_keywords=("fp1", "fp2", "practice 1", "practice 2", "practice one", "practice two",
                      "qualifying", "quali", "sprint", "shootout", "race"),
    ),
    SessionKind.SPRINT_QUALIFYING.value: SessionRule(
        must_groups=(("sprint qualifying", "sprint quali"), ("sprint shootout", "shootout")),
        not_keywords=("practice", "fp1", "fp2", "fp3", "sprint race"),
    ),
    SessionKind.SPRINT.value: SessionRule(
        must_groups=(("sprint",),),
        not_keywords=("practice", "fp1", "fp2", "fp3", "qualifying", "shootout"),
        guard=_sprint_guard,
        rejected_hit_is_wrong_session=True,
    ),
    SessionKind.QUALIFYING.value: SessionRule(
        must_groups=(("qualifying", "quali"),),
        not_keywords=("practice", "fp1", "fp2", "fp3", "sprint", "shootout"),
        guard=_qualifying_guard,
    ),
    SessionKind.GRAND_PRIX.value: SessionRule(
        must_groups=(("race",), ("grand prix", "gp")),
        not_keywords=SESSION_MARKERS,
        guard=_race_guard,
        rejected_hit_is_wrong_session=True,
    ),
}

TESTING_RULE = SessionRule(
    must_groups=(("testing", "test"),),
    not_keywords=("fp1", "fp2", "fp3", "qualifying", "quali", "sprint", "shootout"),
)


def rule_for(kind: str) -> Optional[SessionRule]:
    if is_testing_kind(kind):
        return TESTING_RULE
    return SESSION_RULES.get(kind)


# ------------------------------------------------------------------
# Scorer
# ------------------------------------------------------------------

def score(title: str, kind: str) -> ScoreResult:
    """
    Score a release title for a session kind. Pure function.

    Args:
        title: Raw title as reported by the search backend
        kind: Session kind value (``fp1`` ... ``grandprix``) or testing slot

    Returns:
        ScoreResult with score 0..100; ``skip`` is True exactly when score is 0
    """
    rule = rule_for(kind)
    if rule is None:
        return ScoreResult.of(SCORE_SKIP)

    text = normalize_title(title)

    must_match = False
    rejected_hit = False
    for group in rule.must_groups:
        for keyword in group:
            for offset in find_keyword(text, keyword):
                if rule.guard(text, keyword, offset):
                    must_match = True
                else:
                    rejected_hit = True

    wrong_session = contains_any(text, rule.not_keywords) or (
        rule.rejected_hit_is_wrong_session and rejected_hit and not must_match
    )
    full_pack = contains_any(text, FULL_PACK_KEYWORDS)

    if wrong_session and not full_pack:
        return ScoreResult.of(SCORE_SKIP)
    if must_match and not wrong_session:
        return ScoreResult.of(SCORE_MATCH)
    if full_pack:
        return ScoreResult.of(SCORE_FULL_PACK)
    if contains_any(text, FRANCHISE_KEYWORDS):
        return ScoreResult.of(SCORE_FRANCHISE)
    return ScoreResult.of(SCORE_SKIP)


class ResultRanker:
    """Applies the scorer to aggregated candidates."""

    def __init__(self, kind: str):
        self._kind = kind

    def rank(self, candidates: List[SearchCandidate]) -> List[SearchCandidate]:
        """
        Score free-text candidates in place and drop skips.

        Lookup candidates keep their preset relevance.
        """
        kept: List[SearchCandidate] = []
        for candidate in candidates:
            if candidate.from_lookup:
                kept.append(candidate)
                continue
            result = score(candidate.title, self._kind)
            if result.skip:
                continue
            candidate.relevance_score = result.score
            kept.append(candidate)
        return kept
