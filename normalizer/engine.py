"""
Session name classification for the OpenF1 feed.
"""

from typing import List, Optional, Tuple

from models.enums import SessionKind


class SessionKindClassifier:
    """Classifies upstream session names into the closed SessionKind set."""

    # (match mode, text, kind). Order matters: sprint qualifying must be
    # tried before the bare "sprint" and "qualifying" equality checks.
    RULES: List[Tuple[str, str, SessionKind]] = [
        ("contains", "sprint qualifying", SessionKind.SPRINT_QUALIFYING),
        ("contains", "sprint shootout", SessionKind.SPRINT_QUALIFYING),
        ("contains", "practice 1", SessionKind.FP1),
        ("contains", "practice 2", SessionKind.FP2),
        ("contains", "practice 3", SessionKind.FP3),
        ("equals", "qualifying", SessionKind.QUALIFYING),
        ("equals", "sprint", SessionKind.SPRINT),
        ("equals", "race", SessionKind.GRAND_PRIX),
    ]

    @classmethod
    def classify(cls, session_name: Optional[str]) -> Optional[SessionKind]:
        """
        Classify a session name.

        Args:
            session_name: Upstream session name, e.g. "Practice 1"

        Returns:
            The matching SessionKind, or None for sessions we do not surface
        """
        if not session_name:
            return None
        normalized = " ".join(session_name.lower().split())

        for mode, text, kind in cls.RULES:
            if mode == "contains" and text in normalized:
                return kind
            if mode == "equals" and normalized == text:
                return kind

        return None
