"""
Normalizer package initialization.
"""

from .engine import SessionKindClassifier

__all__ = ["SessionKindClassifier"]
