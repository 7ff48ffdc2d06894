"""
Utility helpers.
"""

from .timezone_utils import parse_iso_datetime, split_utc, format_release_date

__all__ = ["parse_iso_datetime", "split_utc", "format_release_date"]
