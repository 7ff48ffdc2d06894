"""
Catalog package: episode numbering and season episode lists.
"""

from .numbering import (
    NumberingPolicy,
    SequentialNumbering,
    FixedSlotNumbering,
    get_numbering_policy,
    TVDB_SERIES_ID,
)
from .episodes import SessionCatalogBuilder, get_flag_url

__all__ = [
    "NumberingPolicy",
    "SequentialNumbering",
    "FixedSlotNumbering",
    "get_numbering_policy",
    "TVDB_SERIES_ID",
    "SessionCatalogBuilder",
    "get_flag_url",
]
