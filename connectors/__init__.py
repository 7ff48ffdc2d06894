"""
Connectors package initialization.
"""

from .base import CalendarConnector, RawSeasonPayload
from .openf1 import OpenF1Connector
from .ergast import ErgastConnector
from .calendar import CalendarService

__all__ = [
    "CalendarConnector",
    "RawSeasonPayload",
    "OpenF1Connector",
    "ErgastConnector",
    "CalendarService",
]
