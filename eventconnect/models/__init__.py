"""Data models."""

from eventconnect.models.config import EventConnectConfig
from eventconnect.models.dashboard import (
    DashboardSnapshot,
    EventTotals,
    PeriodStat,
    ReservationSummary,
    ReservationTotals,
    UserSummary,
    UserTotals,
)
from eventconnect.models.event import Event, EventStatus
from eventconnect.models.reservation import Reservation, ReservationStatus
from eventconnect.models.user import User, UserRole

__all__ = [
    "DashboardSnapshot",
    "Event",
    "EventConnectConfig",
    "EventStatus",
    "EventTotals",
    "PeriodStat",
    "Reservation",
    "ReservationStatus",
    "ReservationSummary",
    "ReservationTotals",
    "User",
    "UserRole",
    "UserSummary",
    "UserTotals",
]
