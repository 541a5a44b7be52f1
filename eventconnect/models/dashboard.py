"""Dashboard aggregate models."""

from datetime import datetime
from typing import Any, List

from pydantic import BaseModel, Field

from eventconnect.models.event import Event
from eventconnect.models.reservation import Reservation
from eventconnect.models.wire import build_record, ensure_list, ensure_mapping, first_present


class EventTotals(BaseModel):
    """Event counters from ``/evenements/stats``."""

    total: int = 0
    upcoming: int = 0
    available: int = 0

    @classmethod
    def from_api(cls, data: Any) -> "EventTotals":
        data = ensure_mapping(data, "event stats")
        return build_record(cls, "event stats", {
            "total": first_present(data, "total", "totalEvents"),
            "upcoming": first_present(data, "futurs", "activeEvents"),
            "available": data.get("disponibles"),
        })


class UserTotals(BaseModel):
    """User counters from ``/utilisateurs/stats``."""

    total: int = 0

    @classmethod
    def from_api(cls, data: Any) -> "UserTotals":
        data = ensure_mapping(data, "user stats")
        return build_record(cls, "user stats", {"total": data.get("totalUsers")})


class ReservationTotals(BaseModel):
    """Reservation counters and revenue from ``/reservations/stats``."""

    total: int = 0
    pending: int = 0
    revenue: float = 0.0

    @classmethod
    def from_api(cls, data: Any) -> "ReservationTotals":
        data = ensure_mapping(data, "reservation stats")
        return build_record(cls, "reservation stats", {
            "total": data.get("totalReservations"),
            "pending": first_present(data, "reservationsEnAttente", "pendingReservations"),
            "revenue": first_present(data, "chiffreAffairesTotal", "totalRevenue"),
        })


class PeriodStat(BaseModel):
    """One point of the revenue time series."""

    period: str
    revenue: float = 0.0
    reservation_count: int = 0

    @classmethod
    def from_api(cls, data: Any) -> "PeriodStat":
        data = ensure_mapping(data, "historical stat")
        period = first_present(data, "date", "month")
        return build_record(cls, "historical stat", {
            "period": str(period) if period is not None else None,
            "revenue": data.get("totalRevenue"),
            "reservation_count": data.get("totalReservations"),
        })

    @classmethod
    def list_from_api(cls, data: Any) -> List["PeriodStat"]:
        return [cls.from_api(item) for item in ensure_list(data, "historical stats")]


class DashboardSnapshot(BaseModel):
    """Everything the dashboard shows, rebuilt on every load cycle."""

    events: EventTotals = Field(default_factory=EventTotals)
    users: UserTotals = Field(default_factory=UserTotals)
    reservations: ReservationTotals = Field(default_factory=ReservationTotals)
    daily: List[PeriodStat] = Field(default_factory=list)
    monthly: List[PeriodStat] = Field(default_factory=list)
    recent_events: List[Event] = Field(default_factory=list)
    recent_reservations: List[Reservation] = Field(default_factory=list)
    generation: int = 0
    errors: List[str] = Field(default_factory=list)
    loaded_at: datetime = Field(default_factory=datetime.now)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class ReservationSummary(BaseModel):
    """Per-status counts over a reservation list; revenue counts confirmed ones only."""

    total: int = 0
    confirmed: int = 0
    pending: int = 0
    cancelled: int = 0
    revenue: float = 0.0


class UserSummary(BaseModel):
    """Counts over a user list."""

    total: int = 0
    active: int = 0
    inactive: int = 0
    admins: int = 0
    revenue: float = 0.0
