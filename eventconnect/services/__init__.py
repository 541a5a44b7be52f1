"""REST collaborators used by the core."""

from eventconnect.services.event_service import EventService
from eventconnect.services.reservation_service import HistoryPeriod, ReservationService
from eventconnect.services.user_service import UserService

__all__ = ["EventService", "HistoryPeriod", "ReservationService", "UserService"]
