"""Counts and revenue over in-memory collections."""

from typing import Iterable

from eventconnect.models.dashboard import ReservationSummary, UserSummary
from eventconnect.models.reservation import Reservation, ReservationStatus
from eventconnect.models.user import User, UserRole


def reservation_summary(reservations: Iterable[Reservation]) -> ReservationSummary:
    """Per-status counts; revenue sums confirmed reservations only."""
    summary = ReservationSummary()
    for reservation in reservations:
        summary.total += 1
        if reservation.status is ReservationStatus.CONFIRMED:
            summary.confirmed += 1
            summary.revenue += reservation.total_price
        elif reservation.status is ReservationStatus.PENDING:
            summary.pending += 1
        else:
            summary.cancelled += 1
    return summary


def user_summary(users: Iterable[User]) -> UserSummary:
    summary = UserSummary()
    for user in users:
        summary.total += 1
        if user.active:
            summary.active += 1
        else:
            summary.inactive += 1
        if user.role is UserRole.ADMIN:
            summary.admins += 1
        summary.revenue += user.total_spent
    return summary
