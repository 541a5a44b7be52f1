"""Booking consistency between events and their reservations.

Every operation is pessimistic: the backend acknowledges first, then the
event and reservation are replaced together. The new pair is validated in
full before either is stored, so a failure leaves both untouched.
"""

import asyncio
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError

from eventconnect.errors import (
    AuthError,
    CapacityExhaustedError,
    HttpStatusError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from eventconnect.models.event import Event
from eventconnect.models.reservation import Reservation, ReservationStatus
from eventconnect.services.reservation_service import ReservationService
from eventconnect.session import SessionContext

logger = structlog.get_logger(__name__)

# Backend wording when the last seats went to someone else.
_CAPACITY_MARKERS = ("pas assez de places",)


def is_capacity_rejection(error: HttpStatusError) -> bool:
    """True when a backend rejection means the event ran out of seats."""
    if error.status_code == 409:
        return True
    message = (error.message or "").casefold()
    return any(marker in message for marker in _CAPACITY_MARKERS)


class BookingConsistency:
    """Owns the local event and reservation collections during booking actions."""

    def __init__(self, backend: ReservationService, session: Optional[SessionContext] = None):
        """Initialize booking consistency.

        Args:
            backend: Reservation endpoints of the REST API
            session: Session providing the bearer token for ``create``
        """
        self.backend = backend
        self.session = session
        self._events: Dict[int, Event] = {}
        self._reservations: Dict[int, Reservation] = {}
        self._locks: Dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.logger = logger.bind(component="booking_consistency")

    def load(self, events: Iterable[Event], reservations: Iterable[Reservation] = ()) -> None:
        """Replace the local collections with freshly fetched data."""
        self._events = {event.id: event for event in events}
        self._reservations = {reservation.id: reservation for reservation in reservations}
        self.logger.info(
            "Collections loaded",
            events=len(self._events),
            reservations=len(self._reservations),
        )

    @property
    def events(self) -> List[Event]:
        return list(self._events.values())

    @property
    def reservations(self) -> List[Reservation]:
        return list(self._reservations.values())

    def get_event(self, event_id: int) -> Event:
        try:
            return self._events[event_id]
        except KeyError:
            raise NotFoundError(f"Unknown event {event_id}") from None

    def get_reservation(self, reservation_id: int) -> Reservation:
        try:
            return self._reservations[reservation_id]
        except KeyError:
            raise NotFoundError(f"Unknown reservation {reservation_id}") from None

    async def create(self, event_id: int, user_id: Optional[int], seat_count: int) -> Reservation:
        """Book ``seat_count`` seats of an event.

        Raises:
            ValidationError: seat_count below 1
            CapacityExhaustedError: not enough seats, locally or per the backend
            AuthError: no session token
            TransportError: the request never reached the backend (retryable)
            HttpStatusError: any other backend rejection
        """
        if seat_count < 1:
            raise ValidationError(["seat_count must be at least 1"])
        if self.session is None:
            raise AuthError("Booking requires an authenticated session")
        token = self.session.require_token()

        async with self._locks[event_id]:
            event = self.get_event(event_id)
            self._check_capacity(event, seat_count)

            try:
                created = await self.backend.create(event_id, seat_count, token)
            except HttpStatusError as e:
                if is_capacity_rejection(e):
                    self.logger.warning("Backend rejected booking for capacity", event_id=event_id,
                                        seat_count=seat_count, message=e.message)
                    raise CapacityExhaustedError(e.message, event_id=event_id, requested=seat_count,
                                                 available=event.places_available) from e
                raise

            # load() may have replaced the event while the request was in flight.
            current = self.get_event(event_id)
            reservation = created.model_copy(update={
                "event_id": event_id,
                "user_id": created.user_id if created.user_id is not None else user_id,
                "seat_count": seat_count,
                "event_title": created.event_title if created.event_id else current.title,
            })
            seats = reservation.seat_count if reservation.counts_against_capacity else 0
            if current is event:
                updated_event = self._reserve(current, seats)
            else:
                updated_event = self._reserve_refreshed(current, reservation, seats)
            self._commit(updated_event, reservation)

        self.logger.info("Reservation created", reservation_id=reservation.id, event_id=event_id,
                         seat_count=seat_count, places_available=updated_event.places_available)
        return reservation

    async def confirm(self, reservation_id: int) -> Reservation:
        """Confirm a reservation once the backend acknowledges it; capacity is unchanged."""
        reservation = self.get_reservation(reservation_id)
        if reservation.status is ReservationStatus.CONFIRMED:
            return reservation

        async with self._locks[reservation.event_id]:
            current = self.get_reservation(reservation_id)
            if current.status is ReservationStatus.CONFIRMED:
                return current
            self._check_transition(current, ReservationStatus.CONFIRMED)

            await self.backend.confirm(reservation_id)

            current = self.get_reservation(reservation_id)
            self._check_transition(current, ReservationStatus.CONFIRMED)
            confirmed = current.with_status(ReservationStatus.CONFIRMED)
            self._reservations[reservation_id] = confirmed

        self.logger.info("Reservation confirmed", reservation_id=reservation_id)
        return confirmed

    async def cancel(self, reservation_id: int) -> Reservation:
        """Cancel a reservation and give its seats back to the event.

        Cancelling an already cancelled reservation returns it unchanged.
        """
        reservation = self.get_reservation(reservation_id)
        if reservation.status is ReservationStatus.CANCELLED:
            return reservation

        async with self._locks[reservation.event_id]:
            current = self.get_reservation(reservation_id)
            if current.status is ReservationStatus.CANCELLED:
                return current

            await self.backend.cancel(reservation_id)

            current = self.get_reservation(reservation_id)
            if current.status is ReservationStatus.CANCELLED:
                return current
            cancelled = current.with_status(ReservationStatus.CANCELLED)

            event = self._events.get(current.event_id)
            if event is not None and current.counts_against_capacity:
                event, _ = self._commit(self._release(event, current.seat_count), cancelled)
            else:
                self._reservations[reservation_id] = cancelled

        self.logger.info("Reservation cancelled", reservation_id=reservation_id, event_id=current.event_id,
                         places_available=event.places_available if event is not None else None)
        return cancelled

    def _check_capacity(self, event: Event, seat_count: int) -> None:
        if seat_count > event.places_available:
            self.logger.info("Booking refused locally", event_id=event.id, seat_count=seat_count,
                             places_available=event.places_available)
            raise CapacityExhaustedError(
                f"Not enough places available for event {event.id}: "
                f"{seat_count} requested, {event.places_available} available",
                event_id=event.id,
                requested=seat_count,
                available=event.places_available,
            )

    @staticmethod
    def _check_transition(reservation: Reservation, target: ReservationStatus) -> None:
        if not reservation.status.can_transition_to(target):
            raise InvalidTransitionError(
                f"Reservation {reservation.id} cannot go from {reservation.status.name} to {target.name}"
            )

    def _reserve(self, event: Event, seats: int) -> Event:
        try:
            return event.with_places_reserved(event.places_reserved + seats)
        except PydanticValidationError as e:
            raise CapacityExhaustedError(
                f"Booking {seats} seat(s) would exceed the capacity of event {event.id}",
                event_id=event.id,
                requested=seats,
                available=event.places_available,
            ) from e

    def _reserve_refreshed(self, event: Event, reservation: Reservation, seats: int) -> Event:
        """Debit an event reloaded during the request, unless its counters already hold the booking.

        The backend has accepted the booking at this point, so a debit that no
        longer fits means the reloaded counters include it.
        """
        if seats == 0 or reservation.id in self._reservations:
            return event
        try:
            return self._reserve(event, seats)
        except CapacityExhaustedError:
            self.logger.warning("Reloaded event already counts the accepted booking", event_id=event.id,
                                reservation_id=reservation.id, places_reserved=event.places_reserved)
            return event

    @staticmethod
    def _release(event: Event, seats: int) -> Event:
        return event.with_places_reserved(max(event.places_reserved - seats, 0))

    def _commit(self, event: Event, reservation: Reservation) -> Tuple[Event, Reservation]:
        self._events[event.id] = event
        self._reservations[reservation.id] = reservation
        return event, reservation
