"""Reservation data models and the reservation status machine."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from eventconnect.models.wire import build_record, ensure_mapping, first_present, nested


class ReservationStatus(str, Enum):
    """Reservation status; values are the backend's wire names."""

    PENDING = "EN_ATTENTE"
    CONFIRMED = "CONFIRMEE"
    CANCELLED = "ANNULEE"

    @classmethod
    def parse(cls, value: Any) -> "ReservationStatus":
        """Accept a member, a wire value or a member name."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        for status in cls:
            if text in (status.value, status.name):
                return status
        raise ValueError(f"unknown reservation status: {value!r}")

    @property
    def is_terminal(self) -> bool:
        return self is ReservationStatus.CANCELLED

    def can_transition_to(self, target: "ReservationStatus") -> bool:
        """True when ``target`` is reachable from this status (staying put counts)."""
        return target is self or target in _TRANSITIONS[self]


_TRANSITIONS = {
    ReservationStatus.PENDING: frozenset({ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED}),
    ReservationStatus.CONFIRMED: frozenset({ReservationStatus.CANCELLED}),
    ReservationStatus.CANCELLED: frozenset(),
}


class Reservation(BaseModel):
    """A booking of one or more seats for an event."""

    id: int
    event_id: Optional[int] = None
    user_id: Optional[int] = None
    event_title: str = "Unknown event"
    user_name: str = "Unknown user"
    user_email: Optional[str] = None
    seat_count: int = Field(default=1, ge=1)
    total_price: float = Field(default=0.0, ge=0)
    status: ReservationStatus = ReservationStatus.PENDING
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> ReservationStatus:
        return ReservationStatus.parse(value)

    @property
    def counts_against_capacity(self) -> bool:
        """Seats are held against the event until the reservation is cancelled."""
        return self.status is not ReservationStatus.CANCELLED

    def with_status(self, status: ReservationStatus, at: Optional[datetime] = None) -> "Reservation":
        """Copy moved to ``status``, stamping the matching timestamp."""
        at = at or datetime.now()
        update = {"status": status}
        if status is ReservationStatus.CONFIRMED:
            update["confirmed_at"] = at
        elif status is ReservationStatus.CANCELLED:
            update["cancelled_at"] = at
        return self.model_copy(update=update)

    @classmethod
    def from_api(cls, data: Any) -> "Reservation":
        """Build a reservation from a backend payload (flat or nested form)."""
        data = ensure_mapping(data, "reservation")
        user = nested(data, "utilisateur")
        event = nested(data, "evenement")

        full_name = " ".join(part for part in (user.get("prenom"), user.get("nom")) if part)
        user_name = first_present(data, "utilisateurNom") or user.get("nomComplet") or full_name or user.get("email")

        return build_record(cls, "reservation", {
            "id": data.get("id"),
            "event_id": first_present(data, "evenementId") or event.get("id"),
            "user_id": first_present(data, "utilisateurId") or user.get("id"),
            "event_title": first_present(data, "evenementTitre", "evenementNom") or event.get("titre"),
            "user_name": user_name or None,
            "user_email": first_present(data, "utilisateurEmail") or user.get("email"),
            "seat_count": data.get("nombrePlaces"),
            "total_price": first_present(data, "montantTotal", "prixTotal"),
            "status": data.get("statut"),
            "created_at": data.get("dateReservation"),
            "confirmed_at": data.get("dateConfirmation"),
            "cancelled_at": data.get("dateAnnulation"),
        })
