"""Event data models."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from eventconnect.models.wire import build_record, ensure_mapping, first_present


class EventStatus(str, Enum):
    """Lifecycle status of an event."""

    PLANNED = "PLANIFIE"
    ACTIVE = "ACTIF"
    FULL = "COMPLET"
    PENDING = "EN_ATTENTE"
    CANCELLED = "ANNULE"
    FINISHED = "TERMINE"


class Event(BaseModel):
    """Event with its capacity counters."""

    id: int
    title: str = "Untitled event"
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: str = "Unspecified location"
    category: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    capacity_max: int = Field(default=0, ge=0)
    places_reserved: int = Field(default=0, ge=0)
    status: EventStatus = EventStatus.PLANNED
    revenue: float = 0.0

    @model_validator(mode="after")
    def _check_capacity(self) -> "Event":
        if self.places_reserved > self.capacity_max:
            raise ValueError(
                f"places_reserved ({self.places_reserved}) exceeds capacity_max ({self.capacity_max})"
            )
        return self

    @property
    def places_available(self) -> int:
        """Seats still open for booking."""
        return self.capacity_max - self.places_reserved

    def with_places_reserved(self, places_reserved: int) -> "Event":
        """Validated copy with a new reserved-seat count.

        Raises:
            pydantic.ValidationError: if the count breaks the capacity bounds
        """
        return Event.model_validate({**self.model_dump(), "places_reserved": places_reserved})

    @classmethod
    def from_api(cls, data: Any) -> "Event":
        """Build an event from a backend ``evenement`` payload."""
        data = ensure_mapping(data, "event")
        capacity = first_present(data, "capaciteMax", "placesMax", "nombrePlaces")
        reserved = data.get("placesReservees")
        available = data.get("placesDisponibles")
        if reserved is None and capacity is not None and available is not None:
            reserved = capacity - available

        return build_record(cls, "event", {
            "id": data.get("id"),
            "title": data.get("titre") or None,
            "description": data.get("description"),
            "start_date": data.get("dateDebut"),
            "end_date": data.get("dateFin"),
            "location": data.get("lieu") or None,
            "category": data.get("categorie"),
            "price": first_present(data, "prix", "prixPlace"),
            "capacity_max": capacity,
            "places_reserved": reserved,
            "status": data.get("statut"),
            "revenue": data.get("chiffreAffaires"),
        })
