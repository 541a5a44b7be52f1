"""User data models."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from eventconnect.models.wire import build_record, ensure_mapping, first_present


class UserRole(str, Enum):
    """Platform role of a user."""

    USER = "USER"
    ADMIN = "ADMIN"
    ORGANIZER = "ORGANISATEUR"


class User(BaseModel):
    """Platform user; the counters are computed by the backend."""

    id: int
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    role: UserRole = UserRole.USER
    active: bool = True
    reservation_count: int = Field(default=0, ge=0)
    total_spent: float = Field(default=0.0, ge=0)
    registered_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value: Any) -> Any:
        if isinstance(value, str) and value.upper() in UserRole.__members__:
            return UserRole[value.upper()]
        return value

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email

    @classmethod
    def from_api(cls, data: Any) -> "User":
        """Build a user from a backend ``utilisateur`` payload."""
        data = ensure_mapping(data, "user")
        first_name = data.get("prenom")
        if first_name is None and data.get("nom") is None:
            first_name = data.get("nomComplet")

        return build_record(cls, "user", {
            "id": data.get("id"),
            "first_name": first_name,
            "last_name": data.get("nom"),
            "email": data.get("email"),
            "phone": data.get("telephone"),
            "role": data.get("role"),
            "active": data.get("actif"),
            "reservation_count": first_present(data, "nombreReservations", "totalReservations"),
            "total_spent": data.get("totalDepense"),
            "registered_at": data.get("dateInscription"),
        })
