"""Client for the ``/evenements`` endpoints."""

from typing import Any, Dict, List

import structlog

from eventconnect.http_client import EventConnectHTTPClient
from eventconnect.models.dashboard import EventTotals
from eventconnect.models.event import Event
from eventconnect.models.reservation import Reservation
from eventconnect.models.user import User
from eventconnect.models.wire import ensure_list

logger = structlog.get_logger(__name__)

# Fields the backend derives itself and rejects on write.
_READ_ONLY_FIELDS = ("organisateurId", "capaciteMax")


def _writable(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if key not in _READ_ONLY_FIELDS}


class EventService:
    """Typed access to events."""

    path = "/evenements"

    def __init__(self, client: EventConnectHTTPClient):
        self.client = client
        self.logger = logger.bind(component="event_service")

    async def stats(self) -> EventTotals:
        return EventTotals.from_api(await self.client.get(f"{self.path}/stats"))

    async def active_events(self) -> List[Event]:
        data = await self.client.get(f"{self.path}/actifs")
        return [Event.from_api(item) for item in ensure_list(data, "events")]

    async def search_events(self, query: str) -> List[Event]:
        data = await self.client.get(f"{self.path}/search", params={"q": query})
        return [Event.from_api(item) for item in ensure_list(data, "events")]

    async def get_event(self, event_id: int) -> Event:
        return Event.from_api(await self.client.get(f"{self.path}/{event_id}"))

    async def create_event(self, payload: Dict[str, Any]) -> Event:
        self.logger.info("Creating event", title=payload.get("titre"))
        return Event.from_api(await self.client.post(self.path, json=_writable(payload)))

    async def update_event(self, event_id: int, payload: Dict[str, Any]) -> Event:
        self.logger.info("Updating event", event_id=event_id)
        return Event.from_api(await self.client.put(f"{self.path}/{event_id}", json=_writable(payload)))

    async def delete_event(self, event_id: int) -> None:
        self.logger.info("Deleting event", event_id=event_id)
        await self.client.delete(f"{self.path}/{event_id}")

    async def organizers(self) -> List[User]:
        """Users selectable as event organizers."""
        data = await self.client.get("/utilisateurs")
        return [User.from_api(item) for item in ensure_list(data, "users")]

    async def event_reservations(self, event_id: int) -> List[Reservation]:
        data = await self.client.get("/reservations", params={"evenementId": event_id})
        return [Reservation.from_api(item) for item in ensure_list(data, "reservations")]
