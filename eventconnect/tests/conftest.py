"""Pytest configuration for EventConnect tests."""

import json
from typing import Any, Callable, Dict, Tuple

import httpx
import pytest

from eventconnect.http_client import EventConnectHTTPClient
from eventconnect.models.config import EventConnectConfig
from eventconnect.models.event import Event
from eventconnect.models.reservation import Reservation, ReservationStatus
from eventconnect.session import SessionContext

API_BASE = "http://testserver/api"

Route = Tuple[str, str]


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers={"Content-Type": "application/json"})


def make_http_client(routes: Dict[Route, Callable[[httpx.Request], httpx.Response]]) -> EventConnectHTTPClient:
    """HTTP client whose requests are answered by ``routes[(method, path)]``; unknown routes get a 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get((request.method, request.url.path))
        if route is None:
            return json_response({"message": f"No route for {request.method} {request.url.path}"}, 404)
        return route(request)

    return EventConnectHTTPClient(API_BASE, transport=httpx.MockTransport(handler))


@pytest.fixture
def config(tmp_path):
    """Create an EventConnectConfig for testing."""
    return EventConnectConfig(
        api_base_url=API_BASE,
        session_path=str(tmp_path / "session.db"),
        source_timeout=1.0,
    )


@pytest.fixture
def session():
    return SessionContext(token="test-token", user_id=7, email="admin@eventconnect.com")


@pytest.fixture
def make_event():
    def _make(event_id: int = 1, capacity_max: int = 2, places_reserved: int = 0, **kwargs) -> Event:
        return Event(
            id=event_id,
            title=kwargs.pop("title", f"Event {event_id}"),
            capacity_max=capacity_max,
            places_reserved=places_reserved,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_reservation():
    def _make(reservation_id: int, event_id: int = 1, seat_count: int = 1,
              status: ReservationStatus = ReservationStatus.PENDING, **kwargs) -> Reservation:
        return Reservation(
            id=reservation_id,
            event_id=event_id,
            seat_count=seat_count,
            status=status,
            **kwargs,
        )
    return _make


@pytest.fixture
def sample_reservations(make_reservation):
    """Four reservations with statuses CONFIRMED, PENDING, CONFIRMED, CANCELLED."""
    return [
        make_reservation(1, user_name="Jean Dupont", user_email="jean.dupont@email.com",
                         event_title="Conférence Tech 2025", seat_count=2, total_price=300.0,
                         status=ReservationStatus.CONFIRMED),
        make_reservation(2, user_name="Marie Martin", user_email="marie.martin@email.com",
                         event_title="Workshop Angular", total_price=200.0,
                         status=ReservationStatus.PENDING),
        make_reservation(3, user_name="Pierre Durand", user_email="pierre.durand@email.com",
                         event_title="Meetup DevOps", total_price=0.0,
                         status=ReservationStatus.CONFIRMED),
        make_reservation(4, user_name="Sophie Leroy", user_email="sophie.leroy@email.com",
                         event_title="Conférence Tech 2025", total_price=150.0,
                         status=ReservationStatus.CANCELLED),
    ]
