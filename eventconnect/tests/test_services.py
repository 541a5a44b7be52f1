"""Tests for the REST collaborators."""

import json
from datetime import date

import pytest

from conftest import json_response, make_http_client
from eventconnect.errors import MalformedResponseError
from eventconnect.models.reservation import ReservationStatus
from eventconnect.services import EventService, HistoryPeriod, ReservationService, UserService


class TestEventService:
    """Test event endpoints."""

    @pytest.mark.asyncio
    async def test_create_drops_read_only_fields(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return json_response({"id": 9, **seen["body"]}, 201)

        async with make_http_client({("POST", "/api/evenements"): handler}) as client:
            event = await EventService(client).create_event({
                "titre": "Meetup DevOps",
                "lieu": "Lyon",
                "prix": 0,
                "capaciteMax": 30,
                "organisateurId": 2,
            })

        assert "organisateurId" not in seen["body"]
        assert "capaciteMax" not in seen["body"]
        assert event.id == 9
        assert event.title == "Meetup DevOps"

    @pytest.mark.asyncio
    async def test_search_passes_query(self):
        seen = {}

        def handler(request):
            seen["q"] = request.url.params["q"]
            return json_response([{"id": 1, "titre": "Conférence Tech 2025"}])

        async with make_http_client({("GET", "/api/evenements/search"): handler}) as client:
            events = await EventService(client).search_events("tech")

        assert seen["q"] == "tech"
        assert [e.title for e in events] == ["Conférence Tech 2025"]

    @pytest.mark.asyncio
    async def test_active_events_requires_list(self):
        routes = {("GET", "/api/evenements/actifs"): lambda request: json_response({"id": 1})}

        async with make_http_client(routes) as client:
            with pytest.raises(MalformedResponseError):
                await EventService(client).active_events()


class TestReservationService:
    """Test reservation endpoints."""

    @pytest.mark.asyncio
    async def test_create(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["authorization"] = request.headers.get("Authorization")
            return json_response({"id": 30, "evenementId": 1, "nombrePlaces": 2, "statut": "EN_ATTENTE"}, 201)

        async with make_http_client({("POST", "/api/reservations"): handler}) as client:
            reservation = await ReservationService(client).create(1, 2, "jwt")

        assert seen["body"] == {"evenementId": 1, "nombrePlaces": 2}
        assert seen["authorization"] == "Bearer jwt"
        assert reservation.status is ReservationStatus.PENDING
        assert reservation.seat_count == 2

    @pytest.mark.asyncio
    async def test_confirm_and_cancel_paths(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return json_response({"id": 3})

        routes = {
            ("PATCH", "/api/reservations/3/confirmer"): handler,
            ("PATCH", "/api/reservations/3/annuler"): handler,
        }
        async with make_http_client(routes) as client:
            service = ReservationService(client)
            await service.confirm(3)
            await service.cancel(3)

        assert calls == ["/api/reservations/3/confirmer", "/api/reservations/3/annuler"]

    @pytest.mark.asyncio
    async def test_historical_stats_params(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return json_response([])

        async with make_http_client({("GET", "/api/reservations/stats/historique"): handler}) as client:
            stats = await ReservationService(client).historical_stats(
                HistoryPeriod.MONTHLY, date(2024, 4, 1), "2025-03-15"
            )

        assert stats == []
        assert seen == {"period": "MONTHLY", "startDate": "2024-04-01", "endDate": "2025-03-15"}


class TestUserService:
    """Test user endpoints."""

    @pytest.mark.asyncio
    async def test_toggle_status(self):
        routes = {
            ("PATCH", "/api/utilisateurs/5/toggle-status"): lambda request: json_response(
                {"id": 5, "prenom": "Sophie", "nom": "Leroy", "actif": False}
            ),
        }

        async with make_http_client(routes) as client:
            user = await UserService(client).toggle_status(5)

        assert user.active is False
        assert user.full_name == "Sophie Leroy"

    @pytest.mark.asyncio
    async def test_stats(self):
        routes = {("GET", "/api/utilisateurs/stats"): lambda request: json_response({"totalUsers": 8})}

        async with make_http_client(routes) as client:
            assert (await UserService(client).stats()).total == 8
