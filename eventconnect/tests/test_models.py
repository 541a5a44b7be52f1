"""Tests for data models."""

import pytest
from datetime import datetime
from pydantic import ValidationError as PydanticValidationError

from eventconnect.errors import MalformedResponseError
from eventconnect.models.dashboard import EventTotals, PeriodStat, ReservationTotals, UserTotals
from eventconnect.models.event import Event, EventStatus
from eventconnect.models.reservation import Reservation, ReservationStatus
from eventconnect.models.user import User, UserRole


class TestEvent:
    """Test the Event model."""

    def test_from_api(self):
        event = Event.from_api({
            "id": 1,
            "titre": "Conférence Tech 2025",
            "description": "Grande conférence sur les nouvelles technologies",
            "dateDebut": "2025-09-15T09:00:00",
            "dateFin": "2025-09-16T18:00:00",
            "lieu": "Centre de Congrès, Paris",
            "categorie": "CONFERENCE",
            "prix": "150.00",
            "capaciteMax": 500,
            "placesReservees": 234,
            "statut": "ACTIF",
        })

        assert event.title == "Conférence Tech 2025"
        assert event.location == "Centre de Congrès, Paris"
        assert event.price == 150.0
        assert event.capacity_max == 500
        assert event.places_reserved == 234
        assert event.places_available == 266
        assert event.status == EventStatus.ACTIVE
        assert event.start_date == datetime(2025, 9, 15, 9, 0)

    def test_from_api_derives_reserved_places(self):
        event = Event.from_api({"id": 2, "placesMax": 30, "placesDisponibles": 2})

        assert event.places_reserved == 28
        assert event.places_available == 2
        assert event.title == "Untitled event"
        assert event.status == EventStatus.PLANNED

    def test_capacity_invariant(self):
        with pytest.raises(PydanticValidationError):
            Event(id=1, capacity_max=2, places_reserved=3)

    def test_from_api_rejects_inconsistent_capacity(self):
        with pytest.raises(MalformedResponseError):
            Event.from_api({"id": 1, "capaciteMax": 10, "placesReservees": 11})

    def test_from_api_rejects_non_object(self):
        with pytest.raises(MalformedResponseError, match="malformed response"):
            Event.from_api(["not", "an", "event"])

    def test_with_places_reserved(self):
        event = Event(id=1, capacity_max=2)

        updated = event.with_places_reserved(2)

        assert updated.places_available == 0
        assert event.places_reserved == 0
        with pytest.raises(PydanticValidationError):
            event.with_places_reserved(3)
        with pytest.raises(PydanticValidationError):
            event.with_places_reserved(-1)


class TestReservationStatus:
    """Test the reservation status machine."""

    @pytest.mark.parametrize("source,target", [
        (ReservationStatus.PENDING, ReservationStatus.CONFIRMED),
        (ReservationStatus.PENDING, ReservationStatus.CANCELLED),
        (ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED),
    ])
    def test_allowed_transitions(self, source, target):
        assert source.can_transition_to(target)

    @pytest.mark.parametrize("source,target", [
        (ReservationStatus.CONFIRMED, ReservationStatus.PENDING),
        (ReservationStatus.CANCELLED, ReservationStatus.PENDING),
        (ReservationStatus.CANCELLED, ReservationStatus.CONFIRMED),
    ])
    def test_forbidden_transitions(self, source, target):
        assert not source.can_transition_to(target)

    def test_cancelled_is_terminal(self):
        assert ReservationStatus.CANCELLED.is_terminal
        assert not ReservationStatus.PENDING.is_terminal

    def test_parse_accepts_names_and_wire_values(self):
        assert ReservationStatus.parse("CONFIRMEE") is ReservationStatus.CONFIRMED
        assert ReservationStatus.parse("confirmed") is ReservationStatus.CONFIRMED
        assert ReservationStatus.parse(ReservationStatus.PENDING) is ReservationStatus.PENDING
        with pytest.raises(ValueError):
            ReservationStatus.parse("REMBOURSEE")


class TestReservation:
    """Test the Reservation model."""

    def test_from_api_nested(self):
        reservation = Reservation.from_api({
            "id": 10,
            "utilisateur": {"id": 3, "prenom": "Jean", "nom": "Dupont", "email": "jean.dupont@email.com"},
            "evenement": {"id": 1, "titre": "Conférence Tech 2025"},
            "nombrePlaces": 2,
            "montantTotal": 300.0,
            "statut": "CONFIRMEE",
            "dateReservation": "2025-08-15T10:30:00",
        })

        assert reservation.user_id == 3
        assert reservation.user_name == "Jean Dupont"
        assert reservation.user_email == "jean.dupont@email.com"
        assert reservation.event_id == 1
        assert reservation.event_title == "Conférence Tech 2025"
        assert reservation.seat_count == 2
        assert reservation.total_price == 300.0
        assert reservation.status is ReservationStatus.CONFIRMED
        assert reservation.counts_against_capacity

    def test_from_api_flat_with_defaults(self):
        reservation = Reservation.from_api({
            "id": 4,
            "utilisateurNom": "Sophie Leroy",
            "evenementNom": "Conférence Tech 2025",
            "prixTotal": 150.0,
            "statut": "ANNULEE",
        })

        assert reservation.user_name == "Sophie Leroy"
        assert reservation.event_title == "Conférence Tech 2025"
        assert reservation.seat_count == 1
        assert reservation.status is ReservationStatus.CANCELLED
        assert not reservation.counts_against_capacity

    def test_missing_status_defaults_to_pending(self):
        reservation = Reservation.from_api({"id": 5})

        assert reservation.status is ReservationStatus.PENDING
        assert reservation.user_name == "Unknown user"
        assert reservation.event_title == "Unknown event"

    def test_seat_count_must_be_positive(self):
        with pytest.raises(MalformedResponseError):
            Reservation.from_api({"id": 6, "nombrePlaces": 0})

    def test_unknown_status_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            Reservation.from_api({"id": 6, "statut": "PERDUE"})

    def test_with_status_stamps_time(self):
        reservation = Reservation(id=1)
        at = datetime(2025, 8, 20, 12, 0)

        confirmed = reservation.with_status(ReservationStatus.CONFIRMED, at=at)
        cancelled = confirmed.with_status(ReservationStatus.CANCELLED, at=at)

        assert confirmed.confirmed_at == at
        assert cancelled.cancelled_at == at
        assert reservation.status is ReservationStatus.PENDING


class TestUser:
    """Test the User model."""

    def test_from_api(self):
        user = User.from_api({
            "id": 5,
            "nom": "Leroy",
            "prenom": "Sophie",
            "email": "sophie.leroy@email.com",
            "telephone": "+33222333444",
            "actif": False,
            "nombreReservations": 2,
            "totalDepense": 300.0,
            "role": "ORGANISATEUR",
        })

        assert user.full_name == "Sophie Leroy"
        assert user.role is UserRole.ORGANIZER
        assert user.active is False
        assert user.reservation_count == 2
        assert user.total_spent == 300.0

    def test_role_accepts_member_name(self):
        assert User(id=1, role="ORGANIZER").role is UserRole.ORGANIZER

    def test_full_name_falls_back_to_email(self):
        assert User(id=1, email="admin@eventconnect.com").full_name == "admin@eventconnect.com"


class TestStats:
    """Test the statistic payload models."""

    def test_event_totals(self):
        totals = EventTotals.from_api({"total": 12, "futurs": 5, "disponibles": 4})
        assert (totals.total, totals.upcoming, totals.available) == (12, 5, 4)

    def test_user_totals(self):
        assert UserTotals.from_api({"totalUsers": 42}).total == 42

    def test_reservation_totals(self):
        totals = ReservationTotals.from_api({
            "totalReservations": 20,
            "reservationsEnAttente": 3,
            "chiffreAffairesTotal": 1234.5,
        })
        assert (totals.total, totals.pending, totals.revenue) == (20, 3, 1234.5)

    def test_stats_reject_lists(self):
        with pytest.raises(MalformedResponseError):
            ReservationTotals.from_api([{"totalReservations": 1}])

    def test_period_stats(self):
        stats = PeriodStat.list_from_api([
            {"date": "2025-08-01", "totalRevenue": 100.0, "totalReservations": 2},
            {"month": "2025-08", "totalRevenue": 900.0, "totalReservations": 11},
        ])

        assert [s.period for s in stats] == ["2025-08-01", "2025-08"]
        assert stats[1].reservation_count == 11

    def test_period_stats_require_a_list(self):
        with pytest.raises(MalformedResponseError):
            PeriodStat.list_from_api({"date": "2025-08-01"})
