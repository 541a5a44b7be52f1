"""Client for the ``/reservations`` endpoints."""

from datetime import date
from enum import Enum
from typing import Any, List, Union

import structlog

from eventconnect.http_client import EventConnectHTTPClient
from eventconnect.models.dashboard import PeriodStat, ReservationTotals
from eventconnect.models.reservation import Reservation
from eventconnect.models.wire import ensure_list

logger = structlog.get_logger(__name__)


class HistoryPeriod(str, Enum):
    """Granularity of the historical revenue series."""

    DAILY = "DAILY"
    MONTHLY = "MONTHLY"


def _iso(value: Union[date, str]) -> str:
    return value.isoformat() if isinstance(value, date) else value


class ReservationService:
    """Typed access to reservations."""

    path = "/reservations"

    def __init__(self, client: EventConnectHTTPClient):
        self.client = client
        self.logger = logger.bind(component="reservation_service")

    async def list_reservations(self) -> List[Reservation]:
        data = await self.client.get(self.path)
        return [Reservation.from_api(item) for item in ensure_list(data, "reservations")]

    async def stats(self) -> ReservationTotals:
        return ReservationTotals.from_api(await self.client.get(f"{self.path}/stats"))

    async def historical_stats(
        self,
        period: HistoryPeriod,
        start_date: Union[date, str],
        end_date: Union[date, str],
    ) -> List[PeriodStat]:
        data = await self.client.get(
            f"{self.path}/stats/historique",
            params={
                "period": HistoryPeriod(period).value,
                "startDate": _iso(start_date),
                "endDate": _iso(end_date),
            },
        )
        return PeriodStat.list_from_api(data)

    async def create(self, event_id: int, seat_count: int, token: str) -> Reservation:
        """POST a new reservation on behalf of the session's user."""
        payload = {"evenementId": event_id, "nombrePlaces": seat_count}
        data: Any = await self.client.post(self.path, json=payload, token=token)
        return Reservation.from_api(data)

    async def confirm(self, reservation_id: int) -> Any:
        return await self.client.patch(f"{self.path}/{reservation_id}/confirmer", json={})

    async def cancel(self, reservation_id: int) -> Any:
        return await self.client.patch(f"{self.path}/{reservation_id}/annuler", json={})
