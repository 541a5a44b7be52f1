"""Dashboard loading: the statistic sources and how their results become a snapshot."""

from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

import structlog

from eventconnect.core.aggregator import CycleHandle, FanOutAggregator, LoadCycle
from eventconnect.core.defaulting import SourceQuery
from eventconnect.models.config import EventConnectConfig
from eventconnect.models.dashboard import (
    DashboardSnapshot,
    EventTotals,
    ReservationTotals,
    UserTotals,
)
from eventconnect.services import EventService, HistoryPeriod, ReservationService, UserService

logger = structlog.get_logger(__name__)

EVENT_STATS = "event_stats"
USER_STATS = "user_stats"
RESERVATION_STATS = "reservation_stats"
DAILY_REVENUE = "daily_revenue"
MONTHLY_REVENUE = "monthly_revenue"
ACTIVE_EVENTS = "active_events"
RESERVATIONS = "reservations"


def first_day_months_back(day: date, months: int) -> date:
    """First day of the month ``months - 1`` months before ``day``'s month."""
    year, month = day.year, day.month - (months - 1)
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)


class DashboardLoader:
    """Loads the dashboard through a fan-out aggregator and keeps the published snapshot."""

    def __init__(
        self,
        events: EventService,
        users: UserService,
        reservations: ReservationService,
        config: EventConnectConfig,
        on_publish: Optional[Callable[[DashboardSnapshot, LoadCycle], None]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.events = events
        self.users = users
        self.reservations = reservations
        self.config = config
        self.today = today
        self.aggregator: FanOutAggregator[DashboardSnapshot] = FanOutAggregator(
            self.build_snapshot,
            timeout=config.source_timeout,
            on_publish=on_publish,
        )
        self.logger = logger.bind(component="dashboard_loader")

    @property
    def snapshot(self) -> Optional[DashboardSnapshot]:
        return self.aggregator.snapshot

    def sources(self) -> List[SourceQuery]:
        """The dashboard's independent queries with their zero values."""
        today = self.today()
        daily_start = today - timedelta(days=self.config.daily_history_days - 1)
        monthly_start = first_day_months_back(today, self.config.monthly_history_months)

        return [
            SourceQuery(EVENT_STATS, self.events.stats, EventTotals()),
            SourceQuery(USER_STATS, self.users.stats, UserTotals()),
            SourceQuery(RESERVATION_STATS, self.reservations.stats, ReservationTotals()),
            SourceQuery(
                DAILY_REVENUE,
                lambda: self.reservations.historical_stats(HistoryPeriod.DAILY, daily_start, today),
                [],
            ),
            SourceQuery(
                MONTHLY_REVENUE,
                lambda: self.reservations.historical_stats(HistoryPeriod.MONTHLY, monthly_start, today),
                [],
            ),
            SourceQuery(ACTIVE_EVENTS, self.events.active_events, []),
            SourceQuery(RESERVATIONS, self.reservations.list_reservations, []),
        ]

    def build_snapshot(self, values: Dict[str, Any], cycle: LoadCycle) -> DashboardSnapshot:
        limit = self.config.recent_items
        return DashboardSnapshot(
            events=values[EVENT_STATS],
            users=values[USER_STATS],
            reservations=values[RESERVATION_STATS],
            daily=values[DAILY_REVENUE],
            monthly=values[MONTHLY_REVENUE],
            recent_events=values[ACTIVE_EVENTS][:limit],
            recent_reservations=values[RESERVATIONS][:limit],
            generation=cycle.generation,
            errors=cycle.errors,
        )

    def start(self) -> CycleHandle:
        """Start a load cycle; a retry simply starts a newer one."""
        return self.aggregator.start_cycle(self.sources())

    async def load(self) -> Optional[DashboardSnapshot]:
        """Load and return the newest published snapshot."""
        cycle = await self.start().wait()
        if cycle.errors:
            self.logger.warning("Dashboard loaded with errors", generation=cycle.generation, errors=cycle.errors)
        return self.aggregator.snapshot
