"""Main entry point for the EventConnect admin client."""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import structlog

from eventconnect.core.booking import BookingConsistency
from eventconnect.core.filtering import RESERVATION_FILTER, USER_FILTER, filter_items
from eventconnect.core.summary import reservation_summary, user_summary
from eventconnect.dashboard import DashboardLoader
from eventconnect.errors import AuthError, EventConnectError
from eventconnect.http_client import EventConnectHTTPClient
from eventconnect.models.config import EventConnectConfig
from eventconnect.models.dashboard import DashboardSnapshot
from eventconnect.services import EventService, ReservationService, UserService
from eventconnect.session import SessionStore

logger = structlog.get_logger(__name__)


def configure_logging(level_name: str) -> None:
    """Route stdlib and structlog output at the configured level."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    # Reduce verbosity for third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="eventconnect", description="EventConnect administration client")
    parser.add_argument("--output", choices=["text", "json"], default="text", help="Output format")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("dashboard", help="Load the dashboard statistics")

    reservations = commands.add_parser("reservations", help="List reservations")
    reservations.add_argument("--status", default="", help="CONFIRMED, PENDING or CANCELLED")
    reservations.add_argument("--search", default="", help="Text matched against user and event")

    users = commands.add_parser("users", help="List users")
    users.add_argument("--role", default="", help="USER, ADMIN or ORGANIZER")
    users.add_argument("--search", default="", help="Text matched against name and email")

    reserve = commands.add_parser("reserve", help="Book seats for an event")
    reserve.add_argument("event_id", type=int)
    reserve.add_argument("--seats", type=int, default=1)

    confirm = commands.add_parser("confirm", help="Confirm a reservation")
    confirm.add_argument("reservation_id", type=int)

    cancel = commands.add_parser("cancel", help="Cancel a reservation")
    cancel.add_argument("reservation_id", type=int)

    toggle = commands.add_parser("toggle-user", help="Activate or deactivate a user")
    toggle.add_argument("user_id", type=int)

    commands.add_parser("logout", help="Forget the stored session")
    return parser


def format_dashboard(snapshot: DashboardSnapshot) -> str:
    lines = [
        f"Events: {snapshot.events.total} total, {snapshot.events.upcoming} upcoming, "
        f"{snapshot.events.available} with places left",
        f"Users: {snapshot.users.total}",
        f"Reservations: {snapshot.reservations.total} total, {snapshot.reservations.pending} pending, "
        f"revenue {snapshot.reservations.revenue:.2f}",
    ]
    for label, series in (("Daily", snapshot.daily), ("Monthly", snapshot.monthly)):
        if series:
            lines.append(f"{label} revenue:")
            lines.extend(f"  {point.period}: {point.revenue:.2f} ({point.reservation_count})" for point in series)
    if snapshot.recent_events:
        lines.append("Recent events:")
        lines.extend(
            f"  {event.title} ({event.places_reserved}/{event.capacity_max})" for event in snapshot.recent_events
        )
    if snapshot.recent_reservations:
        lines.append("Recent reservations:")
        lines.extend(
            f"  {r.user_name} - {r.event_title} [{r.status.name}]" for r in snapshot.recent_reservations
        )
    if snapshot.errors:
        lines.append("Some sections could not be loaded:")
        lines.extend(f"  ! {error}" for error in snapshot.errors)
    return "\n".join(lines)


def emit(args: argparse.Namespace, payload, text: str) -> None:
    if args.output == "json":
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


async def run(args: argparse.Namespace, config: EventConnectConfig) -> int:
    store = SessionStore(config)
    if args.command == "logout":
        store.clear()
        print("Logged out")
        return 0

    async with EventConnectHTTPClient(config.api_base_url, timeout=config.request_timeout) as client:
        events = EventService(client)
        users = UserService(client)
        reservations = ReservationService(client)

        if args.command == "dashboard":
            snapshot = await DashboardLoader(events, users, reservations, config).load()
            emit(args, snapshot.model_dump(mode="json"), format_dashboard(snapshot))
            return 1 if snapshot.errors else 0

        if args.command == "reservations":
            items = filter_items(await reservations.list_reservations(), args.status, args.search, RESERVATION_FILTER)
            summary = reservation_summary(items)
            emit(
                args,
                {"reservations": [r.model_dump(mode="json") for r in items], "summary": summary.model_dump()},
                "\n".join(
                    [f"#{r.id} {r.user_name} - {r.event_title} x{r.seat_count} "
                     f"{r.total_price:.2f} [{r.status.name}]" for r in items]
                    + [f"{summary.total} reservation(s), {summary.confirmed} confirmed, "
                       f"revenue {summary.revenue:.2f}"]
                ),
            )
            return 0

        if args.command == "users":
            items = filter_items(await users.list_users(), args.role, args.search, USER_FILTER)
            summary = user_summary(items)
            emit(
                args,
                {"users": [u.model_dump(mode="json") for u in items], "summary": summary.model_dump()},
                "\n".join(
                    [f"#{u.id} {u.full_name} <{u.email}> {u.role.name} "
                     f"{'active' if u.active else 'inactive'}" for u in items]
                    + [f"{summary.total} user(s), {summary.active} active"]
                ),
            )
            return 0

        if args.command == "toggle-user":
            user = await users.toggle_status(args.user_id)
            emit(args, user.model_dump(mode="json"), f"{user.full_name} is now {'active' if user.active else 'inactive'}")
            return 0

        session = store.load()
        if session is None:
            raise AuthError("No stored session; log in first")

        booking = BookingConsistency(reservations, session)
        booking.load(await events.active_events(), await reservations.list_reservations())

        if args.command == "reserve":
            reservation = await booking.create(args.event_id, session.user_id, args.seats)
        elif args.command == "confirm":
            reservation = await booking.confirm(args.reservation_id)
        else:
            reservation = await booking.cancel(args.reservation_id)

        emit(args, reservation.model_dump(mode="json"),
             f"Reservation #{reservation.id}: {reservation.status.name} ({reservation.seat_count} place(s))")
        return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Run the EventConnect client."""
    config = EventConnectConfig()
    configure_logging(config.log_level)
    args = build_parser().parse_args(argv)

    try:
        sys.exit(asyncio.run(run(args, config)))
    except EventConnectError as e:
        logger.error("Command failed", command=args.command, error=e.message, retryable=e.retryable)
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
