"""Aggregation, booking consistency and filtering core."""

from eventconnect.core.aggregator import CycleHandle, CycleState, FanOutAggregator, LoadCycle
from eventconnect.core.booking import BookingConsistency
from eventconnect.core.defaulting import SourceFailure, SourceQuery, SourceResult, fetch_with_default
from eventconnect.core.filtering import (
    EVENT_FILTER,
    RESERVATION_FILTER,
    USER_FILTER,
    FilteredView,
    FilterSpec,
    filter_items,
)
from eventconnect.core.summary import reservation_summary, user_summary

__all__ = [
    "BookingConsistency",
    "CycleHandle",
    "CycleState",
    "EVENT_FILTER",
    "FanOutAggregator",
    "FilterSpec",
    "FilteredView",
    "LoadCycle",
    "RESERVATION_FILTER",
    "SourceFailure",
    "SourceQuery",
    "SourceResult",
    "USER_FILTER",
    "fetch_with_default",
    "filter_items",
    "reservation_summary",
    "user_summary",
]
