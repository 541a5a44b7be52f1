"""Status and text filtering over in-memory collections."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def _status_tokens(value: Any) -> Tuple[str, ...]:
    if isinstance(value, Enum):
        return (str(value.name), str(value.value))
    if value is None:
        return ()
    return (str(value),)


def _wanted_status(status: Any) -> Optional[str]:
    if isinstance(status, Enum):
        return str(status.value)
    if status is None:
        return None
    text = str(status).strip()
    return text or None


def _raw_field(item: Any, field: str) -> Any:
    return item.get(field) if isinstance(item, dict) else getattr(item, field, None)


def _field_text(item: Any, field: str) -> str:
    value = _raw_field(item, field)
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class FilterSpec:
    """Which attribute holds the status and which ones the search text scans."""

    status_field: str = "status"
    search_fields: Tuple[str, ...] = ()


RESERVATION_FILTER = FilterSpec(
    status_field="status",
    search_fields=("user_name", "user_email", "event_title"),
)
USER_FILTER = FilterSpec(
    status_field="role",
    search_fields=("first_name", "last_name", "email"),
)
EVENT_FILTER = FilterSpec(
    status_field="status",
    search_fields=("title", "location", "category"),
)


def filter_items(
    items: Sequence[T],
    status: Any = None,
    search: str = "",
    spec: FilterSpec = RESERVATION_FILTER,
) -> List[T]:
    """Items matching both the status filter and the search text, in input order.

    An empty status or blank search text disables that half of the filter.
    Enum statuses match either their member name or their wire value; the
    search is a case-insensitive substring match over ``spec.search_fields``,
    spaces in the text included.
    """
    wanted = _wanted_status(status)
    text = search or ""
    needle = text.casefold() if text.strip() else ""

    def matches(item: T) -> bool:
        if wanted is not None:
            if wanted not in _status_tokens(_raw_field(item, spec.status_field)):
                return False
        if needle:
            return any(needle in _field_text(item, field).casefold() for field in spec.search_fields)
        return True

    return [item for item in items if matches(item)]


class FilteredView(Generic[T]):
    """Caches a filtered list; recomputes only when source, status or search change."""

    def __init__(self, spec: FilterSpec, items: Sequence[T] = ()):
        self.spec = spec
        self._items: Tuple[T, ...] = tuple(items)
        self._status: Any = None
        self._search = ""
        self._result: Optional[List[T]] = None
        self.recomputations = 0

    def set_items(self, items: Sequence[T]) -> None:
        self._items = tuple(items)
        self._result = None

    def set_status(self, status: Any) -> None:
        if status != self._status:
            self._status = status
            self._result = None

    def set_search(self, search: str) -> None:
        if search != self._search:
            self._search = search
            self._result = None

    @property
    def items(self) -> List[T]:
        if self._result is None:
            self._result = filter_items(self._items, self._status, self._search, self.spec)
            self.recomputations += 1
        return list(self._result)
