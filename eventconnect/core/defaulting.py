"""Per-source fetch isolation: a failed fetch yields its declared default instead of raising."""

import asyncio
import copy
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

import structlog
from pydantic import ValidationError as PydanticValidationError

from eventconnect.errors import EventConnectError, HttpStatusError, MalformedResponseError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class SourceQuery(Generic[T]):
    """One independent fetch of a fan-out load.

    Attributes:
        name: Source name used in failure reasons and logs
        fetch: Zero-argument coroutine factory producing the value
        default: Value used when the fetch fails (deep-copied on use)
        parse: Optional shape check applied to the raw value; any error it
            raises marks the source malformed
        timeout: Per-source timeout overriding the aggregator default
    """

    name: str
    fetch: Callable[[], Awaitable[Any]]
    default: T
    parse: Optional[Callable[[Any], T]] = None
    timeout: Optional[float] = None


@dataclass
class SourceFailure:
    """Why a source was defaulted."""

    source: str
    reason: str

    def __str__(self) -> str:
        return f"{self.source}: {self.reason}"


@dataclass
class SourceResult(Generic[T]):
    """Outcome of one source: the real value, or the default plus a failure."""

    name: str
    value: T
    failure: Optional[SourceFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def describe_failure(error: BaseException) -> str:
    """Short human-readable reason for a failed fetch."""
    if isinstance(error, asyncio.TimeoutError):
        return "timed out"
    if isinstance(error, MalformedResponseError):
        return error.message
    if isinstance(error, HttpStatusError):
        return f"HTTP {error.status_code}: {error.message}"
    if isinstance(error, EventConnectError):
        return error.message
    if isinstance(error, (PydanticValidationError, TypeError, KeyError, ValueError)):
        return f"malformed response: {error}"
    return f"unexpected error: {error!r}"


async def fetch_with_default(query: SourceQuery[T], timeout: Optional[float] = None) -> SourceResult[T]:
    """Run ``query`` and never raise past this boundary.

    Args:
        query: The source to fetch
        timeout: Fallback timeout in seconds when the query declares none

    Returns:
        SourceResult holding either the fetched value or the default and a failure
    """
    limit = query.timeout if query.timeout is not None else timeout
    try:
        if limit is None:
            value = await query.fetch()
        else:
            value = await asyncio.wait_for(query.fetch(), timeout=limit)
        if query.parse is not None:
            try:
                value = query.parse(value)
            except EventConnectError:
                raise
            except Exception as e:
                raise MalformedResponseError(f"malformed response: {e}") from e
    except Exception as e:
        reason = describe_failure(e)
        logger.warning("Source failed, using default", source=query.name, reason=reason)
        return SourceResult(
            name=query.name,
            value=copy.deepcopy(query.default),
            failure=SourceFailure(source=query.name, reason=reason),
        )

    return SourceResult(name=query.name, value=value)
