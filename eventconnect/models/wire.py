"""Helpers for turning backend JSON payloads into validated records."""

from typing import Any, Dict, List, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from eventconnect.errors import MalformedResponseError

ModelT = TypeVar("ModelT", bound=BaseModel)


def ensure_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    """Return ``data`` if it is a JSON object, otherwise raise MalformedResponseError."""
    if not isinstance(data, Mapping):
        raise MalformedResponseError(
            f"malformed response: expected {kind} object, got {type(data).__name__}"
        )
    return data


def ensure_list(data: Any, kind: str) -> List[Any]:
    """Return ``data`` if it is a JSON array, otherwise raise MalformedResponseError."""
    if not isinstance(data, list):
        raise MalformedResponseError(
            f"malformed response: expected a list of {kind}, got {type(data).__name__}"
        )
    return data


def first_present(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Value of the first key that is present and not None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def nested(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Nested object under ``key``, or an empty mapping when absent or not an object."""
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def build_record(model: Type[ModelT], kind: str, fields: Dict[str, Any]) -> ModelT:
    """Validate ``fields`` into ``model``; None values fall back to model defaults."""
    try:
        return model(**{name: value for name, value in fields.items() if value is not None})
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or kind
        raise MalformedResponseError(
            f"malformed response: invalid {kind} ({location}: {first.get('msg')})"
        ) from e
