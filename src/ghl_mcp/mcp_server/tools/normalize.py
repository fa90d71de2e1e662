"""Helpers for pulling canonical values out of backend payloads.

Backends wrap their data differently from one endpoint family to the next
(flat, under a `results` collection, under a `data` wrapper). Each tool
module composes these helpers into its own extraction functions.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ..constants import ErrorMessage
from ..errors import UnexpectedShapeError

_MISSING = object()


def dig(payload: Any, *path: str, default: Any = None) -> Any:
    """Walk nested mappings; return `default` if any step is missing."""
    current = payload
    for key in path:
        if not isinstance(current, dict):
            return default
        current = current.get(key, _MISSING)
        if current is _MISSING or current is None:
            return default
    return current


def first_present(payload: Any, *paths: tuple[str, ...]) -> Any:
    """Return the first non-missing value among several candidate paths."""
    for path in paths:
        value = dig(payload, *path)
        if value is not None:
            return value
    return None


def as_list(value: Any) -> list[Any]:
    """A list value as-is; anything else becomes an empty list."""
    return value if isinstance(value, list) else []


def as_count(value: Any, fallback: int = 0) -> int:
    """An integer count, or `fallback` when the value is missing or not numeric."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return fallback


def require_mapping(payload: Any, *paths: tuple[str, ...]) -> dict[str, Any]:
    """Return the first mapping found at one of `paths`.

    Raises:
        UnexpectedShapeError: If no candidate path holds a mapping
    """
    for path in paths:
        value = dig(payload, *path)
        if isinstance(value, dict):
            return value
    expected = " or ".join(".".join(path) for path in paths)
    raise UnexpectedShapeError(
        ErrorMessage.UNEXPECTED_SHAPE.format(path=expected),
        details={"expected": expected, "received_keys": _keys(payload)},
    )


def require_value(payload: Any, *path: str) -> Any:
    """Return the value at `path`.

    Raises:
        UnexpectedShapeError: If the value is missing
    """
    value = dig(payload, *path)
    if value is None:
        expected = ".".join(path)
        raise UnexpectedShapeError(
            ErrorMessage.UNEXPECTED_SHAPE.format(path=expected),
            details={"expected": expected, "received_keys": _keys(payload)},
        )
    return value


def record_id(record: dict[str, Any]) -> Optional[str]:
    """The id of a GHL record, which uses either `id` or `_id`."""
    return record.get("id") or record.get("_id")


def compact(mapping: dict[str, Any]) -> dict[str, Any]:
    """Drop None values so optional fields are not sent to the backend."""
    return {key: value for key, value in mapping.items() if value is not None}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_time_window(
    from_date: Optional[str],
    to_date: Optional[str],
    days: int,
    now: Optional[datetime] = None,
) -> tuple[str, str]:
    """Fill in a missing search window from a single clock reading.

    A missing lower bound becomes `now - days`, a missing upper bound `now`.
    Bounds the caller supplied are passed through unchanged.
    """
    now = now or utcnow()
    resolved_from = from_date or iso_timestamp(now - timedelta(days=days))
    resolved_to = to_date or iso_timestamp(now)
    return resolved_from, resolved_to


def _keys(payload: Any) -> list[str]:
    return sorted(payload.keys()) if isinstance(payload, dict) else []
