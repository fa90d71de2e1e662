"""Location (tenant) resolution.

Resolution order: the explicit argument, unless it is empty, then the
process-wide default location.
"""

from typing import Optional

from .constants import ErrorMessage
from .errors import ConfigurationError


def is_unset(value: Optional[str]) -> bool:
    """True for None and for empty or whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


def resolve_location(explicit: Optional[str], default: Optional[str]) -> str:
    """Pick the location id for a call.

    Args:
        explicit: Value passed by the caller (may be None or "")
        default: Configured default location

    Returns:
        The location id to use

    Raises:
        ConfigurationError: If neither value is usable
    """
    if not is_unset(explicit):
        return explicit.strip()
    if not is_unset(default):
        return default.strip()
    raise ConfigurationError(ErrorMessage.MISSING_LOCATION)
