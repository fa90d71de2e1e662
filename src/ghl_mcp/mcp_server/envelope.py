"""Result envelope construction.

Every operation returns the same shape:

    {"success": True, "data": {...}, "message": "...", "metadata": {...}}
    {"success": False, "error": {"code": ..., "message": ...}, "message": "...", "metadata": {...}}

Envelopes are built fresh for each call.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ToolError


@dataclass
class ToolResult:
    """What a handler hands back to the dispatcher."""

    data: Dict[str, Any]
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def success_envelope(operation: str, result: ToolResult) -> Dict[str, Any]:
    """Create a success envelope from a handler result.

    Args:
        operation: Operation name
        result: Handler result

    Returns:
        Success envelope
    """
    if result.data is None:
        raise TypeError(f"Handler for {operation} returned no data")

    metadata = {"operation": operation}
    metadata.update(copy.deepcopy(result.metadata))
    return {
        "success": True,
        "data": copy.deepcopy(result.data),
        "message": result.message,
        "metadata": metadata,
    }


def error_envelope(
    operation: str,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create a failure envelope.

    Args:
        operation: Operation name (as requested by the caller)
        code: Error code
        message: Human-readable message; must not be empty
        details: Optional structured error details

    Returns:
        Failure envelope
    """
    message = message or f"Failed to execute {operation}"
    error: Dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = copy.deepcopy(details)
    return {
        "success": False,
        "error": error,
        "message": message,
        "metadata": {"operation": operation},
    }


def envelope_from_error(operation: str, exc: ToolError) -> Dict[str, Any]:
    """Create a failure envelope from a ToolError."""
    return error_envelope(operation, exc.code.value, exc.message, exc.details)
