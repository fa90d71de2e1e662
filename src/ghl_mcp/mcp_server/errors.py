"""Error taxonomy for tool dispatch.

Every domain failure a tool can hit is a ToolError subclass. The dispatcher
turns these into failure envelopes; anything else is a bug and propagates.
"""

from typing import Any, Dict, Optional

from .constants import ErrorCode


class ToolError(Exception):
    """Base class for failures reported through the envelope."""

    code: ErrorCode = ErrorCode.BACKEND_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ToolError):
    """Malformed, missing or out-of-bound input. Never reaches the backend."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, errors: Optional[list[str]] = None, **details: Any):
        self.errors = errors or [message]
        super().__init__(message, {"errors": self.errors, **details})


class NotFoundError(ToolError):
    """Unknown operation name."""

    code = ErrorCode.NOT_FOUND


class ConfigurationError(ToolError):
    """Required process configuration (e.g. default location) is missing."""

    code = ErrorCode.CONFIGURATION_ERROR


class BackendFailureError(ToolError):
    """Backend reported success=false or the call itself failed."""

    code = ErrorCode.BACKEND_FAILURE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.status_code = status_code


class UnexpectedShapeError(BackendFailureError):
    """Backend payload lacks a field the normalizer needs."""

    code = ErrorCode.UNEXPECTED_SHAPE
