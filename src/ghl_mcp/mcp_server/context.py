"""Call context for tool handlers.

Handlers receive a ToolContext holding the backend and the read-only
default location. It is built once at startup and shared by all calls.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..backend import BaseBackend
from .errors import BackendFailureError
from .tenant import resolve_location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolContext:
    """Dependencies shared by every handler call."""

    backend: BaseBackend
    default_location: Optional[str] = None

    def resolve_location(self, explicit: Optional[str] = None) -> str:
        """Resolve the location for a call (explicit, else the default).

        Raises:
            ConfigurationError: If no location can be determined
        """
        return resolve_location(explicit, self.default_location)

    async def call(
        self,
        capability: str,
        params: Dict[str, Any],
        failure_message: str,
    ) -> Any:
        """Call the backend and return its payload.

        Args:
            capability: Backend capability name
            params: Request parameters
            failure_message: Generic message used when the backend gives no detail

        Returns:
            The raw backend payload (an empty dict when the backend sent none)

        Raises:
            BackendFailureError: If the backend reports or raises a failure
        """
        try:
            response = await self.backend.call(capability, params)
        except Exception as e:
            logger.error(f"Backend raised during {capability}: {e}", exc_info=True)
            raise BackendFailureError(
                f"{failure_message}: {e}" if str(e) else failure_message,
                details={"capability": capability, "exception_type": type(e).__name__},
            ) from e

        if not response.success:
            error = response.error
            detail = error.message if error and error.message else ""
            details: Dict[str, Any] = {"capability": capability}
            if error is not None:
                details["error_type"] = error.error_type
                details.update(error.details)
            raise BackendFailureError(
                f"{failure_message}: {detail}" if detail else failure_message,
                status_code=error.status_code if error else None,
                details=details,
            )

        return response.data if response.data is not None else {}
