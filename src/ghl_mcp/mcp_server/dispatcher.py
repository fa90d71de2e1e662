"""Dispatch of tool calls by name.

Looks the operation up in the registry, validates the arguments against its
schema, runs the handler and wraps the outcome in an envelope.
"""

import logging
from typing import Any, Dict, Optional

from .constants import ErrorMessage
from .context import ToolContext
from .decorators import handle_errors
from .envelope import success_envelope
from .errors import NotFoundError, UnexpectedShapeError
from .tools.registry import ToolRegistry
from .tools.schemas import validate_arguments

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes `(name, args)` to the registered handler.

    Holds no per-call state; concurrent dispatches are independent.
    """

    def __init__(self, registry: ToolRegistry, context: ToolContext):
        self.registry = registry
        self.context = context

    @handle_errors
    async def dispatch(self, name: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run one operation and return its envelope.

        Args:
            name: Operation name
            args: Raw arguments (None is treated as no arguments)

        Returns:
            Success or failure envelope
        """
        descriptor = self.registry.get(name)
        if descriptor is None:
            raise NotFoundError(
                ErrorMessage.UNKNOWN_OPERATION.format(name=name),
                details={"available": len(self.registry.list_tools())},
            )

        validated = validate_arguments(args, descriptor.input_schema, tool_name=name)
        logger.debug(f"Dispatching {name} with {sorted(validated)}")

        try:
            result = await descriptor.handler(validated, self.context)
        except UnexpectedShapeError as e:
            raise UnexpectedShapeError(
                f"{descriptor.failure_message}: {e.message}",
                status_code=e.status_code,
                details=e.details,
            ) from e

        return success_envelope(name, result)
