"""Decorators for MCP Server handlers.

This module provides decorators for common handler patterns like error handling.
"""

import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable

from .constants import ErrorCode
from .envelope import envelope_from_error
from .errors import ToolError

logger = logging.getLogger(__name__)

DispatchFunc = Callable[..., Awaitable[dict[str, Any]]]


def handle_errors(func: DispatchFunc) -> DispatchFunc:
    """Turn ToolErrors raised while dispatching into failure envelopes.

    The wrapped coroutine is called as `func(self, name, args)`. Every call
    is logged with its outcome and duration. Exceptions that are not
    ToolErrors are logged and re-raised.

    Args:
        func: Async dispatch method to wrap

    Returns:
        Wrapped method that always returns an envelope for ToolErrors
    """
    @wraps(func)
    async def wrapper(self: Any, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        started = time.perf_counter()
        try:
            envelope = await func(self, name, args)
        except ToolError as e:
            elapsed = (time.perf_counter() - started) * 1000
            if e.code in (ErrorCode.VALIDATION_ERROR, ErrorCode.NOT_FOUND):
                logger.warning(f"{name} rejected ({e.code.value}) in {elapsed:.1f}ms: {e.message}")
            else:
                logger.error(f"{name} failed ({e.code.value}) in {elapsed:.1f}ms: {e.message}")
            return envelope_from_error(name, e)
        except Exception as e:
            elapsed = (time.perf_counter() - started) * 1000
            logger.error(f"Unexpected error in {name} after {elapsed:.1f}ms: {e}", exc_info=True)
            raise

        elapsed = (time.perf_counter() - started) * 1000
        logger.info(f"{name} succeeded in {elapsed:.1f}ms")
        return envelope

    return wrapper
