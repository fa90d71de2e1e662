"""MCP Server implementation for GoHighLevel."""

from .server import MCPServer, create_server, load_server_config
from .dispatcher import Dispatcher
from .context import ToolContext
from .decorators import handle_errors
from .envelope import ToolResult, error_envelope, success_envelope
from .errors import (
    BackendFailureError,
    ConfigurationError,
    NotFoundError,
    ToolError,
    UnexpectedShapeError,
    ValidationError,
)
from .constants import ErrorCode, ErrorMessage

__all__ = [
    "MCPServer",
    "create_server",
    "load_server_config",
    "Dispatcher",
    "ToolContext",
    "handle_errors",
    "ToolResult",
    "error_envelope",
    "success_envelope",
    "BackendFailureError",
    "ConfigurationError",
    "NotFoundError",
    "ToolError",
    "UnexpectedShapeError",
    "ValidationError",
    "ErrorCode",
    "ErrorMessage",
]
