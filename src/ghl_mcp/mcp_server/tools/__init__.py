"""Tool registration system for MCP Server.

This module provides the tool schemas, handlers and the registry built from
them.
"""

from .handlers import FAILURE_MESSAGES, TOOL_HANDLERS
from .registry import OperationDescriptor, ToolRegistry, build_registry
from .schemas import TOOL_SCHEMAS, freeze_schema, thaw_schema, validate_arguments

__all__ = [
    "FAILURE_MESSAGES",
    "TOOL_HANDLERS",
    "OperationDescriptor",
    "ToolRegistry",
    "build_registry",
    "TOOL_SCHEMAS",
    "freeze_schema",
    "thaw_schema",
    "validate_arguments",
]
