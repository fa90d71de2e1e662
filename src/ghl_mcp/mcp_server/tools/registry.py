"""Tool registry for MCP Server.

Holds one OperationDescriptor per tool. The registry is filled once at
startup by build_registry() and frozen; after that it is only read.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping

from .handlers import FAILURE_MESSAGES, TOOL_HANDLERS
from .schemas import TOOL_SCHEMAS, freeze_schema, thaw_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationDescriptor:
    """Everything the dispatcher and the MCP layer need to know about a tool."""

    name: str
    description: str
    schema: Mapping[str, Any]
    handler: Callable
    failure_message: str
    family: str | None = None

    @property
    def input_schema(self) -> Mapping[str, Any]:
        return self.schema.get("inputSchema", MappingProxyType({}))

    def export_schema(self) -> dict[str, Any]:
        """A private, mutable copy of the inputSchema for advertising to clients."""
        return thaw_schema(self.input_schema)


class ToolRegistry:
    """Registry for managing MCP tools.

    Tools are registered while the registry is open; freeze() makes it
    read-only.
    """

    def __init__(self):
        """Initialize empty tool registry."""
        self._tools: dict[str, OperationDescriptor] = {}
        self._frozen = False

    def register(
        self,
        name: str,
        handler: Callable,
        schema: dict[str, Any],
        failure_message: str | None = None,
        description: str | None = None,
        family: str | None = None,
    ) -> OperationDescriptor:
        """Register a tool in the registry.

        Args:
            name: Tool name (must be unique)
            handler: Async handler `(args, ctx) -> ToolResult`
            schema: Schema dictionary with `description` and `inputSchema`
            failure_message: Generic message used when a backend call fails
            description: Tool description (defaults to the schema's)
            family: Tool family

        Raises:
            ValueError: If the name is already registered
            RuntimeError: If the registry is frozen
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register '{name}': registry is frozen")
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered")

        descriptor = OperationDescriptor(
            name=name,
            description=description or schema.get("description", ""),
            schema=freeze_schema(schema),
            handler=handler,
            failure_message=failure_message or f"Failed to execute {name}",
            family=family or schema.get("family"),
        )
        self._tools[name] = descriptor
        logger.debug(f"Registered tool: {name} (family={descriptor.family})")
        return descriptor

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> OperationDescriptor | None:
        """Get tool descriptor by name, or None."""
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        """List all registered tool names in registration order."""
        return list(self._tools.keys())

    def descriptors(self) -> list[OperationDescriptor]:
        return list(self._tools.values())

    def families(self) -> dict[str, list[str]]:
        """Group tool names by family."""
        grouped: dict[str, list[str]] = {}
        for tool in self._tools.values():
            grouped.setdefault(tool.family or "default", []).append(tool.name)
        return grouped

    def count(self) -> int:
        """Get total number of registered tools."""
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def build_registry(
    schemas: dict[str, dict[str, Any]] | None = None,
    handlers: dict[str, Callable] | None = None,
    failure_messages: dict[str, str] | None = None,
) -> ToolRegistry:
    """Build and freeze the registry from the schema and handler tables.

    Args:
        schemas: Tool schemas (defaults to all tool families)
        handlers: Tool handlers (defaults to all tool families)
        failure_messages: Per-tool failure messages

    Returns:
        Frozen ToolRegistry

    Raises:
        ValueError: If a schema has no handler or a handler has no schema
    """
    schemas = TOOL_SCHEMAS if schemas is None else schemas
    handlers = TOOL_HANDLERS if handlers is None else handlers
    failure_messages = FAILURE_MESSAGES if failure_messages is None else failure_messages

    without_handler = sorted(set(schemas) - set(handlers))
    without_schema = sorted(set(handlers) - set(schemas))
    if without_handler or without_schema:
        raise ValueError(
            "Tool table mismatch: "
            f"schemas without handler {without_handler}, "
            f"handlers without schema {without_schema}"
        )

    registry = ToolRegistry()
    for name, schema in schemas.items():
        registry.register(
            name=name,
            handler=handlers[name],
            schema=schema,
            failure_message=failure_messages.get(name),
        )
    registry.freeze()

    logger.info(f"Registered {registry.count()} tools in {len(registry.families())} families")
    return registry
