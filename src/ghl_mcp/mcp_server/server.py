"""MCP Server implementation for the GHL tools.

This module wires the tool registry, dispatcher and backend into an MCP
server with stdio transport, lifecycle management and logging setup.
"""

import json
import logging
import sys
import time
from typing import Any, Optional

from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..backend import BackendConfig, BaseBackend, create_from_config, load_yaml_config
from .context import ToolContext
from .dispatcher import Dispatcher
from .tools.registry import ToolRegistry, build_registry

logger = logging.getLogger(__name__)


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class MCPServer:
    """MCP Server exposing GoHighLevel operations as tools."""

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        backend: Optional[BaseBackend] = None,
        registry: Optional[ToolRegistry] = None,
    ):
        """Initialize MCP Server.

        Args:
            config: Server configuration dictionary. May contain:
                - name: Server name (default: "ghl-mcp-server")
                - version: Server version (default: "0.1.0")
                - transport: Transport configuration
                - logging: Logging configuration
                - ghl: Backend configuration (overridden by GHL_* env vars)
            backend: Backend to use instead of the configured one
            registry: Tool registry (defaults to all tool families)
        """
        self.config = config or {}
        self.name = self.config.get("name", "ghl-mcp-server")
        self.version = self.config.get("version", "0.1.0")

        # Transport configuration
        transport_config = self.config.get("transport", {}) or {}
        self.transport_type = transport_config.get("type", "stdio")

        # Logging configuration
        logging_config = self.config.get("logging", {}) or {}
        self.log_level = logging_config.get("level", "INFO")
        self.log_format = logging_config.get("format", "json")
        self.log_file = logging_config.get("file")
        self._setup_logging()

        backend_config = BackendConfig(data=self.config)
        self.backend = backend or create_from_config(backend_config)
        self.default_location = backend_config.get_default_location()
        if not self.default_location:
            logger.warning("No default location configured; every call must pass locationId")

        self.tool_registry = registry or build_registry()
        self.context = ToolContext(backend=self.backend, default_location=self.default_location)
        self.dispatcher = Dispatcher(self.tool_registry, self.context)

        self.server = Server(self.name)
        self._register_handlers()

        logger.info(f"Initialized {self.name} MCP Server v{self.version}")
        logger.info(f"Transport: {self.transport_type}, backend: {self.backend.backend_type}")

    def _setup_logging(self) -> None:
        """Setup structured logging for the server."""
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, str(self.log_level).upper(), logging.INFO))
        root_logger.handlers.clear()

        if self.log_format == "json":
            formatter: logging.Formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        # stdout carries the protocol
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.log_file:
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logger.info(f"Logging to file: {self.log_file}")

    def list_tools(self) -> list[Tool]:
        """MCP tool declarations for every registered operation."""
        return [
            Tool(
                name=descriptor.name,
                description=descriptor.description,
                inputSchema=descriptor.export_schema(),
            )
            for descriptor in self.tool_registry.descriptors()
        ]

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> list[TextContent]:
        """Dispatch a tool call and return the envelope as JSON text."""
        envelope = await self.dispatcher.dispatch(name, arguments)
        return [TextContent(type="text", text=json.dumps(envelope, indent=2, default=str))]

    def _register_handlers(self) -> None:
        """Register the MCP list_tools/call_tool handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            return self.list_tools()

        # Arguments are validated and coerced by the dispatcher
        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(name: str, arguments: dict) -> list[TextContent]:
            return await self.call_tool(name, arguments)

        logger.info(f"Registered {self.tool_registry.count()} tools")

    async def start(self) -> None:
        """Start the MCP server on stdio and serve until the client disconnects."""
        logger.info("Starting MCP server...")

        if self.transport_type != "stdio":
            raise ValueError(
                f"Transport type '{self.transport_type}' not supported. "
                "Only 'stdio' is currently supported."
            )

        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("Server ready. Waiting for requests...")
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=self.name,
                        server_version=self.version,
                        capabilities=self.server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={},
                        ),
                    ),
                )
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop the MCP server gracefully."""
        logger.info("Stopping MCP server...")
        await self.backend.close()
        logger.info("MCP server stopped")

    def get_capabilities(self) -> dict[str, Any]:
        """Get server capabilities declaration."""
        return {
            "server": {"name": self.name, "version": self.version},
            "tools": {
                "count": self.tool_registry.count(),
                "families": {
                    family: len(names)
                    for family, names in self.tool_registry.families().items()
                },
            },
            "default_location": bool(self.default_location),
        }


def load_server_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Load config/server.yaml, flattening its `server` section into the top level."""
    config_data = load_yaml_config(config_file)
    config = dict(config_data.get("server", {}) or {})
    config.update({key: value for key, value in config_data.items() if key != "server"})
    return config


def create_server(config: Optional[dict[str, Any]] = None, **kwargs: Any) -> MCPServer:
    """Factory function to create an MCP server instance.

    Args:
        config: Server configuration dictionary. If None, loads
                config/server.yaml (or GHL_CONFIG_FILE)
        **kwargs: Passed through to MCPServer (e.g. backend)

    Returns:
        MCPServer instance
    """
    if config is None:
        config = load_server_config()
    return MCPServer(config, **kwargs)
