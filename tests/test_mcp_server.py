"""Tests for the MCP server wiring."""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

import pytest
import yaml
from mcp.types import CallToolRequest, ListToolsRequest

from ghl_mcp.backend import GHLApiClient
from ghl_mcp.mcp_server.main import main
from ghl_mcp.mcp_server.server import MCPServer, create_server, load_server_config

from conftest import FakeBackend

CONFIG = {
    "name": "test-server",
    "version": "0.1.0",
    "logging": {"level": "DEBUG", "format": "text"},
    "ghl": {"location_id": "loc-config"},
}


@pytest.fixture
def server(clean_env):
    return MCPServer(dict(CONFIG), backend=FakeBackend())


@pytest.mark.unit
class TestServerInitialization:
    """Server construction and configuration."""

    def test_server_initialization(self, server):
        """Test that MCP server can be initialized."""
        assert server.name == "test-server"
        assert server.version == "0.1.0"
        assert server.transport_type == "stdio"
        assert server.default_location == "loc-config"
        assert server.context.default_location == "loc-config"

    def test_server_default_config(self, clean_env):
        """Test server with default configuration."""
        server = MCPServer(backend=FakeBackend())
        assert server.name == "ghl-mcp-server"
        assert server.default_location is None

    def test_env_location_overrides_config(self, clean_env):
        clean_env.setenv("GHL_LOCATION_ID", "loc-env")
        server = MCPServer(dict(CONFIG), backend=FakeBackend())
        assert server.default_location == "loc-env"

    def test_missing_api_key_fails(self, clean_env):
        with pytest.raises(ValueError, match="API key"):
            MCPServer(dict(CONFIG))

    def test_configured_backend(self, clean_env):
        clean_env.setenv("GHL_API_KEY", "key")
        server = MCPServer(dict(CONFIG))
        assert isinstance(server.backend, GHLApiClient)

    def test_mcp_handlers_registered(self, server):
        assert ListToolsRequest in server.server.request_handlers
        assert CallToolRequest in server.server.request_handlers

    def test_capabilities(self, server):
        capabilities = server.get_capabilities()
        assert capabilities["tools"]["count"] == 38
        assert capabilities["tools"]["families"]["blogs"] == 7
        assert capabilities["default_location"] is True


@pytest.mark.unit
class TestServerTools:
    """list_tools / call_tool."""

    def test_list_tools(self, server):
        tools = server.list_tools()
        assert len(tools) == 38
        by_name = {tool.name: tool for tool in tools}
        bulk = by_name["bulk_delete_social_posts"]
        assert bulk.inputSchema["properties"]["postIds"]["maxItems"] == 50
        assert bulk.inputSchema["required"] == ["postIds"]
        assert by_name["create_custom_field"].description

    def test_listed_schema_is_a_copy(self, server):
        tool = server.list_tools()[0]
        tool.inputSchema["properties"].clear()
        assert server.list_tools()[0].inputSchema["properties"]

    @pytest.mark.asyncio
    async def test_call_tool_returns_envelope_json(self, server):
        server.backend.respond("get_social_tags", {"tags": ["a"], "count": 1})
        content = await server.call_tool("get_social_tags", {})
        assert len(content) == 1
        assert content[0].type == "text"
        envelope = json.loads(content[0].text)
        assert envelope["success"] is True
        assert envelope["data"] == {"tags": ["a"], "count": 1}
        assert server.backend.calls_to("get_social_tags")[0]["locationId"] == "loc-config"

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self, server):
        content = await server.call_tool("nope", None)
        envelope = json.loads(content[0].text)
        assert envelope["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_stop_closes_backend(self, server):
        await server.stop()
        assert server.backend.closed

    @pytest.mark.asyncio
    async def test_unsupported_transport(self, clean_env):
        server = MCPServer({**CONFIG, "transport": {"type": "sse"}}, backend=FakeBackend())
        with pytest.raises(ValueError, match="not supported"):
            await server.start()


@pytest.mark.unit
class TestServerFactory:
    """Config loading and the factory."""

    def test_load_server_config(self, clean_env, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text(yaml.dump({
            "server": {"name": "from-yaml"},
            "logging": {"format": "text"},
            "ghl": {"api_key": "k"},
        }))
        config = load_server_config(str(path))
        assert config["name"] == "from-yaml"
        assert config["logging"] == {"format": "text"}
        assert config["ghl"] == {"api_key": "k"}

    def test_create_server_factory(self, clean_env):
        """Test server factory function."""
        server = create_server({"name": "factory-test"}, backend=FakeBackend())
        assert isinstance(server, MCPServer)
        assert server.name == "factory-test"

    def test_create_server_from_config_file(self, clean_env, tmp_path):
        path = tmp_path / "server.yaml"
        path.write_text(yaml.dump({
            "server": {"name": "file-server"},
            "logging": {"format": "text"},
            "ghl": {"api_key": "k", "location_id": "loc-file"},
        }))
        clean_env.setenv("GHL_CONFIG_FILE", str(path))
        server = create_server()
        assert server.name == "file-server"
        assert server.default_location == "loc-file"


@pytest.mark.integration
class TestServerLifecycle:
    """start() and the entry point, with the stdio transport patched out."""

    @pytest.mark.asyncio
    async def test_start_runs_and_closes_backend(self, server):
        @asynccontextmanager
        async def fake_stdio():
            yield ("read", "write")

        with patch("ghl_mcp.mcp_server.server.stdio_server", fake_stdio), \
                patch.object(server.server, "run", new=AsyncMock()) as run:
            await server.start()

        run.assert_awaited_once()
        assert run.await_args.args[:2] == ("read", "write")
        assert server.backend.closed

    @pytest.mark.asyncio
    async def test_main_exits_on_config_error(self):
        with patch("ghl_mcp.mcp_server.main.create_server", side_effect=ValueError("no key")):
            with pytest.raises(SystemExit) as exc_info:
                await main()
        assert exc_info.value.code == 1
