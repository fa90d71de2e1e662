"""Tests for the dispatcher, envelopes and tenant resolution."""

import asyncio

import pytest

from ghl_mcp.backend import BackendResponse
from ghl_mcp.mcp_server.context import ToolContext
from ghl_mcp.mcp_server.dispatcher import Dispatcher
from ghl_mcp.mcp_server.envelope import ToolResult, error_envelope, success_envelope
from ghl_mcp.mcp_server.errors import ConfigurationError
from ghl_mcp.mcp_server.tenant import is_unset, resolve_location
from ghl_mcp.mcp_server.tools.registry import ToolRegistry, build_registry

from conftest import DEFAULT_LOCATION, FakeBackend


@pytest.mark.unit
class TestTenant:
    """Location fallback chain."""

    def test_explicit_wins(self):
        assert resolve_location("loc-1", "loc-default") == "loc-1"

    @pytest.mark.parametrize("explicit", [None, "", "   "])
    def test_unset_falls_back(self, explicit):
        assert is_unset(explicit)
        assert resolve_location(explicit, "loc-default") == "loc-default"

    def test_no_location_at_all(self):
        with pytest.raises(ConfigurationError, match="GHL_LOCATION_ID"):
            resolve_location("", None)


@pytest.mark.unit
class TestEnvelope:
    """Envelope construction."""

    def test_success_envelope(self):
        envelope = success_envelope("op", ToolResult(data={"a": 1}, message="ok", metadata={"n": 1}))
        assert envelope == {
            "success": True,
            "data": {"a": 1},
            "message": "ok",
            "metadata": {"operation": "op", "n": 1},
        }
        assert envelope["success"] is True

    def test_success_requires_data(self):
        with pytest.raises(TypeError):
            success_envelope("op", ToolResult(data=None, message="ok"))

    def test_error_envelope_never_has_empty_message(self):
        envelope = error_envelope("op", "BACKEND_FAILURE", "")
        assert envelope["message"] == "Failed to execute op"
        assert envelope["error"]["message"] == envelope["message"]
        assert "details" not in envelope["error"]
        assert envelope["success"] is False

    def test_envelopes_are_fresh(self):
        data = {"items": [1]}
        envelope = success_envelope("op", ToolResult(data=data, message="ok"))
        envelope["data"]["items"].append(2)
        assert data == {"items": [1]}


@pytest.mark.unit
class TestDispatcher:
    """Dispatch routing and error conversion."""

    @pytest.mark.asyncio
    async def test_unknown_operation(self, dispatcher, backend):
        envelope = await dispatcher.dispatch("no_such_tool", {})
        assert envelope["success"] is False
        assert envelope["error"]["code"] == "NOT_FOUND"
        assert "no_such_tool" in envelope["message"]
        assert envelope["metadata"] == {"operation": "no_such_tool"}
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_validation_error_makes_no_backend_call(self, dispatcher, backend):
        envelope = await dispatcher.dispatch("get_social_post", {})
        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert "postId" in envelope["message"]
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, dispatcher, backend):
        envelope = await dispatcher.dispatch("get_social_accounts", {"colour": "red"})
        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert "colour" in envelope["message"]
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_missing_location_is_configuration_error(self, registry, backend):
        dispatcher = Dispatcher(registry, ToolContext(backend=backend, default_location=None))
        envelope = await dispatcher.dispatch("get_social_accounts", {})
        assert envelope["error"]["code"] == "CONFIGURATION_ERROR"
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_empty_location_uses_default(self, dispatcher, backend):
        backend.respond("get_social_accounts", {"results": {"accounts": [], "groups": []}})
        await dispatcher.dispatch("get_social_accounts", {"locationId": ""})
        assert backend.calls_to("get_social_accounts") == [{"locationId": DEFAULT_LOCATION}]

    @pytest.mark.asyncio
    async def test_backend_failure_with_detail(self, dispatcher, backend):
        backend.respond(
            "get_social_post",
            BackendResponse.failure("Post not found (404)", status_code=404),
        )
        envelope = await dispatcher.dispatch("get_social_post", {"postId": "p1"})
        assert envelope["error"]["code"] == "BACKEND_FAILURE"
        assert envelope["message"] == "Failed to get social media post: Post not found (404)"
        assert envelope["error"]["details"]["status_code"] == 404

    @pytest.mark.asyncio
    async def test_backend_failure_without_detail(self, dispatcher, backend):
        backend.respond("get_social_post", BackendResponse(success=False))
        envelope = await dispatcher.dispatch("get_social_post", {"postId": "p1"})
        assert envelope["message"] == "Failed to get social media post"

    @pytest.mark.asyncio
    async def test_backend_exception_becomes_envelope(self, dispatcher, backend):
        backend.respond("get_social_post", ConnectionResetError("socket closed"))
        envelope = await dispatcher.dispatch("get_social_post", {"postId": "p1"})
        assert envelope["success"] is False
        assert envelope["error"]["code"] == "BACKEND_FAILURE"
        assert "socket closed" in envelope["message"]
        assert envelope["error"]["details"]["exception_type"] == "ConnectionResetError"

    @pytest.mark.asyncio
    async def test_unexpected_shape(self, dispatcher, backend):
        backend.respond("get_social_post", {"something": "else"})
        envelope = await dispatcher.dispatch("get_social_post", {"postId": "p1"})
        assert envelope["error"]["code"] == "UNEXPECTED_SHAPE"
        assert envelope["message"].startswith("Failed to get social media post: ")
        assert "results.post" in envelope["message"]

    @pytest.mark.asyncio
    async def test_programmer_error_propagates(self, context):
        async def broken(args, ctx):
            raise KeyError("bug")

        registry = ToolRegistry()
        registry.register(
            "broken",
            broken,
            {"description": "x", "inputSchema": {"type": "object", "properties": {}}},
        )
        with pytest.raises(KeyError):
            await Dispatcher(registry, context).dispatch("broken", {})

    @pytest.mark.asyncio
    async def test_success_envelope_metadata(self, dispatcher, backend):
        backend.respond("get_social_accounts", {"results": {"accounts": [{"id": "a"}], "groups": []}})
        envelope = await dispatcher.dispatch("get_social_accounts")
        assert envelope["success"] is True
        assert envelope["metadata"]["operation"] == "get_social_accounts"
        assert envelope["metadata"]["accountCount"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_dispatches_are_independent(self, registry):
        def echo_post(params):
            return {"post": {"_id": params["postId"], "summary": f"post {params['postId']}"}}

        backend = FakeBackend({"get_social_post": echo_post})
        dispatcher = Dispatcher(registry, ToolContext(backend=backend, default_location="loc"))

        ids = [f"p{i}" for i in range(10)]
        envelopes = await asyncio.gather(
            *(dispatcher.dispatch("get_social_post", {"postId": post_id}) for post_id in ids)
        )
        assert [e["data"]["postId"] for e in envelopes] == ids
        assert len({id(e) for e in envelopes}) == len(ids)


def _sample(rules):
    """A small value that satisfies one property schema."""
    if "enum" in rules:
        return rules["enum"][0]
    kind = rules.get("type")
    if kind == "string":
        return "x" * max(1, rules.get("minLength", 1))
    if kind == "integer":
        return rules.get("minimum", 1)
    if kind == "number":
        return rules.get("minimum", 1.0)
    if kind == "boolean":
        return True
    if kind == "array":
        return [_sample(rules.get("items", {"type": "string"}))] * max(1, rules.get("minItems", 1))
    if kind == "object":
        return {
            name: _sample(rules["properties"][name])
            for name in rules.get("required", [])
        }
    return "x"


def _required_args(descriptor):
    schema = descriptor.input_schema
    return {name: _sample(schema["properties"][name]) for name in schema.get("required", ())}


def _without_clock(calls):
    return [
        (name, {key: value for key, value in params.items() if key not in ("fromDate", "toDate")})
        for name, params in calls
    ]


_DESCRIPTORS = build_registry().descriptors()

REQUIRED_FIELDS = [
    (descriptor.name, field)
    for descriptor in _DESCRIPTORS
    for field in descriptor.input_schema.get("required", ())
]

LOCATION_OPERATIONS = [
    descriptor.name
    for descriptor in _DESCRIPTORS
    if "locationId" in descriptor.input_schema["properties"]
]


@pytest.mark.unit
class TestEveryOperation:
    """Properties that hold across the whole operation table."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,field", REQUIRED_FIELDS)
    async def test_missing_required_field(self, registry, dispatcher, backend, name, field):
        args = _required_args(registry.get(name))
        del args[field]
        envelope = await dispatcher.dispatch(name, args)
        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert field in envelope["message"]
        assert backend.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", LOCATION_OPERATIONS)
    async def test_empty_location_matches_absent(self, registry, name):
        args = _required_args(registry.get(name))

        absent = FakeBackend()
        await Dispatcher(registry, ToolContext(absent, DEFAULT_LOCATION)).dispatch(name, dict(args))
        empty = FakeBackend()
        await Dispatcher(registry, ToolContext(empty, DEFAULT_LOCATION)).dispatch(
            name, {**args, "locationId": ""}
        )

        assert absent.calls
        assert _without_clock(empty.calls) == _without_clock(absent.calls)
        for _, params in empty.calls:
            assert params["locationId"] == DEFAULT_LOCATION

    def test_tables_cover_every_operation(self):
        assert len(REQUIRED_FIELDS) > len(_DESCRIPTORS)
        assert {"search_social_posts", "create_custom_field", "get_blog_sites", "get_all_objects"} <= set(
            LOCATION_OPERATIONS
        )
