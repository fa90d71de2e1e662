"""Pytest configuration and shared fixtures."""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import pytest

# Add src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ.setdefault("TESTING", "true")

from ghl_mcp.backend import BackendResponse, BaseBackend  # noqa: E402
from ghl_mcp.mcp_server.context import ToolContext  # noqa: E402
from ghl_mcp.mcp_server.dispatcher import Dispatcher  # noqa: E402
from ghl_mcp.mcp_server.tools.registry import build_registry  # noqa: E402

DEFAULT_LOCATION = "loc-default"

Responder = Callable[[Dict[str, Any]], Any]


class FakeBackend(BaseBackend):
    """Backend double that records calls and answers from canned responses.

    A response may be a BackendResponse, a plain payload (wrapped as
    success), an exception instance (raised), or a callable taking the
    params and returning any of those.
    """

    def __init__(self, responses: Dict[str, Any] | None = None):
        super().__init__({})
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    @property
    def backend_type(self) -> str:
        return "fake"

    def respond(self, capability: str, response: Any) -> None:
        self.responses[capability] = response

    def calls_to(self, capability: str) -> List[Dict[str, Any]]:
        return [params for name, params in self.calls if name == capability]

    async def call(self, capability: str, params: Dict[str, Any]) -> BackendResponse:
        self.calls.append((capability, json.loads(json.dumps(params))))
        response = self.responses.get(capability, {})
        if callable(response):
            response = response(params)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, BackendResponse):
            return response
        return BackendResponse.ok(response)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def context(backend: FakeBackend) -> ToolContext:
    return ToolContext(backend=backend, default_location=DEFAULT_LOCATION)


@pytest.fixture(scope="session")
def registry():
    return build_registry()


@pytest.fixture
def dispatcher(registry, context: ToolContext) -> Dispatcher:
    return Dispatcher(registry, context)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove GHL_* variables so tests see only what they set."""
    for name in list(os.environ):
        if name.startswith("GHL_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch
