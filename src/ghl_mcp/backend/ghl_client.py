"""
GHL API client.

This module implements the backend collaborator on top of httpx. It builds
requests from the endpoint table and folds every outcome, including
transport failures, into a BackendResponse. It does not retry.
"""

import logging
from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote

import httpx

from .base import BaseBackend, BackendResponse
from .config import DEFAULT_API_VERSION, DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .endpoints import Endpoint, get_endpoint

logger = logging.getLogger(__name__)

_BODY_METHODS = ("POST", "PUT", "PATCH")


def build_request(
    endpoint: Endpoint, params: Dict[str, Any]
) -> Tuple[str, Dict[str, Any], Optional[Dict[str, Any]]]:
    """Split call parameters into path, query string and JSON body.

    Args:
        endpoint: Endpoint definition
        params: Call parameters (None values are dropped)

    Returns:
        Tuple of (path, query_params, json_body)

    Raises:
        ValueError: If a path placeholder has no value
    """
    remaining = {k: v for k, v in params.items() if v is not None}

    path = endpoint.path
    while "{" in path:
        start = path.index("{")
        end = path.index("}", start)
        key = path[start + 1:end]
        if key not in remaining or remaining[key] == "":
            raise ValueError(f"Missing path parameter '{key}' for {endpoint.path}")
        value = quote(str(remaining.pop(key)), safe="")
        path = path[:start] + value + path[end + 1:]

    query: Dict[str, Any] = {}
    for key in endpoint.query_keys:
        if key in remaining:
            query[key] = remaining.pop(key)

    body: Optional[Dict[str, Any]] = None
    if endpoint.method in _BODY_METHODS:
        body = remaining
    else:
        query.update(remaining)

    # httpx renders Python booleans as "True"/"False"
    query = {
        k: ("true" if v is True else "false" if v is False else v)
        for k, v in query.items()
    }
    return path, query, body


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human-readable error from a non-2xx response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or body.get("msg")
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message)
        if message:
            return f"{message} ({response.status_code})"

    text = response.reason_phrase or response.text or "Request failed"
    return f"{text} ({response.status_code})"


class GHLApiClient(BaseBackend):
    """
    GoHighLevel REST API backend.

    Wraps httpx.AsyncClient and maps capability calls to HTTP requests.
    """

    def __init__(self, config: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the GHL client.

        Args:
            config: Configuration dictionary with keys:
                - api_key: Private integration token / OAuth access token
                - base_url: API base URL
                - api_version: Value for the Version header
                - timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        super().__init__(config)
        self._api_key: Optional[str] = config.get("api_key")
        self._base_url: str = (config.get("base_url") or DEFAULT_BASE_URL).rstrip("/")
        self._api_version: str = config.get("api_version") or DEFAULT_API_VERSION
        self._timeout: float = float(config.get("timeout") or DEFAULT_TIMEOUT)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        if not self._api_key:
            raise ValueError(
                "GHL API key is required. "
                "Set it in config['api_key'] or GHL_API_KEY environment variable."
            )

    @property
    def backend_type(self) -> str:
        return "ghl"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Version": self._api_version,
                    "Accept": "application/json",
                },
            )
            logger.debug(f"Created HTTP client for {self._base_url}")
        return self._client

    async def call(self, capability: str, params: Dict[str, Any]) -> BackendResponse:
        """
        Invoke one GHL capability.

        Args:
            capability: Capability name from the endpoint table
            params: Request parameters

        Returns:
            BackendResponse; never raises for HTTP or transport failures
        """
        endpoint = get_endpoint(capability)
        path, query, body = build_request(endpoint, params)

        logger.debug(f"{endpoint.method} {path} ({capability})")
        try:
            response = await self._get_client().request(
                endpoint.method,
                path,
                params=query or None,
                json=body,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Timeout calling {capability}: {e}")
            return BackendResponse.failure(
                f"Request timed out: {e}", error_type="timeout"
            )
        except (httpx.ConnectError, httpx.NetworkError) as e:
            logger.error(f"Connection error calling {capability}: {e}")
            return BackendResponse.failure(
                f"Connection failed: {e}", error_type="connection"
            )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling {capability}: {e}")
            return BackendResponse.failure(f"HTTP error: {e}", error_type="http")

        if not response.is_success:
            message = extract_error_message(response)
            logger.warning(f"{capability} failed: {message}")
            return BackendResponse.failure(
                message,
                status_code=response.status_code,
                details={"path": path},
            )

        if not response.content:
            return BackendResponse.ok({})
        try:
            return BackendResponse.ok(response.json())
        except ValueError:
            return BackendResponse.failure(
                "Response body is not valid JSON",
                status_code=response.status_code,
                details={"path": path},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("HTTP client closed")
