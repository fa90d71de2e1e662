"""Backend collaborator for the GHL REST API."""

from .base import (
    BaseBackend,
    BackendError,
    BackendResponse,
)
from .config import BackendConfig, load_yaml_config
from .endpoints import ENDPOINTS, Endpoint, get_endpoint
from .ghl_client import GHLApiClient
from .factory import (
    create,
    create_from_config,
    register_backend,
    get_registered_backends,
)

__all__ = [
    # Base classes and types
    "BaseBackend",
    "BackendError",
    "BackendResponse",
    # Endpoints
    "ENDPOINTS",
    "Endpoint",
    "get_endpoint",
    # Clients
    "GHLApiClient",
    # Configuration
    "BackendConfig",
    "load_yaml_config",
    # Factory
    "create",
    "create_from_config",
    "register_backend",
    "get_registered_backends",
]
