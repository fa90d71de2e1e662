"""
Backend factory.

This module implements the factory pattern for creating backend instances
from configuration.
"""

import logging
from typing import Dict, Any, Optional, Type

from .base import BaseBackend
from .config import BackendConfig
from .ghl_client import GHLApiClient

logger = logging.getLogger(__name__)


# Backend registry: maps backend type to backend class
_BACKEND_REGISTRY: Dict[str, Type[BaseBackend]] = {
    "ghl": GHLApiClient,
}


def register_backend(backend_type: str, backend_class: Type[BaseBackend]) -> None:
    """
    Register a new backend type.

    Args:
        backend_type: Backend type identifier (e.g., 'ghl')
        backend_class: Class that implements BaseBackend
    """
    if not issubclass(backend_class, BaseBackend):
        raise TypeError(
            f"Backend class must inherit from BaseBackend, got {backend_class}"
        )
    _BACKEND_REGISTRY[backend_type] = backend_class
    logger.info(f"Registered backend: {backend_type}")


def get_registered_backends() -> list[str]:
    """List registered backend types."""
    return list(_BACKEND_REGISTRY.keys())


def create(backend_type: str, config: Dict[str, Any]) -> BaseBackend:
    """
    Create a backend instance.

    Args:
        backend_type: Backend type (e.g., 'ghl')
        config: Backend configuration dictionary

    Returns:
        Backend instance

    Raises:
        ValueError: If backend type is unknown or config is invalid
    """
    if backend_type not in _BACKEND_REGISTRY:
        available = ", ".join(_BACKEND_REGISTRY.keys())
        raise ValueError(
            f"Unknown backend type: '{backend_type}'. "
            f"Available backends: {available}"
        )

    backend = _BACKEND_REGISTRY[backend_type](config)
    logger.info(f"Created {backend_type} backend instance")
    return backend


def create_from_config(config_manager: Optional[BackendConfig] = None) -> BaseBackend:
    """
    Create the configured backend from YAML and environment variables.

    Args:
        config_manager: Optional BackendConfig (a fresh one is loaded otherwise)

    Returns:
        Backend instance
    """
    config_manager = config_manager or BackendConfig()
    config = config_manager.get_backend_config()
    backend_type = str(config.get("type", "ghl")).lower()
    return create(backend_type, config)
