"""
Base backend interface for GHL API access.

This module defines the abstract base class that every backend collaborator
must implement, plus the normalized response triple handlers consume.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class BackendError:
    """Error detail reported by a backend call."""
    message: str
    status_code: Optional[int] = None
    error_type: str = "http"  # "http", "timeout", "connection"
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BackendResponse:
    """Normalized result of one backend call: {success, data?, error?}."""
    success: bool
    data: Any = None
    error: Optional[BackendError] = None

    @classmethod
    def ok(cls, data: Any = None) -> "BackendResponse":
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        message: str,
        status_code: Optional[int] = None,
        error_type: str = "http",
        details: Optional[Dict[str, Any]] = None,
    ) -> "BackendResponse":
        return cls(
            success=False,
            error=BackendError(
                message=message,
                status_code=status_code,
                error_type=error_type,
                details=details or {},
            ),
        )


class BaseBackend(ABC):
    """
    Abstract base class for backend collaborators.

    Authentication and any low-level HTTP concerns belong to the concrete
    backend. Tool handlers only see the `BackendResponse` triple.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the backend with configuration.

        Args:
            config: Backend-specific configuration dictionary
        """
        self.config = config

    @abstractmethod
    async def call(self, capability: str, params: Dict[str, Any]) -> BackendResponse:
        """
        Invoke one remote capability.

        Args:
            capability: Capability name (see endpoints.ENDPOINTS)
            params: Request parameters; path placeholders are filled from here

        Returns:
            BackendResponse with the raw payload or error detail
        """
        pass

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """
        Get the backend type identifier (e.g., 'ghl').

        Returns:
            Backend type string
        """
        pass

    async def close(self) -> None:
        """Release any network resources held by the backend."""
        return None
