"""
Configuration management for the GHL backend.

This module handles loading backend settings from environment variables and
the YAML configuration file. The result is read once at process start and
treated as read-only afterwards.
"""

import os
import yaml
import logging
from typing import Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://services.leadconnectorhq.com"
DEFAULT_API_VERSION = "2021-07-28"
DEFAULT_TIMEOUT = 30

# config key -> environment variable
ENV_MAPPINGS: Dict[str, str] = {
    "api_key": "GHL_API_KEY",
    "location_id": "GHL_LOCATION_ID",
    "base_url": "GHL_BASE_URL",
    "api_version": "GHL_API_VERSION",
    "timeout": "GHL_TIMEOUT",
}

_NUMERIC_KEYS = ("timeout",)


def default_config_path() -> Path:
    """Path of the YAML config file (GHL_CONFIG_FILE or config/server.yaml)."""
    env_path = os.getenv("GHL_CONFIG_FILE")
    if env_path:
        return Path(env_path)
    project_root = Path(__file__).parent.parent.parent.parent
    return project_root / "config" / "server.yaml"


def load_yaml_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """Load the whole YAML config file.

    Args:
        config_file: Optional path; defaults to default_config_path()

    Returns:
        Parsed configuration, or an empty dict if the file is missing or broken
    """
    path = Path(config_file) if config_file else default_config_path()
    if not path.exists():
        logger.info(f"Config file not found: {path}, using defaults")
        return {}
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {path}")
        return data
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config file {path}: {e}")
        return {}


class BackendConfig:
    """
    Configuration manager for the GHL backend.

    Supports loading configuration from:
    1. Environment variables (highest priority)
    2. The `ghl` section of the YAML configuration file
    3. Default values
    """

    def __init__(self, config_file: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to YAML config file
            data: Already-parsed configuration (skips reading the file)
        """
        if data is None:
            data = load_yaml_config(config_file)
        self._config: Dict[str, Any] = data

    def get_backend_config(self, use_env: bool = True) -> Dict[str, Any]:
        """
        Get the effective backend configuration.

        Args:
            use_env: Whether to override with environment variables

        Returns:
            Configuration dictionary with defaults filled in
        """
        config: Dict[str, Any] = {
            "base_url": DEFAULT_BASE_URL,
            "api_version": DEFAULT_API_VERSION,
            "timeout": DEFAULT_TIMEOUT,
        }
        config.update(self._config.get("ghl", {}) or {})

        if use_env:
            config = self._apply_env_overrides(config)

        return config

    def _apply_env_overrides(self, base_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variable overrides to configuration.

        Args:
            base_config: Base configuration from YAML

        Returns:
            Configuration with environment variable overrides applied
        """
        config = base_config.copy()

        for config_key, env_var in ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue
            if config_key in _NUMERIC_KEYS:
                try:
                    config[config_key] = float(env_value)
                except ValueError:
                    logger.warning(
                        f"Invalid {env_var} value '{env_value}', "
                        f"using {config.get(config_key)}"
                    )
            else:
                config[config_key] = env_value

        return config

    def get_default_location(self) -> Optional[str]:
        """
        Get the process-wide default location (tenant) id.

        Returns:
            Location id, or None when not configured
        """
        location = self.get_backend_config().get("location_id")
        return location or None