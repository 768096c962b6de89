"""Unified configuration management for the application."""
from __future__ import annotations

import copy
import threading
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from iaasctl.config.loader import ConfigurationLoader
from iaasctl.config.schemas import AppConfig
from iaasctl.domain.core.exceptions import ConfigurationError, ConfigurationKeyNotFoundError
from iaasctl.infrastructure.logging.logger import get_logger

logger = get_logger(__name__)

KEY_SEPARATOR = ":"
_MISSING = object()


class ConfigurationManager:
    """
    Configuration manager that serves as the single source of truth.

    Provides typed sections through ``app_config`` and hierarchical key
    lookups such as ``iaas:dockermachine:driver:name`` through ``get``.
    Configuration is loaded lazily on first access.
    """

    def __init__(self, config_file: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to a YAML or JSON configuration file
            data: Raw configuration to use instead of loading a file
        """
        self._config_file = config_file
        self._initial_data = copy.deepcopy(data) if data is not None else None
        self._lock = threading.RLock()
        self._raw: Optional[Dict[str, Any]] = None
        self._app_config: Optional[AppConfig] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ConfigurationManager:
        return cls(data=data)

    def _ensure_loaded(self) -> None:
        if self._app_config is not None:
            return
        with self._lock:
            if self._app_config is not None:
                return
            if self._initial_data is not None:
                raw = ConfigurationLoader.apply_environment_overrides(self._initial_data)
            else:
                raw = ConfigurationLoader.load(self._config_file)
            try:
                app_config = AppConfig(**raw)
            except PydanticValidationError as e:
                raise ConfigurationError(f"Invalid configuration: {e}") from e
            raw["iaas"] = app_config.iaas
            self._raw = raw
            self._app_config = app_config
            logger.info("Configuration loaded successfully")

    @property
    def app_config(self) -> AppConfig:
        """Typed application configuration."""
        self._ensure_loaded()
        return self._app_config

    def get_raw_config(self) -> Dict[str, Any]:
        """Deep copy of the raw configuration tree."""
        self._ensure_loaded()
        return copy.deepcopy(self._raw)

    def get(self, key: str) -> Any:
        """
        Look up a colon-separated key in the configuration tree.

        Args:
            key: Key path such as ``iaas:dockermachine:driver:options``

        Returns:
            The value stored at that path (not copied)

        Raises:
            ConfigurationKeyNotFoundError: If any segment of the path is absent
        """
        self._ensure_loaded()
        node: Any = self._raw
        for segment in key.split(KEY_SEPARATOR):
            if not isinstance(node, dict) or segment not in node:
                raise ConfigurationKeyNotFoundError(key)
            node = node[segment]
        return node

    def get_string(self, key: str) -> str:
        """Look up a key whose value is a scalar, returned as a string."""
        value = self.get(key)
        if isinstance(value, (dict, list)):
            raise ConfigurationError(f"Configuration key '{key}' is not a scalar value")
        if value is None:
            raise ConfigurationKeyNotFoundError(key)
        return str(value)

    def get_optional(self, key: str, default: Any = None) -> Any:
        try:
            return self.get(key)
        except ConfigurationKeyNotFoundError:
            return default

    def has(self, key: str) -> bool:
        return self.get_optional(key, _MISSING) is not _MISSING

    def reload(self) -> None:
        """Reload configuration from sources on next access."""
        with self._lock:
            self._raw = None
            self._app_config = None
