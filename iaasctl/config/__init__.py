"""Configuration package with clean public API."""

from .loader import ConfigurationLoader, expand_env_vars
from .manager import ConfigurationManager
from .provider_config import NamedProviderConfig
from .schemas import AppConfig, CatalogConfig, HealConfig, LoggingConfig, validate_config

__all__ = [
    "AppConfig",
    "CatalogConfig",
    "HealConfig",
    "LoggingConfig",
    "validate_config",
    "ConfigurationLoader",
    "ConfigurationManager",
    "NamedProviderConfig",
    "expand_env_vars",
]
