"""Configuration schemas."""

from .app_schema import AppConfig, CatalogConfig, HealConfig, validate_config
from .logging_schema import LoggingConfig

__all__ = ["AppConfig", "CatalogConfig", "HealConfig", "LoggingConfig", "validate_config"]
