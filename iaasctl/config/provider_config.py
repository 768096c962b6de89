"""Per-instance IaaS configuration with fallback to the base kind."""

from typing import Any

from iaasctl.config.manager import ConfigurationManager
from iaasctl.domain.core.exceptions import ConfigurationKeyNotFoundError
from iaasctl.domain.provider.provider_port import ProviderBinding


class NamedProviderConfig:
    """
    Configuration view of one provider instance.

    ``get("driver:name")`` looks up ``iaas:<instance>:driver:name`` and falls
    back to ``iaas:<base_kind>:driver:name``.
    """

    def __init__(self, binding: ProviderBinding, manager: ConfigurationManager):
        self.binding = binding
        self.manager = manager

    def get(self, key: str) -> Any:
        for prefix in self.binding.config_prefixes:
            try:
                return self.manager.get(f"{prefix}:{key}")
            except ConfigurationKeyNotFoundError:
                continue
        raise ConfigurationKeyNotFoundError(f"{self.binding.config_prefixes[0]}:{key}")

    def get_string(self, key: str) -> str:
        for prefix in self.binding.config_prefixes:
            try:
                return self.manager.get_string(f"{prefix}:{key}")
            except ConfigurationKeyNotFoundError:
                continue
        raise ConfigurationKeyNotFoundError(f"{self.binding.config_prefixes[0]}:{key}")

    def get_optional_string(self, key: str, default: str = "") -> str:
        try:
            return self.get_string(key)
        except ConfigurationKeyNotFoundError:
            return default
