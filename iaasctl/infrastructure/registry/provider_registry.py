"""Provider Registry - registry of IaaS provider factories.

Maps a provider kind (``dockermachine``) to a factory taking an instance
name. Instances are resolved by kind and name; custom instances declare
their kind in configuration under ``iaas:<instance>:provider``.
"""

from typing import Callable, List, Optional

from iaasctl.config.manager import ConfigurationManager
from iaasctl.domain.provider.exceptions import ProviderUnknownError
from iaasctl.domain.provider.provider_port import IaaSProvider

from .base_registry import BaseRegistry

ProviderFactory = Callable[[str], IaaSProvider]


class ProviderRegistry(BaseRegistry[ProviderFactory]):
    """Registry for IaaS provider factories."""

    registry_name = "provider"

    def register(self, kind: str, factory: ProviderFactory) -> None:
        """
        Register a provider kind with its factory.

        Args:
            kind: Provider kind identifier (e.g. 'dockermachine')
            factory: Callable building a provider from an instance name

        Raises:
            ConfigurationError: If the kind is already registered
            RegistrySealedError: If called after startup
        """
        self._register(kind, factory)

    def resolve(self, kind: str, instance_name: Optional[str] = None) -> IaaSProvider:
        """
        Build the provider instance ``instance_name`` of kind ``kind``.

        Raises:
            ProviderUnknownError: If the kind is not registered
        """
        factory = self._lookup(kind)
        if factory is None:
            raise ProviderUnknownError(kind, self.get_registered_kinds())
        return factory(instance_name or kind)

    def resolve_instance(self, instance_name: str, config: ConfigurationManager) -> IaaSProvider:
        """Resolve a named instance, reading its kind from ``iaas:<instance>:provider``."""
        kind = config.get_optional(f"iaas:{instance_name}:provider") or instance_name
        return self.resolve(str(kind), instance_name)

    def get_registered_kinds(self) -> List[str]:
        return self.get_registered_names()
