"""Machine application service."""

from typing import List, Optional

from iaasctl.config.manager import ConfigurationManager
from iaasctl.domain.machine.exceptions import MachineValidationError
from iaasctl.domain.machine.machine_aggregate import Machine
from iaasctl.domain.machine.repository import MachineCatalog
from iaasctl.domain.provider.provider_port import IaaSProvider
from iaasctl.infrastructure.context import OperationContext
from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.registry.provider_registry import ProviderRegistry


class MachineService:
    """Machine lifecycle operations addressed by IaaS instance name."""

    def __init__(self,
                 provider_registry: ProviderRegistry,
                 catalog: MachineCatalog,
                 config_manager: ConfigurationManager):
        self._registry = provider_registry
        self._catalog = catalog
        self._config = config_manager
        self._logger = get_logger(__name__)

    def get_provider(self, instance_name: str) -> IaaSProvider:
        return self._registry.resolve_instance(instance_name, self._config)

    def create_machine(self,
                       instance_name: str,
                       params: dict,
                       context: Optional[OperationContext] = None) -> Machine:
        """Create a machine on the IaaS instance ``instance_name``."""
        provider = self.get_provider(instance_name)
        try:
            return provider.create_machine(params, context)
        except Exception as e:
            self._logger.error(f"Failed to create machine on {instance_name}: {e}")
            raise

    def destroy_machine(self, name: str, context: Optional[OperationContext] = None) -> None:
        """Destroy a catalogued machine through the provider that created it."""
        machine = self._catalog.get(name)
        if not machine.provider_name:
            raise MachineValidationError(f"Machine {name} has no provider", details={"name": name})
        provider = self.get_provider(machine.provider_name)
        provider.delete_machine(machine, context)

    def list_machines(self) -> List[Machine]:
        return sorted(self._catalog.list(), key=lambda m: m.name)

    def get_machine(self, name: str) -> Machine:
        return self._catalog.get(name)

    def find_by_address(self, address: str) -> Optional[Machine]:
        return self._catalog.find_by_address(address)

    def list_instances(self) -> List[str]:
        """Configured IaaS instance names."""
        return sorted(self._config.app_config.iaas.keys())

    def describe(self, instance_name: str) -> str:
        return self.get_provider(instance_name).describe()
