"""Docker machine provider registration."""

from typing import TYPE_CHECKING, Optional

from iaasctl.infrastructure.logging.logger import get_logger

from .provider import KIND, DockerMachineIaaS, InvokerFactory

if TYPE_CHECKING:
    from iaasctl.config.manager import ConfigurationManager
    from iaasctl.domain.machine.repository import MachineCatalog
    from iaasctl.infrastructure.registry.provider_registry import ProviderRegistry


def create_dockermachine_factory(config_manager: 'ConfigurationManager',
                                 catalog: 'MachineCatalog',
                                 invoker_factory: Optional[InvokerFactory] = None):
    """Build the factory turning an instance name into a DockerMachineIaaS."""
    def factory(instance_name: str) -> DockerMachineIaaS:
        return DockerMachineIaaS(instance_name, config_manager, catalog, invoker_factory)
    return factory


def register_dockermachine_provider(registry: 'ProviderRegistry',
                                    config_manager: 'ConfigurationManager',
                                    catalog: 'MachineCatalog',
                                    invoker_factory: Optional[InvokerFactory] = None) -> None:
    """Register the ``dockermachine`` kind with the provider registry.

    Args:
        registry: Provider registry, not yet sealed
        config_manager: Configuration read by every provider instance
        catalog: Catalog shared by every provider instance
        invoker_factory: Optional invoker factory, DockerMachine by default
    """
    logger = get_logger(__name__)
    try:
        registry.register(KIND, create_dockermachine_factory(config_manager, catalog, invoker_factory))
    except Exception as e:
        logger.error(f"Failed to register {KIND} provider: {e}")
        raise
    logger.info(f"{KIND} provider registered")
