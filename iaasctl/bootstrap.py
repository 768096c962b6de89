"""Application bootstrap - builds and wires the components at startup."""

from __future__ import annotations

from typing import Optional

from iaasctl.application.heal.controller import HealController
from iaasctl.application.machine.service import MachineService
from iaasctl.config.manager import ConfigurationManager
from iaasctl.infrastructure.logging.logger import get_logger, setup_logging
from iaasctl.infrastructure.persistence import create_machine_catalog
from iaasctl.infrastructure.process.runner import CommandRunner
from iaasctl.infrastructure.registry.healer_registry import HealerRegistry
from iaasctl.infrastructure.registry.provider_registry import ProviderRegistry
from iaasctl.providers.dockermachine.invoker import DockerMachine
from iaasctl.providers.dockermachine.registration import register_dockermachine_provider
from iaasctl.providers.juju.bootstrap import register_juju_healers


class Application:
    """
    Application context.

    Registries are filled and sealed by ``initialize``; afterwards they are
    read-only for the lifetime of the application.
    """

    def __init__(self,
                 config_path: Optional[str] = None,
                 config_manager: Optional[ConfigurationManager] = None,
                 provider_registry: Optional[ProviderRegistry] = None,
                 healer_registry: Optional[HealerRegistry] = None,
                 runner: Optional[CommandRunner] = None,
                 invoker_factory=None) -> None:
        self.config_path = config_path
        self.config_manager = config_manager or ConfigurationManager(config_path)
        self.provider_registry = provider_registry if provider_registry is not None else ProviderRegistry()
        self.healer_registry = healer_registry if healer_registry is not None else HealerRegistry()
        self.runner = runner
        self.invoker_factory = invoker_factory
        self.catalog = None
        self.machine_service: Optional[MachineService] = None
        self.heal_controller: Optional[HealController] = None
        self._initialized = False
        self.logger = get_logger(__name__)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self, configure_logging: bool = True, log_level: Optional[str] = None) -> Application:
        """
        Load configuration, register providers and healers, seal the registries.

        Raises:
            ConfigurationError: If the configuration is invalid or a registration fails
        """
        if self._initialized:
            return self

        app_config = self.config_manager.app_config
        if configure_logging:
            logging_config = app_config.logging
            if log_level:
                logging_config = logging_config.model_copy(update={"level": log_level.upper()})
            setup_logging(logging_config)

        self.catalog = create_machine_catalog(app_config.catalog)
        register_dockermachine_provider(
            self.provider_registry, self.config_manager, self.catalog, self._invoker_factory()
        )
        register_juju_healers(self.healer_registry, app_config.heal, self.runner)
        self.provider_registry.seal()
        self.healer_registry.seal()

        self.machine_service = MachineService(self.provider_registry, self.catalog, self.config_manager)
        self.heal_controller = HealController(self.healer_registry)
        self._initialized = True
        self.logger.info(
            f"iaasctl initialized with providers {self.provider_registry.get_registered_kinds()} "
            f"and healers {self.healer_registry.get_registered_names()}"
        )
        return self

    def _invoker_factory(self):
        if self.invoker_factory is not None:
            return self.invoker_factory
        if self.runner is None:
            return None
        runner = self.runner
        return lambda config: DockerMachine(config, runner)


def create_application(config_path: Optional[str] = None, log_level: Optional[str] = None) -> Application:
    """Create and initialize the application for one process."""
    return Application(config_path).initialize(log_level=log_level)
