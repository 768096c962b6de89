"""IaaS provider of kind ``dockermachine``."""

import copy
from typing import Any, Callable, Dict, Optional

from iaasctl.config.manager import ConfigurationManager
from iaasctl.config.provider_config import NamedProviderConfig
from iaasctl.domain.core.exceptions import ConfigurationError, ConfigurationKeyNotFoundError
from iaasctl.domain.machine.exceptions import (
    CatalogListFailedError,
    MachineCleanupError,
    MachineCreationError,
    MachineNotFoundError,
    NameTakenError,
)
from iaasctl.domain.machine.machine_aggregate import Machine
from iaasctl.domain.machine.repository import MachineCatalog
from iaasctl.domain.provider.exceptions import BadParamsError, DriverNotSetError, InvokerInitError
from iaasctl.domain.provider.provider_port import IaaSProvider, ProviderBinding, describe_binding
from iaasctl.infrastructure.context import OperationContext
from iaasctl.infrastructure.logging.logger import get_logger

from .config import DockerMachineConfig
from .invoker import DockerMachine

KIND = "dockermachine"

InvokerFactory = Callable[[DockerMachineConfig], DockerMachine]

DESCRIPTION = """DockerMachine IaaS required params:
  driver=<driver>                         Driver to be used by docker machine. Can be set on the IaaS configuration.

Optional params:
  name=<name>                             Hostname for the created machine
  pool=<pool>                             Pool used to name the machine (<pool>-<n>) when name is not set
  docker-install-url=<docker-install-url> Remote script to be used for docker installation. Defaults to: http://get.docker.com. Can be set on the IaaS configuration.
  insecure-registry=<insecure-registry>   Registry to be added as insecure-registry to the docker engine. Can be set on the IaaS configuration.

Any other param is passed to the driver as --<param> <value>.
"""


class DockerMachineIaaS(IaaSProvider):
    """
    Provider creating docker hosts through docker-machine drivers.

    Params win over configured defaults; the ``name`` param is consumed and
    never reaches the driver. A driver failure that leaves a partial host
    behind is compensated by deleting it before the invoker is released.
    """

    def __init__(self,
                 instance_name: str,
                 config_manager: ConfigurationManager,
                 catalog: MachineCatalog,
                 invoker_factory: Optional[InvokerFactory] = None):
        self._binding = ProviderBinding(base_kind=KIND, instance_name=instance_name)
        self.config = NamedProviderConfig(self._binding, config_manager)
        self.catalog = catalog
        self.invoker_factory = invoker_factory or DockerMachine
        self.logger = get_logger(__name__)

    @property
    def binding(self) -> ProviderBinding:
        return self._binding

    def describe(self) -> str:
        return DESCRIPTION

    def _param_or_config(self, key: str, params: Dict[str, str]) -> str:
        if key in params:
            return params[key]
        return self.config.get_optional_string(key)

    def _new_invoker(self, invoker_config: DockerMachineConfig) -> DockerMachine:
        try:
            return self.invoker_factory(invoker_config)
        except InvokerInitError:
            raise
        except Exception as e:
            raise InvokerInitError(str(e)) from e

    @staticmethod
    def _validate_params(params: Dict[str, str]) -> None:
        for key, value in params.items():
            if not isinstance(key, str) or not key:
                raise BadParamsError(f"Invalid param name {key!r}", str(key))
            if not isinstance(value, str):
                raise BadParamsError(f"Param '{key}' must be a string", key)

    def build_driver_opts(self, params: Dict[str, str]) -> Dict[str, Any]:
        """
        Overlay params on the configured ``driver:options``.

        Only string keys of the configured options are kept.
        """
        driver_opts: Dict[str, Any] = {}
        try:
            defaults = self.config.get("driver:options")
        except ConfigurationKeyNotFoundError:
            defaults = None
        if defaults is not None:
            if not isinstance(defaults, dict):
                raise ConfigurationError(f"driver:options of IaaS {self.name} must be a mapping")
            for key, value in defaults.items():
                if isinstance(key, str):
                    driver_opts[key] = copy.deepcopy(value)
                else:
                    self.logger.debug(f"Ignoring non-string driver option key {key!r} of IaaS {self.name}")
        driver_opts.update(params)
        return driver_opts

    def _resolve_name(self, params: Dict[str, str]) -> str:
        name = params.pop("name", None)
        if name:
            return name
        pool = params.get("pool", "")
        try:
            machines = self.catalog.list()
        except Exception as e:
            raise CatalogListFailedError(f"failed to list machines: {e}", pool) from e
        return f"{pool}-{len(machines) + 1}"

    def create_machine(self, params: Dict[str, str], context: Optional[OperationContext] = None) -> Machine:
        """
        Create a machine and add it to the catalog.

        Args:
            params: Creation params; the caller's mapping is left untouched
            context: Cancellation context for the driver calls

        Returns:
            The catalogued machine

        Raises:
            DriverNotSetError: If no driver is given or configured
            CatalogListFailedError: If the catalog cannot be read for naming
            InvokerInitError: If the invoker cannot be set up
            MachineCreationError: If the driver failed (partial hosts are removed)
            MachineCleanupError: If removing a partial host failed as well
            NameTakenError: If another machine took the name meanwhile
        """
        params = dict(params)
        self._validate_params(params)

        ca_path = self.config.get_optional_string("ca-path")
        driver = params.get("driver")
        if not driver:
            try:
                driver = self.config.get_string("driver:name")
            except ConfigurationKeyNotFoundError:
                raise DriverNotSetError(self.name) from None
        install_url = self._param_or_config("docker-install-url", params)
        insecure_registry = self._param_or_config("insecure-registry", params)

        name = self._resolve_name(params)
        driver_opts = self.build_driver_opts(params)
        creation_params = dict(params)
        creation_params["driver"] = driver

        invoker = self._new_invoker(DockerMachineConfig(
            ca_path=ca_path,
            insecure_registry=insecure_registry,
            docker_engine_install_url=install_url,
        ))
        with invoker:
            self.logger.info(f"Creating machine {name} on IaaS {describe_binding(self.binding)} with driver {driver}")
            try:
                machine = invoker.create_machine(name, driver, driver_opts, context)
            except MachineCreationError as e:
                if e.machine is not None:
                    self._compensate(invoker, e.machine, e)
                raise

            machine.creation_params = creation_params
            machine.provider_name = self.name
            machine.validate_persisted()
            try:
                self.catalog.put(machine)
            except NameTakenError as e:
                self._compensate(invoker, machine, e)
                raise

        self.logger.info(f"Machine {name} created at {machine.address}")
        return machine

    def _compensate(self, invoker: DockerMachine, machine: Machine, cause: Exception) -> None:
        """Delete a machine whose creation failed, keeping both causes on failure."""
        self.logger.warning(f"Removing machine {machine.name} after failed creation: {cause}")
        # The caller's context may already be done; cleanup gets its own
        try:
            invoker.delete_machine(machine, OperationContext.background())
        except Exception as cleanup_error:
            self.logger.error(f"Failed to remove failed machine {machine.name}: {cleanup_error}")
            raise MachineCleanupError(machine.name, cause, cleanup_error) from cause

    def delete_machine(self, machine: Machine, context: Optional[OperationContext] = None) -> None:
        """Destroy a machine and drop it from the catalog."""
        with self._new_invoker(DockerMachineConfig()) as invoker:
            invoker.delete_machine(machine, context)
        try:
            self.catalog.delete(machine.name)
        except MachineNotFoundError:
            self.logger.debug(f"Machine {machine.name} was not catalogued")
        self.logger.info(f"Machine {machine.name} deleted from IaaS {self.name}")
