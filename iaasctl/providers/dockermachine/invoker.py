"""Driver invoker backed by the docker-machine CLI.

Each invoker owns a scratch storage directory passed to docker-machine with
``--storage-path``. The certificates and the host configuration produced
there are copied into the returned Machine before the directory is released
by ``close()``, so a later delete can rebuild the host from
``Machine.custom_data`` in a fresh scratch area.
"""

import json
import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional

from iaasctl.domain.core.exceptions import CommandFailedError
from iaasctl.domain.machine.exceptions import MachineCreationError, MachineDeletionError
from iaasctl.domain.machine.machine_aggregate import DEFAULT_DOCKER_PORT, Machine
from iaasctl.domain.provider.exceptions import InvokerInitError
from iaasctl.infrastructure.context import OperationContext
from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.process.runner import CommandRunner

from .config import DockerMachineConfig

CA_FILES = ("ca.pem", "ca-key.pem")
HOST_CONFIG_FILE = "config.json"
STORAGE_PREFIX = "iaasctl-machine-"
# Provider-level params, mapped to --driver and --engine-* or not meant for the driver
RESERVED_OPTION_KEYS = frozenset({"driver", "pool", "docker-install-url", "insecure-registry"})


def render_driver_flags(opts: Dict[str, Any]) -> List[str]:
    """
    Turn a driver option map into docker-machine flags.

    ``True`` renders a bare flag, ``False`` and ``None`` are skipped, lists
    repeat the flag and every other value is passed as a string.
    """
    flags = []
    for key in sorted(opts):
        value = opts[key]
        flag = key if key.startswith("-") else f"--{key}"
        if value is None or value is False:
            continue
        if value is True:
            flags.append(flag)
        elif isinstance(value, (list, tuple)):
            for item in value:
                flags.extend([flag, str(item)])
        else:
            flags.extend([flag, str(value)])
    return flags


class DockerMachine:
    """Creates and destroys machines through docker-machine."""

    def __init__(self, config: DockerMachineConfig, runner: Optional[CommandRunner] = None):
        """
        Initialize the invoker and its scratch storage.

        Args:
            config: Invoker configuration
            runner: Command runner, a fresh CommandRunner by default

        Raises:
            InvokerInitError: If the scratch area or the CA staging fails
        """
        self.config = config
        self.runner = runner or CommandRunner()
        self.logger = get_logger(__name__)
        self._closed = False
        try:
            self.storage_path = tempfile.mkdtemp(prefix=STORAGE_PREFIX, dir=config.storage_root)
        except OSError as e:
            raise InvokerInitError(f"cannot create scratch storage: {e}") from e
        if config.ca_path:
            try:
                self._stage_ca(config.ca_path)
            except Exception:
                self.close()
                raise

    def _stage_ca(self, ca_path: str) -> None:
        certs_dir = os.path.join(self.storage_path, "certs")
        os.makedirs(certs_dir, exist_ok=True)
        for file_name in CA_FILES:
            source = os.path.join(ca_path, file_name)
            try:
                shutil.copy2(source, os.path.join(certs_dir, file_name))
            except OSError as e:
                raise InvokerInitError(f"cannot stage {source}: {e}") from e

    def __enter__(self) -> "DockerMachine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the scratch storage. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            shutil.rmtree(self.storage_path)
        except FileNotFoundError:
            pass
        self.logger.debug(f"Released docker-machine storage {self.storage_path}")

    def _base_argv(self) -> List[str]:
        return [self.config.binary, "--storage-path", self.storage_path]

    def _host_dir(self, name: str) -> str:
        return os.path.join(self.storage_path, "machines", name)

    def _read_text(self, *parts: str) -> Optional[str]:
        path = os.path.join(self.storage_path, *parts)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def _read_host_config(self, name: str) -> Dict[str, Any]:
        content = self._read_text("machines", name, HOST_CONFIG_FILE)
        if not content:
            return {}
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            self.logger.warning(f"Unreadable host configuration for machine {name}")
            return {}

    def _partial_machine(self, name: str, driver: str) -> Optional[Machine]:
        # Cloud resources may exist as soon as docker-machine created the host directory
        if not os.path.isdir(self._host_dir(name)):
            return None
        try:
            custom_data = self._read_host_config(name)
        except OSError as e:
            self.logger.warning(f"Cannot read host configuration of partial machine {name}: {e}")
            custom_data = {}
        return Machine(
            name=name,
            creation_params={"driver": driver},
            ca_cert_path=self.config.ca_path or None,
            custom_data=custom_data,
        )

    def create_machine(self,
                       name: str,
                       driver: str,
                       opts: Dict[str, Any],
                       context: Optional[OperationContext] = None) -> Machine:
        """
        Create a machine with docker-machine.

        Args:
            name: Machine (host) name
            driver: docker-machine driver name
            opts: Driver options rendered as ``--key value`` flags, reserved
                provider keys excluded
            context: Cancellation context

        Returns:
            The created machine with its address and TLS material

        Raises:
            MachineCreationError: With ``machine`` set when a partial host may exist
            OperationCancelledError: If the context was cancelled or timed out
        """
        argv = self._base_argv() + ["create", "--driver", driver]
        if self.config.docker_engine_install_url:
            argv += ["--engine-install-url", self.config.docker_engine_install_url]
        if self.config.insecure_registry:
            argv += ["--engine-insecure-registry", self.config.insecure_registry]
        argv += render_driver_flags({k: v for k, v in opts.items() if k not in RESERVED_OPTION_KEYS})
        argv.append(name)

        self.logger.info(f"Creating machine {name} with driver {driver}")
        try:
            self.runner.run(argv, context=context, timeout=self.config.timeout, check=True)
            result = self.runner.run(
                self._base_argv() + ["ip", name], context=context, timeout=self.config.timeout, check=True
            )
        except CommandFailedError as e:
            raise MachineCreationError(name, str(e), machine=self._partial_machine(name, driver)) from e

        address = result.stdout.strip()
        if not address:
            raise MachineCreationError(
                name, "docker-machine returned no address", machine=self._partial_machine(name, driver)
            )

        try:
            ca_cert = self._read_text("certs", "ca.pem")
            client_cert = self._read_text("certs", "cert.pem")
            client_key = self._read_text("certs", "key.pem")
            custom_data = self._read_host_config(name)
        except OSError as e:
            raise MachineCreationError(
                name, f"cannot read machine material: {e}", machine=self._partial_machine(name, driver)
            ) from e

        return Machine(
            name=name,
            address=address,
            port=DEFAULT_DOCKER_PORT,
            protocol="https",
            creation_params={"driver": driver},
            ca_cert_path=self.config.ca_path or None,
            ca_cert=ca_cert,
            client_cert=client_cert,
            client_key=client_key,
            custom_data=custom_data,
        )

    def delete_machine(self, machine: Machine, context: Optional[OperationContext] = None) -> None:
        """
        Destroy a machine. A machine that no longer exists counts as deleted.

        Raises:
            MachineDeletionError: If docker-machine fails to remove the host
            OperationCancelledError: If the context was cancelled or timed out
        """
        if machine.custom_data:
            host_dir = self._host_dir(machine.name)
            os.makedirs(host_dir, exist_ok=True)
            with open(os.path.join(host_dir, HOST_CONFIG_FILE), "w", encoding="utf-8") as f:
                json.dump(machine.custom_data, f)

        self.logger.info(f"Removing machine {machine.name}")
        result = self.runner.run(
            self._base_argv() + ["rm", "-y", machine.name], context=context, timeout=self.config.timeout
        )
        if result.ok:
            return
        output = f"{result.stdout}\n{result.stderr}".lower()
        if "does not exist" in output or "not found" in output:
            self.logger.info(f"Machine {machine.name} already gone")
            return
        raise MachineDeletionError(machine.name, (result.stderr or result.stdout).strip())
