"""Docker machine invoker configuration."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_BINARY = "docker-machine"
DEFAULT_TIMEOUT = 600.0


@dataclass(frozen=True)
class DockerMachineConfig:
    """Construction parameters of a DockerMachine invoker.

    Empty strings mean "driver default".
    """
    ca_path: str = ""
    insecure_registry: str = ""
    docker_engine_install_url: str = ""
    binary: str = DEFAULT_BINARY
    timeout: float = DEFAULT_TIMEOUT
    storage_root: Optional[str] = None
