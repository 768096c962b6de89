"""IaaS provider creating docker hosts with docker-machine."""

from .config import DockerMachineConfig
from .invoker import DockerMachine, render_driver_flags
from .provider import KIND, DockerMachineIaaS
from .registration import register_dockermachine_provider

__all__ = [
    "KIND",
    "DockerMachine",
    "DockerMachineConfig",
    "DockerMachineIaaS",
    "register_dockermachine_provider",
    "render_driver_flags",
]
