"""Machine bounded context - machine domain logic."""

from .exceptions import (
    CatalogListFailedError,
    MachineCleanupError,
    MachineCreationError,
    MachineDeletionError,
    MachineNotFoundError,
    MachineValidationError,
    NameTakenError,
)
from .machine_aggregate import DEFAULT_DOCKER_PORT, Machine
from .repository import MachineCatalog

__all__ = [
    "Machine",
    "MachineCatalog",
    "DEFAULT_DOCKER_PORT",
    "MachineNotFoundError",
    "MachineValidationError",
    "NameTakenError",
    "MachineCreationError",
    "MachineDeletionError",
    "MachineCleanupError",
    "CatalogListFailedError",
]
