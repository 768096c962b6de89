"""Machine domain exceptions."""

from typing import Optional

from iaasctl.domain.core.exceptions import (
    DomainException,
    ExternalOperationError,
    ResourceNotFoundError,
    ValidationError,
)


class MachineNotFoundError(ResourceNotFoundError):
    """Raised when a machine is not found."""

    def __init__(self, name: str):
        super().__init__("Machine", name, "MACHINE_NOT_FOUND")
        self.name = name


class MachineValidationError(ValidationError):
    """Raised when machine validation fails."""


class NameTakenError(ValidationError):
    """Raised when a machine name is already present in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Machine name '{name}' is already taken", "NAME_TAKEN", {"name": name})
        self.name = name


class MachineCreationError(ExternalOperationError):
    """Raised when the driver fails to create a machine.

    ``machine`` holds the partially created machine when cloud resources may
    have been allocated before the failure, so the caller can destroy it.
    """

    default_code = "CREATE_FAILED"

    def __init__(self, name: str, message: str, machine=None):
        super().__init__(f"create machine {name}", message, {"name": name, "partial": machine is not None})
        self.name = name
        self.machine = machine


class MachineDeletionError(ExternalOperationError):
    """Raised when the driver fails to destroy a machine."""

    default_code = "DELETE_FAILED"

    def __init__(self, name: str, message: str):
        super().__init__(f"delete machine {name}", message, {"name": name})
        self.name = name


class MachineCleanupError(DomainException):
    """Raised when the compensating delete of a failed creation fails too.

    Both causes are kept: ``original`` is the error that made the creation
    fail, ``cleanup_error`` the one raised by the compensating delete.
    """

    def __init__(self, name: str, original: Exception, cleanup_error: Exception):
        super().__init__(
            f"failed to remove failed machine {name}: {cleanup_error} (creation error: {original})",
            "CLEANUP_FAILED",
            {"name": name, "original": str(original), "cleanup_error": str(cleanup_error)},
        )
        self.name = name
        self.original = original
        self.cleanup_error = cleanup_error


class CatalogListFailedError(ExternalOperationError):
    """Raised when the catalog cannot be listed for name synthesis."""

    default_code = "CATALOG_LIST_FAILED"

    def __init__(self, message: str, pool: Optional[str] = None):
        super().__init__("list machines", message, {"pool": pool})
