"""Heal domain exceptions."""

from iaasctl.domain.core.exceptions import ExternalOperationError, ResourceNotFoundError


class HealerNotFoundError(ResourceNotFoundError):
    """Raised when no healer is registered under a name."""

    def __init__(self, name: str):
        super().__init__("Healer", name, "HEALER_NOT_FOUND")
        self.name = name


class ProbeFailedError(ExternalOperationError):
    """Raised when the cluster status cannot be read or lacks required data."""

    default_code = "PROBE_FAILED"

    def __init__(self, message: str):
        super().__init__("cluster status probe", message)


class HealFailedError(ExternalOperationError):
    """Raised when a remediation command fails."""

    default_code = "HEAL_FAILED"

    def __init__(self, healer: str, message: str):
        super().__init__(f"heal {healer}", message, {"healer": healer})
        self.healer = healer
