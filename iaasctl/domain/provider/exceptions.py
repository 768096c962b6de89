"""Provider domain exceptions."""

from typing import List, Optional

from iaasctl.domain.core.exceptions import ConfigurationError, ExternalOperationError, ValidationError


class ProviderUnknownError(ConfigurationError):
    """Raised when a provider kind is not registered."""

    def __init__(self, kind: str, available: Optional[List[str]] = None):
        super().__init__(f"Unknown IaaS provider kind '{kind}'", error_code="PROVIDER_UNKNOWN")
        self.details["kind"] = kind
        self.details["available"] = available or []
        self.kind = kind


class DriverNotSetError(ConfigurationError):
    """Raised when neither params nor config provide a driver."""

    def __init__(self, provider_name: str):
        super().__init__(
            f"driver is mandatory for IaaS {provider_name}",
            missing_fields=["driver"],
            error_code="DRIVER_NOT_SET",
        )
        self.provider_name = provider_name


class BadParamsError(ValidationError):
    """Raised when creation params are malformed."""

    def __init__(self, message: str, param: Optional[str] = None):
        super().__init__(message, "BAD_PARAMS", {"param": param})
        self.param = param


class InvokerInitError(ExternalOperationError):
    """Raised when the driver invoker cannot be set up."""

    default_code = "INVOKER_INIT_FAILED"

    def __init__(self, message: str):
        super().__init__("initialize driver invoker", message)
