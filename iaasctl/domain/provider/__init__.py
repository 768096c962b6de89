"""Provider bounded context - IaaS provider contracts."""

from .exceptions import BadParamsError, DriverNotSetError, InvokerInitError, ProviderUnknownError
from .provider_port import IaaSProvider, ProviderBinding

__all__ = [
    "IaaSProvider",
    "ProviderBinding",
    "ProviderUnknownError",
    "DriverNotSetError",
    "BadParamsError",
    "InvokerInitError",
]
