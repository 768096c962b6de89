# iaasctl/domain/core/exceptions.py
from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    default_code = "DOMAIN_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for CLI and log output."""
        result = {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.__cause__ is not None:
            result["cause"] = str(self.__cause__)
        return result


class ConfigurationError(DomainException):
    """Raised when there's an issue with configuration."""

    default_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None, error_code: Optional[str] = None):
        super().__init__(message, error_code, {"missing_fields": missing_fields or []})
        self.missing_fields = missing_fields or []


class ConfigurationKeyNotFoundError(ConfigurationError):
    """Raised when a configuration key is absent."""

    def __init__(self, key: str):
        super().__init__(f"Configuration key '{key}' not found", [key], "CONFIG_KEY_NOT_FOUND")
        self.key = key


class ValidationError(DomainException):
    """Raised when domain validation fails."""

    default_code = "VALIDATION_ERROR"


class ResourceNotFoundError(DomainException):
    """Raised when a requested resource cannot be found."""

    default_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str, error_code: Optional[str] = None):
        super().__init__(
            f"{resource_type} {resource_id} not found",
            error_code,
            {"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ExternalOperationError(DomainException):
    """Raised when an external system (CLI, cloud driver) fails.

    These errors are transient from the caller's point of view: the original
    cause is kept in ``__cause__`` and the caller decides whether to retry.
    """

    default_code = "EXTERNAL_OPERATION_FAILED"

    def __init__(self, operation: str, message: str, details: Optional[Dict[str, Any]] = None,
                 error_code: Optional[str] = None):
        super().__init__(f"{operation} failed: {message}", error_code, details)
        self.operation = operation


class CommandFailedError(ExternalOperationError):
    """Raised when an external command exits with a non-zero status."""

    default_code = "COMMAND_FAILED"

    def __init__(self, argv: List[str], returncode: int, stderr: str = "", stdout: str = ""):
        output = (stderr or stdout).strip()
        super().__init__(
            f"command {argv[0]}",
            f"exit status {returncode}: {output}" if output else f"exit status {returncode}",
            {"argv": list(argv), "returncode": returncode},
        )
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout


class OperationCancelledError(DomainException):
    """Raised when an operation was cancelled or ran past its deadline."""

    default_code = "CANCELLED"

    def __init__(self, operation: str, reason: str = "cancelled"):
        super().__init__(f"{operation} {reason}", details={"operation": operation})
        self.operation = operation
        self.reason = reason


class RegistrySealedError(ConfigurationError):
    """Raised when a registry is written after startup."""

    def __init__(self, registry: str, key: str):
        super().__init__(
            f"Cannot register '{key}': {registry} registry is sealed",
            error_code="REGISTRY_SEALED",
        )
        self.registry = registry
        self.key = key
