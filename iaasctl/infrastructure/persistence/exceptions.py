# iaasctl/infrastructure/persistence/exceptions.py
from iaasctl.domain.core.exceptions import DomainException


class PersistenceError(DomainException):
    """Base exception for persistence-related errors."""

    default_code = "PERSISTENCE_ERROR"


class StorageError(PersistenceError):
    """Raised when the backing store cannot be read or written."""

    default_code = "STORAGE_ERROR"
