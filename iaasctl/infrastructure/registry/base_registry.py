"""Base registry with write-once, sealable semantics."""

import threading
from typing import Dict, Generic, List, Optional, TypeVar

from iaasctl.domain.core.exceptions import ConfigurationError, RegistrySealedError
from iaasctl.infrastructure.logging.logger import get_logger

T = TypeVar("T")


class BaseRegistry(Generic[T]):
    """
    Init-once table shared by the provider and healer registries.

    Entries are written during process initialisation, each key at most
    once. After ``seal()`` the table is read-only. Writers copy the table and
    swap the reference, so readers never take the lock.
    """

    registry_name = "base"

    def __init__(self):
        self._entries: Dict[str, T] = {}
        self._sealed = False
        self._registration_lock = threading.RLock()
        self._logger = get_logger(__name__)

    def _register(self, key: str, entry: T) -> None:
        if not key:
            raise ConfigurationError(f"Cannot register an empty name in the {self.registry_name} registry")
        with self._registration_lock:
            if self._sealed:
                raise RegistrySealedError(self.registry_name, key)
            if key in self._entries:
                raise ConfigurationError(f"{self.registry_name.capitalize()} '{key}' is already registered")
            entries = dict(self._entries)
            entries[key] = entry
            self._entries = entries
        self._logger.info(f"Registered {self.registry_name}: {key}")

    def _lookup(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    def seal(self) -> None:
        """Make the registry read-only."""
        with self._registration_lock:
            self._sealed = True
        self._logger.debug(f"{self.registry_name.capitalize()} registry sealed with {len(self._entries)} entries")

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    def is_registered(self, key: str) -> bool:
        return key in self._entries

    def get_registered_names(self) -> List[str]:
        return sorted(self._entries)
