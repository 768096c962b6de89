"""Healer Registry - named healers registered at startup."""

from iaasctl.domain.heal.exceptions import HealerNotFoundError
from iaasctl.domain.heal.healer_port import Healer

from .base_registry import BaseRegistry


class HealerRegistry(BaseRegistry[Healer]):
    """Registry of healers, append-only until sealed."""

    registry_name = "healer"

    def register(self, name: str, healer: Healer) -> None:
        self._register(name, healer)

    def get(self, name: str) -> Healer:
        healer = self._lookup(name)
        if healer is None:
            raise HealerNotFoundError(name)
        return healer
