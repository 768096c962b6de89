"""Registries populated during process initialisation."""

from .base_registry import BaseRegistry
from .healer_registry import HealerRegistry
from .provider_registry import ProviderRegistry

__all__ = ["BaseRegistry", "HealerRegistry", "ProviderRegistry"]
