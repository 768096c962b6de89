"""Machine catalog implementations."""

from iaasctl.config.schemas import CatalogConfig
from iaasctl.domain.machine.repository import MachineCatalog

from .json_catalog import JSONMachineCatalog
from .memory_catalog import InMemoryMachineCatalog


def create_machine_catalog(config: CatalogConfig) -> MachineCatalog:
    """Build the catalog implementation selected by configuration."""
    if config.type == "json":
        return JSONMachineCatalog(config.path)
    return InMemoryMachineCatalog()


__all__ = ["InMemoryMachineCatalog", "JSONMachineCatalog", "create_machine_catalog"]
