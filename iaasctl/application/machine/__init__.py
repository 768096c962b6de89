"""Machine application services."""

from .service import MachineService

__all__ = ["MachineService"]
