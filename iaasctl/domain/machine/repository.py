"""Machine catalog interface - contract for machine data access."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .machine_aggregate import Machine


class MachineCatalog(ABC):
    """Stores machines keyed by their unique name.

    ``put`` never overwrites: a name already present raises
    :class:`NameTakenError`. ``list`` followed by ``put`` is not atomic.
    """

    @abstractmethod
    def list(self) -> List[Machine]:
        """Return every catalogued machine."""

    @abstractmethod
    def put(self, machine: Machine) -> None:
        """Insert a new machine, raising NameTakenError on collision."""

    @abstractmethod
    def get(self, name: str) -> Machine:
        """Return the machine called ``name`` or raise MachineNotFoundError."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the machine called ``name`` or raise MachineNotFoundError."""

    def find_by_address(self, address: str) -> Optional[Machine]:
        """Find machine by network address."""
        for machine in self.list():
            if machine.address == address:
                return machine
        return None

    def count(self) -> int:
        return len(self.list())
