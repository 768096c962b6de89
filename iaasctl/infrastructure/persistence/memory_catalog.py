"""In-memory machine catalog."""

import threading
from typing import Dict, List

from iaasctl.domain.machine.exceptions import MachineNotFoundError, NameTakenError
from iaasctl.domain.machine.machine_aggregate import Machine
from iaasctl.domain.machine.repository import MachineCatalog


class InMemoryMachineCatalog(MachineCatalog):
    """Catalog kept in a process-local dictionary."""

    def __init__(self):
        self._machines: Dict[str, Machine] = {}
        self._lock = threading.RLock()

    def list(self) -> List[Machine]:
        with self._lock:
            return list(self._machines.values())

    def put(self, machine: Machine) -> None:
        with self._lock:
            if machine.name in self._machines:
                raise NameTakenError(machine.name)
            self._machines[machine.name] = machine

    def get(self, name: str) -> Machine:
        with self._lock:
            try:
                return self._machines[name]
            except KeyError:
                raise MachineNotFoundError(name) from None

    def delete(self, name: str) -> None:
        with self._lock:
            if name not in self._machines:
                raise MachineNotFoundError(name)
            del self._machines[name]

    def count(self) -> int:
        with self._lock:
            return len(self._machines)
