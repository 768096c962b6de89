"""JSON file machine catalog."""

import threading
from typing import Any, Dict, List

from iaasctl.domain.machine.exceptions import MachineNotFoundError, NameTakenError
from iaasctl.domain.machine.machine_aggregate import Machine
from iaasctl.domain.machine.repository import MachineCatalog
from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.persistence.components import JSONDocumentFile

SCHEMA_VERSION = "1.0.0"


class JSONMachineCatalog(MachineCatalog):
    """
    Catalog stored as one JSON document.

    Every mutation re-reads the document while holding the file lock, so the
    name uniqueness check in ``put`` runs against the latest stored state,
    also when other processes write the same file.
    """

    def __init__(self, file_path: str, create_dirs: bool = True):
        """
        Initialize JSON catalog.

        Args:
            file_path: Path to JSON file
            create_dirs: Whether to create parent directories
        """
        self.document = JSONDocumentFile(file_path, create_dirs)
        self._lock = threading.RLock()
        self.logger = get_logger(__name__)

    def _load(self) -> Dict[str, Dict[str, Any]]:
        return self.document.load().get("machines", {})

    def _save(self, machines: Dict[str, Dict[str, Any]]) -> None:
        self.document.save({"schema_version": SCHEMA_VERSION, "machines": machines})

    def list(self) -> List[Machine]:
        with self._lock:
            return [Machine.from_dict(data) for data in self._load().values()]

    def put(self, machine: Machine) -> None:
        with self._lock, self.document.locked():
            machines = self._load()
            if machine.name in machines:
                raise NameTakenError(machine.name)
            machines[machine.name] = machine.to_dict()
            self._save(machines)
        self.logger.debug(f"Saved machine: {machine.name}")

    def get(self, name: str) -> Machine:
        with self._lock:
            data = self._load().get(name)
        if data is None:
            raise MachineNotFoundError(name)
        return Machine.from_dict(data)

    def delete(self, name: str) -> None:
        with self._lock, self.document.locked():
            machines = self._load()
            if name not in machines:
                raise MachineNotFoundError(name)
            del machines[name]
            self._save(machines)
        self.logger.debug(f"Deleted machine: {name}")
