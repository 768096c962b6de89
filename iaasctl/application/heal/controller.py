"""Heal controller - runs registered healers one at a time per name."""

import threading
from typing import Dict, Optional, Union

from iaasctl.domain.core.exceptions import DomainException
from iaasctl.domain.heal.healer_port import HealResult
from iaasctl.infrastructure.context import OperationContext
from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.registry.healer_registry import HealerRegistry


class HealController:
    """
    Entry point for periodic healing.

    Two runs of the same healer never overlap; different healers may run in
    parallel. Scheduling is left to the caller.
    """

    def __init__(self, registry: HealerRegistry):
        self.registry = registry
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()
        self.logger = get_logger(__name__)

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.Lock()
            return lock

    def check(self, name: str, context: Optional[OperationContext] = None) -> bool:
        """Run only the probe of healer ``name``."""
        healer = self.registry.get(name)
        return healer.needs_heal(context)

    def run(self, name: str, context: Optional[OperationContext] = None) -> HealResult:
        """
        Run healer ``name`` once.

        Raises:
            HealerNotFoundError: If no healer is registered under ``name``
            HealFailedError, ProbeFailedError: If the remediation failed
        """
        healer = self.registry.get(name)
        with self._lock_for(name):
            self.logger.debug(f"Running healer {name}")
            healed = healer.heal(context)
        if healed:
            self.logger.info(f"Healer {name} healed")
        return HealResult(name=name, healed=healed)

    def run_all(self, context: Optional[OperationContext] = None) -> Dict[str, Union[HealResult, DomainException]]:
        """Run every registered healer once, collecting failures per name."""
        results: Dict[str, Union[HealResult, DomainException]] = {}
        for name in self.registry.get_registered_names():
            try:
                results[name] = self.run(name, context)
            except DomainException as e:
                self.logger.error(f"Healer {name} failed: {e}")
                results[name] = e
        return results
