"""Cluster status probe backed by ``juju status``."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import yaml

from iaasctl.domain.core.exceptions import CommandFailedError
from iaasctl.infrastructure.context import OperationContext
from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.process.runner import CommandRunner

BOOTSTRAP_MACHINE = "0"
DEFAULT_STATUS_TIMEOUT = 30.0

HEALTHY_AGENT_STATES = frozenset({"started", "running"})
DOWN_AGENT_STATES = frozenset({"not-started", "down", "error"})


class ClusterState(str, Enum):
    """Health of the cluster controller as seen from its bootstrap node."""
    HEALTHY = "healthy"
    BOOTSTRAP_DOWN = "bootstrap_down"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ClusterReport:
    """One reading of the cluster status."""
    state: ClusterState
    bootstrap_address: Optional[str] = None
    agent_state: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "bootstrap_address": self.bootstrap_address,
            "agent_state": self.agent_state,
            "error": self.error,
        }


def classify_agent_state(agent_state: Optional[str]) -> ClusterState:
    if agent_state in HEALTHY_AGENT_STATES:
        return ClusterState.HEALTHY
    if agent_state in DOWN_AGENT_STATES:
        return ClusterState.BOOTSTRAP_DOWN
    return ClusterState.UNKNOWN


def parse_status(output: str) -> ClusterReport:
    """
    Build a report from the YAML printed by ``juju status``.

    The bootstrap node is machine ``0``; its address is ``dns-name`` with
    ``ip-address`` as fallback.
    """
    try:
        document = yaml.safe_load(output)
    except yaml.YAMLError as e:
        return ClusterReport(ClusterState.UNKNOWN, error=f"unparseable status output: {e}")
    if not isinstance(document, dict):
        return ClusterReport(ClusterState.UNKNOWN, error="status output is not a mapping")

    machines = document.get("machines") or {}
    if not isinstance(machines, dict):
        return ClusterReport(ClusterState.UNKNOWN, error="status output has no machines mapping")
    # Unquoted machine ids load as integers
    bootstrap = machines.get(BOOTSTRAP_MACHINE, machines.get(int(BOOTSTRAP_MACHINE)))
    if not isinstance(bootstrap, dict):
        return ClusterReport(ClusterState.UNKNOWN, error="bootstrap machine not found")

    address = bootstrap.get("dns-name") or bootstrap.get("ip-address")
    agent_state = bootstrap.get("agent-state")
    if agent_state is not None:
        agent_state = str(agent_state)
    state = classify_agent_state(agent_state)
    error = None
    if state is ClusterState.UNKNOWN:
        error = f"unexpected bootstrap agent state: {agent_state}"
    return ClusterReport(
        state=state,
        bootstrap_address=str(address) if address else None,
        agent_state=agent_state,
        error=error,
    )


class ClusterProbe:
    """Reads the cluster status through the juju CLI. No retries."""

    def __init__(self,
                 binary: str = "juju",
                 timeout: float = DEFAULT_STATUS_TIMEOUT,
                 runner: Optional[CommandRunner] = None):
        self.binary = binary
        self.timeout = timeout
        self.runner = runner or CommandRunner()
        self.logger = get_logger(__name__)

    def status(self, context: Optional[OperationContext] = None) -> ClusterReport:
        """
        Run ``juju status`` once and classify the bootstrap node.

        A failing command is reported as UNKNOWN; cancellation and timeouts
        raise OperationCancelledError.
        """
        try:
            result = self.runner.run([self.binary, "status"], context=context, timeout=self.timeout)
        except CommandFailedError as e:
            report = ClusterReport(ClusterState.UNKNOWN, error=str(e))
        else:
            if result.ok:
                report = parse_status(result.stdout)
            else:
                report = ClusterReport(
                    ClusterState.UNKNOWN,
                    error=f"{self.binary} status exited with {result.returncode}: {result.stderr.strip()}",
                )
        self.logger.debug(f"Cluster status: {report.state.value} (bootstrap={report.bootstrap_address})")
        return report
