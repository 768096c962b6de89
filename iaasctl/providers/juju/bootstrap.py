"""Healer restarting the machine agent of the juju bootstrap node."""

from typing import TYPE_CHECKING, List, Optional

from iaasctl.domain.core.exceptions import CommandFailedError
from iaasctl.domain.heal.exceptions import HealFailedError, ProbeFailedError
from iaasctl.domain.heal.healer_port import Healer
from iaasctl.infrastructure.context import OperationContext
from iaasctl.infrastructure.logging.logger import get_logger
from iaasctl.infrastructure.process.runner import CommandRunner

from .status import ClusterProbe, ClusterState

if TYPE_CHECKING:
    from iaasctl.config.schemas import HealConfig
    from iaasctl.infrastructure.registry.healer_registry import HealerRegistry

BOOTSTRAP_HEALER = "bootstrap"
SSH_USER = "ubuntu"
DEFAULT_SSH_TIMEOUT = 120.0


def restart_agent_argv(ssh_binary: str, address: str) -> List[str]:
    """Remote command restarting the machine agent on ``address``."""
    return [
        ssh_binary,
        "-o", "StrictHostKeyChecking no",
        "-q",
        "-l", SSH_USER,
        address,
        "sudo", "restart", "juju-machine-agent",
    ]


class BootstrapHealer(Healer):
    """
    Heals the bootstrap node when its agent is down.

    ``heal`` probes once to decide, then probes again for the address of the
    node it is about to restart.
    """

    def __init__(self,
                 probe: ClusterProbe,
                 runner: Optional[CommandRunner] = None,
                 ssh_binary: str = "ssh",
                 ssh_timeout: float = DEFAULT_SSH_TIMEOUT):
        self.probe = probe
        self.runner = runner or probe.runner
        self.ssh_binary = ssh_binary
        self.ssh_timeout = ssh_timeout
        self.logger = get_logger(__name__)

    def needs_heal(self, context: Optional[OperationContext] = None) -> bool:
        report = self.probe.status(context)
        if report.state is ClusterState.UNKNOWN:
            self.logger.warning(f"Bootstrap state unknown: {report.error}")
        return report.state is ClusterState.BOOTSTRAP_DOWN

    def heal(self, context: Optional[OperationContext] = None) -> bool:
        if not self.needs_heal(context):
            self.logger.debug("Bootstrap node is healthy")
            return False

        report = self.probe.status(context)
        if not report.bootstrap_address:
            raise ProbeFailedError(report.error or "bootstrap node has no address")

        self.logger.info(f"Healing bootstrap node {report.bootstrap_address}")
        argv = restart_agent_argv(self.ssh_binary, report.bootstrap_address)
        try:
            result = self.runner.run(argv, context=context, timeout=self.ssh_timeout)
        except CommandFailedError as e:
            raise HealFailedError(BOOTSTRAP_HEALER, str(e)) from e
        if not result.ok:
            raise HealFailedError(
                BOOTSTRAP_HEALER,
                f"{self.ssh_binary} exited with {result.returncode}: {result.stderr.strip()}",
            )
        self.logger.info(f"Restarted machine agent on {report.bootstrap_address}")
        return True


def register_juju_healers(registry: 'HealerRegistry',
                          heal_config: 'HealConfig',
                          runner: Optional[CommandRunner] = None) -> None:
    """Register the juju healers under their well-known names."""
    probe = ClusterProbe(heal_config.juju_binary, heal_config.status_timeout, runner)
    registry.register(
        BOOTSTRAP_HEALER,
        BootstrapHealer(probe, runner, heal_config.ssh_binary, heal_config.ssh_timeout),
    )
    get_logger(__name__).info("juju healers registered")
