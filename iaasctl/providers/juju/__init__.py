"""juju cluster probe and healers."""

from .bootstrap import BOOTSTRAP_HEALER, BootstrapHealer, register_juju_healers
from .status import ClusterProbe, ClusterReport, ClusterState, parse_status

__all__ = [
    "BOOTSTRAP_HEALER",
    "BootstrapHealer",
    "ClusterProbe",
    "ClusterReport",
    "ClusterState",
    "parse_status",
    "register_juju_healers",
]
