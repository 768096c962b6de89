"""Domain port for IaaS provider operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from iaasctl.domain.machine.machine_aggregate import Machine


@dataclass(frozen=True)
class ProviderBinding:
    """Base kind and instance name of a configured provider.

    Per-instance configuration lives under ``iaas:<instance_name>`` and falls
    back to ``iaas:<base_kind>``.
    """
    base_kind: str
    instance_name: str

    @property
    def config_prefixes(self):
        if self.instance_name == self.base_kind:
            return (f"iaas:{self.base_kind}",)
        return (f"iaas:{self.instance_name}", f"iaas:{self.base_kind}")


class IaaSProvider(ABC):
    """Named, configured adapter that creates and destroys cloud machines."""

    @property
    @abstractmethod
    def binding(self) -> ProviderBinding:
        """Kind and instance name of this provider."""

    @property
    def name(self) -> str:
        return self.binding.instance_name

    @abstractmethod
    def create_machine(self, params: Dict[str, str], context=None) -> Machine:
        """Provision a machine from the given params."""

    @abstractmethod
    def delete_machine(self, machine: Machine, context=None) -> None:
        """Destroy a machine previously created by this provider."""

    @abstractmethod
    def describe(self) -> str:
        """Human documentation of required and optional params."""


def describe_binding(binding: Optional[ProviderBinding]) -> str:
    if binding is None:
        return "<unbound>"
    if binding.base_kind == binding.instance_name:
        return binding.base_kind
    return f"{binding.instance_name} ({binding.base_kind})"
