from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from iaasctl.domain.machine.exceptions import MachineValidationError

DEFAULT_DOCKER_PORT = 2376


@dataclass
class Machine:
    """Machine aggregate root.

    Metadata record of a provisioned docker host. ``creation_params`` are the
    exact options the machine was created with and always carry ``driver``.
    """
    name: str
    address: str = ""
    port: int = DEFAULT_DOCKER_PORT
    protocol: str = "https"
    creation_params: Dict[str, str] = field(default_factory=dict)
    ca_cert_path: Optional[str] = None
    provider_name: str = ""
    ca_cert: Optional[str] = None
    client_cert: Optional[str] = None
    client_key: Optional[str] = None
    custom_data: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise MachineValidationError("Machine name must not be empty")

    @property
    def driver(self) -> Optional[str]:
        return self.creation_params.get("driver")

    @property
    def url(self) -> str:
        """Docker API endpoint of the machine."""
        return f"{self.protocol}://{self.address}:{self.port}"

    def validate_persisted(self) -> None:
        """Check invariants that hold for every catalogued machine."""
        if "driver" not in self.creation_params:
            raise MachineValidationError(
                f"Machine {self.name} has no driver in its creation params",
                details={"name": self.name},
            )
        if "name" in self.creation_params:
            raise MachineValidationError(
                f"Machine {self.name} leaks 'name' into its creation params",
                details={"name": self.name},
            )

    def to_dict(self, include_secrets: bool = True) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "address": self.address,
            "port": self.port,
            "protocol": self.protocol,
            "creation_params": dict(self.creation_params),
            "ca_cert_path": self.ca_cert_path,
            "provider_name": self.provider_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_secrets:
            data.update({
                "ca_cert": self.ca_cert,
                "client_cert": self.client_cert,
                "client_key": self.client_key,
                "custom_data": dict(self.custom_data),
            })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Machine:
        created_at = (
            datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(timezone.utc)
        )
        return cls(
            name=data["name"],
            address=data.get("address", ""),
            port=int(data.get("port", DEFAULT_DOCKER_PORT)),
            protocol=data.get("protocol", "https"),
            creation_params=dict(data.get("creation_params") or {}),
            ca_cert_path=data.get("ca_cert_path"),
            provider_name=data.get("provider_name", ""),
            ca_cert=data.get("ca_cert"),
            client_cert=data.get("client_cert"),
            client_key=data.get("client_key"),
            custom_data=dict(data.get("custom_data") or {}),
            created_at=created_at,
        )
