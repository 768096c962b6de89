"""Tests for the Machine aggregate."""

import pytest

from iaasctl.domain.machine.exceptions import MachineValidationError
from iaasctl.domain.machine.machine_aggregate import DEFAULT_DOCKER_PORT, Machine


class TestMachine:
    """Test machine validation and serialization."""

    def test_defaults(self):
        machine = Machine(name="dev-1", address="10.0.0.5")
        assert machine.port == DEFAULT_DOCKER_PORT
        assert machine.protocol == "https"
        assert machine.url == "https://10.0.0.5:2376"
        assert machine.driver is None

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_is_rejected(self, name):
        with pytest.raises(MachineValidationError):
            Machine(name=name)

    def test_persisted_machine_requires_driver(self):
        machine = Machine(name="dev-1", creation_params={"pool": "dev"})
        with pytest.raises(MachineValidationError):
            machine.validate_persisted()

    def test_persisted_machine_must_not_carry_name(self):
        machine = Machine(name="dev-1", creation_params={"driver": "amazonec2", "name": "dev-1"})
        with pytest.raises(MachineValidationError):
            machine.validate_persisted()

    def test_from_dict_restores_to_dict(self):
        """A machine read back from its dictionary keeps every field."""
        machine = Machine(
            name="dev-1",
            address="10.0.0.5",
            creation_params={"driver": "amazonec2", "pool": "dev"},
            ca_cert_path="/etc/ca",
            provider_name="ec2",
            ca_cert="ca",
            client_cert="cert",
            client_key="key",
            custom_data={"Driver": {"MachineName": "dev-1"}},
        )
        restored = Machine.from_dict(machine.to_dict())
        assert restored == machine

    def test_to_dict_without_secrets(self):
        machine = Machine(name="dev-1", client_key="key", custom_data={"a": 1})
        data = machine.to_dict(include_secrets=False)
        assert "client_key" not in data
        assert "custom_data" not in data
        assert data["name"] == "dev-1"
