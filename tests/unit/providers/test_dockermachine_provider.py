"""Tests for the docker-machine IaaS provider."""

from unittest.mock import Mock

import pytest

from iaasctl.domain.core.exceptions import CommandFailedError
from iaasctl.domain.machine.exceptions import (
    CatalogListFailedError,
    MachineCleanupError,
    MachineCreationError,
    MachineDeletionError,
    NameTakenError,
)
from iaasctl.domain.machine.machine_aggregate import Machine
from iaasctl.domain.machine.repository import MachineCatalog
from iaasctl.domain.provider.exceptions import BadParamsError, DriverNotSetError, InvokerInitError
from iaasctl.providers.dockermachine import DockerMachine, DockerMachineConfig, DockerMachineIaaS
from iaasctl.providers.dockermachine.registration import register_dockermachine_provider
from iaasctl.infrastructure.registry import ProviderRegistry
from tests.fakes import FakeDockerMachine

EC2_CONFIG = {
    "iaas": {
        "dockermachine": {
            "driver": {"name": "amazonec2", "options": {"region": "us-east-1"}},
        },
    },
}


def _created(name, driver, opts, context=None):
    return Machine(name=name, address="10.0.0.5", creation_params={"driver": driver})


class TestCreateMachine:
    """Option resolution, naming and cataloguing."""

    def test_happy_create(self, make_config, catalog, invoker_factory, mock_invoker):
        """Driver and options come from configuration, the name from the pool."""
        mock_invoker.create_machine.side_effect = _created
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        machine = provider.create_machine({"pool": "dev"})

        mock_invoker.create_machine.assert_called_once_with(
            "dev-1", "amazonec2", {"region": "us-east-1", "pool": "dev"}, None
        )
        assert [m.name for m in catalog.list()] == ["dev-1"]
        assert machine.creation_params == {"pool": "dev", "driver": "amazonec2"}
        assert machine.provider_name == "dockermachine"
        invoker_factory.assert_called_once_with(DockerMachineConfig())
        mock_invoker.__exit__.assert_called_once()

    def test_explicit_name_and_driver_from_params(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        provider = DockerMachineIaaS("dockermachine", make_config(), catalog, invoker_factory)

        machine = provider.create_machine({"driver": "virtualbox", "name": "box", "foo": "bar"})

        mock_invoker.create_machine.assert_called_once_with(
            "box", "virtualbox", {"driver": "virtualbox", "foo": "bar"}, None
        )
        assert machine.name == "box"
        assert "name" not in machine.creation_params

    def test_params_win_over_configured_options(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        provider.create_machine({"region": "sa-east-1", "name": "box"})

        _, _, opts, _ = mock_invoker.create_machine.call_args.args
        assert opts == {"region": "sa-east-1"}

    def test_non_string_option_keys_are_dropped(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        config = make_config({"iaas": {"dockermachine": {
            "driver": {"name": "amazonec2", "options": {"region": "us-east-1", 42: "x", True: "y"}},
        }}})
        provider = DockerMachineIaaS("dockermachine", config, catalog, invoker_factory)

        provider.create_machine({"name": "box"})

        _, _, opts, _ = mock_invoker.create_machine.call_args.args
        assert opts == {"region": "us-east-1"}

    def test_missing_driver_has_no_side_effects(self, make_config, invoker_factory):
        catalog = Mock(spec=MachineCatalog)
        provider = DockerMachineIaaS("dockermachine", make_config(), catalog, invoker_factory)

        with pytest.raises(DriverNotSetError):
            provider.create_machine({"pool": "dev"})

        invoker_factory.assert_not_called()
        catalog.list.assert_not_called()
        catalog.put.assert_not_called()

    def test_caller_params_are_not_mutated(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)
        params = {"name": "box", "pool": "dev"}

        provider.create_machine(params)

        assert params == {"name": "box", "pool": "dev"}

    def test_name_counts_existing_machines(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        catalog.put(Machine(name="other-1", creation_params={"driver": "amazonec2"}))
        catalog.put(Machine(name="other-2", creation_params={"driver": "amazonec2"}))
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        assert provider.create_machine({"pool": "dev"}).name == "dev-3"

    def test_catalog_list_failure(self, make_config, invoker_factory):
        catalog = Mock(spec=MachineCatalog)
        catalog.list.side_effect = OSError("disk gone")
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        with pytest.raises(CatalogListFailedError) as exc_info:
            provider.create_machine({"pool": "dev"})
        assert isinstance(exc_info.value.__cause__, OSError)
        invoker_factory.assert_not_called()

    def test_configured_engine_settings(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        config = make_config({"iaas": {"dockermachine": {
            "ca-path": "/etc/iaasctl/ca",
            "docker-install-url": "http://get.example.com",
            "insecure-registry": "registry.local:5000",
            "driver": {"name": "amazonec2"},
        }}})
        provider = DockerMachineIaaS("dockermachine", config, catalog, invoker_factory)

        provider.create_machine({"name": "box", "insecure-registry": "other.local"})

        invoker_factory.assert_called_once_with(DockerMachineConfig(
            ca_path="/etc/iaasctl/ca",
            insecure_registry="other.local",
            docker_engine_install_url="http://get.example.com",
        ))

    def test_named_instance_falls_back_to_base_configuration(self, make_config, catalog, invoker_factory,
                                                             mock_invoker):
        mock_invoker.create_machine.side_effect = _created
        config = make_config({"iaas": {
            "dockermachine": {"driver": {"name": "amazonec2"}},
            "ec2-sa": {"provider": "dockermachine", "driver": {"options": {"region": "sa-east-1"}}},
        }})
        provider = DockerMachineIaaS("ec2-sa", config, catalog, invoker_factory)

        machine = provider.create_machine({"name": "box"})

        mock_invoker.create_machine.assert_called_once_with("box", "amazonec2", {"region": "sa-east-1"}, None)
        assert machine.provider_name == "ec2-sa"

    def test_non_string_param_value(self, make_config, catalog, invoker_factory):
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)
        with pytest.raises(BadParamsError):
            provider.create_machine({"pool": 3})

    def test_invoker_init_failure_is_wrapped(self, make_config, catalog):
        factory = Mock(side_effect=OSError("no space left"))
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, factory)

        with pytest.raises(InvokerInitError) as exc_info:
            provider.create_machine({"pool": "dev"})
        assert isinstance(exc_info.value.__cause__, OSError)


class TestCompensation:
    """Failure handling around the driver call."""

    def setup_method(self):
        self.partial = Machine(name="dev-1", creation_params={"driver": "amazonec2"})

    def test_partial_machine_is_deleted_once(self, make_config, catalog, invoker_factory, mock_invoker):
        creation_error = MachineCreationError("dev-1", "quota exceeded", machine=self.partial)
        mock_invoker.create_machine.side_effect = creation_error
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        with pytest.raises(MachineCreationError) as exc_info:
            provider.create_machine({"pool": "dev"})

        assert exc_info.value is creation_error
        mock_invoker.delete_machine.assert_called_once()
        assert mock_invoker.delete_machine.call_args.args[0] is self.partial
        mock_invoker.__exit__.assert_called_once()
        assert catalog.list() == []

    def test_no_compensation_without_partial(self, make_config, catalog, invoker_factory, mock_invoker):
        mock_invoker.create_machine.side_effect = MachineCreationError("dev-1", "bad driver")
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        with pytest.raises(MachineCreationError):
            provider.create_machine({"pool": "dev"})
        mock_invoker.delete_machine.assert_not_called()

    def test_cleanup_failure_keeps_both_causes(self, make_config, catalog, invoker_factory, mock_invoker):
        creation_error = MachineCreationError("dev-1", "quota exceeded", machine=self.partial)
        cleanup_error = MachineDeletionError("dev-1", "permission denied")
        mock_invoker.create_machine.side_effect = creation_error
        mock_invoker.delete_machine.side_effect = cleanup_error
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        with pytest.raises(MachineCleanupError) as exc_info:
            provider.create_machine({"pool": "dev"})

        error = exc_info.value
        assert error.original is creation_error
        assert error.cleanup_error is cleanup_error
        assert error.__cause__ is creation_error
        assert "quota exceeded" in str(error)
        mock_invoker.delete_machine.assert_called_once()
        mock_invoker.__exit__.assert_called_once()

    def test_name_taken_compensates_and_reraises(self, make_config, catalog, invoker_factory, mock_invoker):
        catalog.put(Machine(name="box", creation_params={"driver": "amazonec2"}))
        mock_invoker.create_machine.side_effect = _created
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        with pytest.raises(NameTakenError):
            provider.create_machine({"name": "box"})

        deleted = mock_invoker.delete_machine.call_args.args[0]
        assert deleted.name == "box"
        assert deleted.address == "10.0.0.5"
        assert catalog.get("box").address == ""

    def test_cleanup_runs_through_docker_machine(self, make_config, catalog, runner, tmp_path):
        """With the real invoker the partial host is removed before the scratch area goes away."""
        fake = FakeDockerMachine(fail_create=True)
        runner.on("docker-machine", fake)
        factory = lambda config: DockerMachine(DockerMachineConfig(storage_root=str(tmp_path)), runner)
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, factory)

        with pytest.raises(MachineCreationError):
            provider.create_machine({"pool": "dev"})

        assert [call[2] for call in runner.calls_for("docker-machine")] == ["create", "rm"]
        assert fake.removed_configs == [{"Driver": {"MachineName": "dev-1"}}]
        assert list(tmp_path.iterdir()) == []


class TestDeleteMachine:
    """Explicit deletion."""

    def test_delete_uses_default_invoker_and_uncatalogs(self, make_config, catalog, invoker_factory,
                                                       mock_invoker):
        machine = Machine(name="box", creation_params={"driver": "amazonec2"})
        catalog.put(machine)
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        provider.delete_machine(machine)

        invoker_factory.assert_called_once_with(DockerMachineConfig())
        mock_invoker.delete_machine.assert_called_once_with(machine, None)
        mock_invoker.__exit__.assert_called_once()
        assert catalog.list() == []

    def test_delete_failure_keeps_catalog_entry(self, make_config, catalog, invoker_factory, mock_invoker):
        machine = Machine(name="box", creation_params={"driver": "amazonec2"})
        catalog.put(machine)
        mock_invoker.delete_machine.side_effect = MachineDeletionError("box", "boom")
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)

        with pytest.raises(MachineDeletionError):
            provider.delete_machine(machine)
        assert catalog.get("box") is machine
        mock_invoker.__exit__.assert_called_once()

    def test_delete_uncatalogued_machine(self, make_config, catalog, invoker_factory):
        provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, invoker_factory)
        provider.delete_machine(Machine(name="box"))


def test_describe_lists_params(make_config, catalog):
    description = DockerMachineIaaS("dockermachine", make_config(), catalog).describe()
    for param in ("driver=", "name=", "pool=", "docker-install-url=", "insecure-registry="):
        assert param in description


def test_registration(make_config, catalog):
    registry = ProviderRegistry()
    register_dockermachine_provider(registry, make_config(EC2_CONFIG), catalog)

    provider = registry.resolve("dockermachine", "ec2")
    assert isinstance(provider, DockerMachineIaaS)
    assert provider.name == "ec2"
    assert provider.binding.base_kind == "dockermachine"


def test_command_failure_is_not_swallowed(make_config, catalog, runner, tmp_path):
    runner.on("docker-machine", (1, "", "boom"))
    factory = lambda config: DockerMachine(DockerMachineConfig(storage_root=str(tmp_path)), runner)
    provider = DockerMachineIaaS("dockermachine", make_config(EC2_CONFIG), catalog, factory)

    with pytest.raises(MachineCreationError) as exc_info:
        provider.create_machine({"name": "box"})
    assert isinstance(exc_info.value.__cause__, CommandFailedError)
