"""Tests for the machine catalog implementations."""

import threading

import pytest

from iaasctl.config.schemas import CatalogConfig
from iaasctl.domain.machine.exceptions import MachineNotFoundError, NameTakenError
from iaasctl.domain.machine.machine_aggregate import Machine
from iaasctl.infrastructure.persistence import InMemoryMachineCatalog, JSONMachineCatalog, create_machine_catalog
from iaasctl.infrastructure.persistence.exceptions import StorageError


@pytest.fixture(params=["memory", "json"])
def machine_catalog(request, tmp_path):
    if request.param == "json":
        return JSONMachineCatalog(str(tmp_path / "data" / "machines.json"))
    return InMemoryMachineCatalog()


def _machine(name, address="10.0.0.5"):
    return Machine(name=name, address=address, creation_params={"driver": "amazonec2"})


class TestMachineCatalog:
    """Behaviour shared by every catalog."""

    def test_put_and_get(self, machine_catalog):
        machine_catalog.put(_machine("dev-1"))
        assert machine_catalog.get("dev-1").address == "10.0.0.5"
        assert machine_catalog.count() == 1

    def test_put_never_overwrites(self, machine_catalog):
        machine_catalog.put(_machine("dev-1"))
        with pytest.raises(NameTakenError):
            machine_catalog.put(_machine("dev-1", "10.0.0.6"))
        assert machine_catalog.get("dev-1").address == "10.0.0.5"

    def test_get_missing(self, machine_catalog):
        with pytest.raises(MachineNotFoundError):
            machine_catalog.get("dev-1")

    def test_delete(self, machine_catalog):
        machine_catalog.put(_machine("dev-1"))
        machine_catalog.delete("dev-1")
        assert machine_catalog.list() == []
        with pytest.raises(MachineNotFoundError):
            machine_catalog.delete("dev-1")

    def test_find_by_address(self, machine_catalog):
        machine_catalog.put(_machine("dev-1", "10.0.0.5"))
        machine_catalog.put(_machine("dev-2", "10.0.0.6"))
        assert machine_catalog.find_by_address("10.0.0.6").name == "dev-2"
        assert machine_catalog.find_by_address("10.0.0.7") is None


class TestJSONMachineCatalog:
    """JSON specific behaviour."""

    def test_survives_new_instance(self, tmp_path):
        path = str(tmp_path / "machines.json")
        JSONMachineCatalog(path).put(_machine("dev-1"))
        assert [m.name for m in JSONMachineCatalog(path).list()] == ["dev-1"]

    def test_concurrent_puts_from_two_catalogs_do_not_overwrite(self, tmp_path):
        path = str(tmp_path / "machines.json")
        catalogs = [JSONMachineCatalog(path), JSONMachineCatalog(path)]
        barrier = threading.Barrier(2)
        errors = []

        def _put(catalog, address):
            barrier.wait()
            try:
                catalog.put(_machine("dev-1", address))
            except NameTakenError as e:
                errors.append(e)

        threads = [
            threading.Thread(target=_put, args=(catalog, f"10.0.0.{i + 1}"))
            for i, catalog in enumerate(catalogs)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        assert len(errors) == 1
        assert JSONMachineCatalog(path).count() == 1

    def test_put_waits_for_the_file_lock(self, tmp_path):
        path = str(tmp_path / "machines.json")
        holder = JSONMachineCatalog(path)
        writer = JSONMachineCatalog(path)

        with holder.document.locked():
            thread = threading.Thread(target=writer.put, args=(_machine("dev-1"),))
            thread.start()
            thread.join(0.2)
            assert thread.is_alive()
            assert holder.list() == []
        thread.join(5)

        assert not thread.is_alive()
        assert holder.get("dev-1").address == "10.0.0.5"

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "machines.json"
        path.write_text("{not json")
        with pytest.raises(StorageError):
            JSONMachineCatalog(str(path)).list()


def test_create_machine_catalog(tmp_path):
    assert isinstance(create_machine_catalog(CatalogConfig()), InMemoryMachineCatalog)
    json_catalog = create_machine_catalog(CatalogConfig(type="json", path=str(tmp_path / "m.json")))
    assert isinstance(json_catalog, JSONMachineCatalog)
