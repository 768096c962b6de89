from unittest.mock import MagicMock

import pytest

from iaasctl.config.manager import ConfigurationManager
from iaasctl.infrastructure.persistence import InMemoryMachineCatalog
from iaasctl.providers.dockermachine.invoker import DockerMachine
from tests.fakes import FakeCommandRunner


@pytest.fixture
def runner():
    return FakeCommandRunner()


@pytest.fixture
def catalog():
    return InMemoryMachineCatalog()


@pytest.fixture
def make_config():
    def _make(data=None):
        return ConfigurationManager.from_dict(data or {})
    return _make


@pytest.fixture
def mock_invoker():
    """MagicMock invoker whose context manager yields itself."""
    invoker = MagicMock(spec=DockerMachine)
    invoker.__enter__.return_value = invoker
    invoker.__exit__.return_value = False
    return invoker


@pytest.fixture
def invoker_factory(mock_invoker):
    return MagicMock(return_value=mock_invoker)
