# tests/conftest.py
"""
Global pytest fixtures for shipline tests.
"""

import pytest

from shipline.cli.service_helpers import reset_factory
from shipline.core.config import Config, get_default_config, reset_config, set_config
from tests.mocks.mock_repository import MockFileRepository


@pytest.fixture
def shipline_config(tmp_path) -> Config:
    """Default configuration with record directories under tmp_path."""
    config = get_default_config()
    config.set("paths", "config_dir", str(tmp_path / "shipline"))
    config.set("commands", "timeout", 30)
    return config


@pytest.fixture(autouse=True)
def isolated_config(shipline_config):
    """Install the test configuration globally and reset it afterwards."""
    set_config(shipline_config)
    yield shipline_config
    reset_config()
    reset_factory()


@pytest.fixture
def mock_repository() -> MockFileRepository:
    """Create a mock file repository for testing."""
    return MockFileRepository()


@pytest.fixture
def write_component(mock_repository, shipline_config):
    """Write a component record into the mock repository."""

    def _write(component_id: str, **fields) -> None:
        record = {"name": component_id, "localPath": "/work/" + component_id}
        record.update(fields)
        mock_repository.write_json(shipline_config.components_dir / f"{component_id}.json", record)

    return _write


@pytest.fixture
def write_module(mock_repository, shipline_config):
    """Write a module manifest declaring the given action ids."""

    def _write(module_id: str, *action_ids: str) -> None:
        manifest = {
            "name": module_id.title(),
            "version": "1.0.0",
            "actions": [{"id": a, "label": a, "command": f"./{a}.sh"} for a in action_ids],
        }
        mock_repository.write_json(shipline_config.modules_dir / module_id / f"{module_id}.json", manifest)

    return _write
