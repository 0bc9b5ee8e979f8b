"""Shared fixtures for service tests."""

import pytest

from shipline.services import ServiceFactory


@pytest.fixture
def factory(mock_repository, shipline_config) -> ServiceFactory:
    """Service factory over the in-memory repository."""
    return ServiceFactory(file_repository=mock_repository, config=shipline_config)
