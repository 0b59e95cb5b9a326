"""Pytest configuration and fixtures for ddl-sync tests."""

import pytest

from ddl_sync.utils.formatting import BackupNamer
from tests.fakes import fixed_clock


# Markers for test categorization
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running tests"
    )


@pytest.fixture
def namer():
    """Backup namer with a frozen clock."""
    return BackupNamer(clock=fixed_clock)


def pytest_collection_modifyitems(config, items):
    """Run unit tests before integration tests."""
    items.sort(key=lambda item: item.get_closest_marker("integration") is not None)
