"""Shared test configuration and fixtures."""

import pytest

from config import DEFAULT_SUBJECTS_FILE
from services.catalog import SubjectCatalog


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "pdf: renders and parses real PDF documents"
    )


@pytest.fixture
def catalog() -> SubjectCatalog:
    """The bundled subject table."""
    return SubjectCatalog.from_json(DEFAULT_SUBJECTS_FILE)
