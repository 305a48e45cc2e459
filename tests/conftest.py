"""
Test configuration and fixtures for the accessibility evidence crawler.

No test here needs a real browser: Selenium drivers are MagicMocks whose
``execute_script`` answers each in-page probe with canned raw data.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from tests.factories import make_driver, make_session


@pytest.fixture
def session_factory():
    return make_session


@pytest.fixture
def driver_factory():
    return make_driver


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    with TestClient(test_app) as test_client:
        yield test_client
