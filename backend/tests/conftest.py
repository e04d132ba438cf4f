"""
Test configuration and fixtures for Offshoot palette and harvesting tests.
"""
import pytest
from fastapi.testclient import TestClient
from loguru import logger

from main import app
from offshoot.utils.logging import get_logger
from factories import BLUE, RED, make_png


@pytest.fixture
def red_png():
    return make_png(RED)


@pytest.fixture
def blue_png():
    return make_png(BLUE, size=(20, 20))


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app; dependency overrides are cleared afterwards."""
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    # get_logger() drops existing sinks on first use
    get_logger()
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)
