"""Pytest configuration for Events API tests."""

import os
import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

from events_api.database.repositories.event_repository import EventRepository
from events_api.http_server import app, get_event_repository
from events_api.models.config import EventsApiConfig
from events_api.models.event import Event


@pytest.fixture(scope="session", autouse=True)
def mock_env_vars():
    """Mock environment variables for testing."""
    with patch.dict(os.environ, {
        "MONGODB_URL": "mongodb://localhost:27017/eventsapp_test",
    }):
        yield


@pytest.fixture
def events_config():
    """Create an EventsApiConfig for testing."""
    return EventsApiConfig(mongodb_url="mongodb://localhost:27017/eventsapp_test")


@pytest.fixture
def stored_event():
    """An event as returned by the repository."""
    return Event(
        id="6630f1c2a1b2c3d4e5f60718",
        title="Meetup",
        location="Hall A",
        date=datetime(2024, 5, 1),
        status="active",
    )


@pytest.fixture
def mock_repository():
    """Event repository with every store operation mocked."""
    repository = MagicMock(spec=EventRepository)
    repository.create = AsyncMock()
    repository.find = AsyncMock(return_value=[])
    repository.update_by_id = AsyncMock()
    repository.delete_by_id = AsyncMock()
    return repository


@pytest.fixture
def override_repository(mock_repository):
    """Inject the mocked repository into the app."""
    app.dependency_overrides[get_event_repository] = lambda: mock_repository
    yield mock_repository
    app.dependency_overrides.pop(get_event_repository, None)
