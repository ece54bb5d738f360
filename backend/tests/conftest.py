"""Common test fixtures for the notes service."""

import pytest
from fastapi.testclient import TestClient

from notes_service.config import Settings
from notes_service.main import create_app
from notes_service.services.workspace import NoteRepository


@pytest.fixture
def cache_dir(tmp_path):
    """Storage root that does not exist yet; startup must create it."""
    return tmp_path / "cache"


@pytest.fixture
def repository(cache_dir):
    """A repository with its root already created."""
    repo = NoteRepository(cache_dir)
    repo.ensure_root()
    return repo


@pytest.fixture
def settings(cache_dir):
    return Settings(
        host="127.0.0.1",
        port=8080,
        cache_dir=cache_dir,
    )


@pytest.fixture
def client(settings):
    """TestClient with the lifespan running (creates the cache dir)."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
