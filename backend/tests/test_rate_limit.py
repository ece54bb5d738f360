"""Tests for the optional throttle on mutating routes."""

import pytest
from fastapi.testclient import TestClient

from notes_service.config import Settings
from notes_service.main import create_app


def _settings(cache_dir, **overrides):
    return Settings(host="127.0.0.1", port=8080, cache_dir=cache_dir, _env_file=None, **overrides)


@pytest.fixture
def limited_client(cache_dir):
    settings = _settings(cache_dir, write_rate_limit="2/minute", rate_limit_enabled=True)
    with TestClient(create_app(settings)) as client:
        yield client


class TestDefaults:
    def test_disabled_by_default(self, cache_dir):
        settings = _settings(cache_dir)
        assert settings.rate_limit_enabled is False
        with TestClient(create_app(settings)) as client:
            codes = [
                client.post("/write", data={"note_name": f"n{i}", "note": "x"}).status_code
                for i in range(65)
            ]
            assert codes == [201] * 65
            assert all(client.put(f"/notes/n{i}", content="y").status_code == 200 for i in range(65))
            assert all(client.delete(f"/notes/n{i}").status_code == 200 for i in range(65))


class TestWriteRateLimit:
    def test_writes_over_limit_are_rejected(self, limited_client):
        for i in range(2):
            response = limited_client.post("/write", data={"note_name": f"n{i}", "note": "x"})
            assert response.status_code == 201
        response = limited_client.post("/write", data={"note_name": "n2", "note": "x"})
        assert response.status_code == 429

    def test_reads_are_not_limited(self, limited_client):
        limited_client.post("/write", data={"note_name": "n", "note": "x"})
        for _ in range(5):
            assert limited_client.get("/notes/n").status_code == 200

    def test_apps_keep_separate_limits(self, tmp_path):
        strict = create_app(
            _settings(tmp_path / "a", write_rate_limit="1/minute", rate_limit_enabled=True)
        )
        with TestClient(strict) as strict_client:
            assert strict_client.post("/write", data={"note_name": "a", "note": "x"}).status_code == 201

            # Building another app must not change or reset the first one's limit
            relaxed = create_app(
                _settings(tmp_path / "b", write_rate_limit="100/minute", rate_limit_enabled=True)
            )
            with TestClient(relaxed) as relaxed_client:
                for i in range(3):
                    response = relaxed_client.post("/write", data={"note_name": f"b{i}", "note": "x"})
                    assert response.status_code == 201

            assert strict_client.post("/write", data={"note_name": "a2", "note": "x"}).status_code == 429
            assert strict.state.limiter is not relaxed.state.limiter
