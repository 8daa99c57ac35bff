import pytest
from fastapi.testclient import TestClient

from sustainity import config

FRUIT_CSV = "name,price\nApple,1.5\nBanana,abc\n"


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.content = text.encode("utf-8")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


@pytest.fixture
def static_dir(tmp_path, monkeypatch):
    """Static directory holding the default dataset."""
    monkeypatch.setattr(config, "STATIC_DIR", tmp_path)
    (tmp_path / config.DEFAULT_CSV_SOURCE.lstrip("/")).write_text(FRUIT_CSV, encoding="utf-8")
    return tmp_path


@pytest.fixture
def client(static_dir):
    from sustainity.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_get(monkeypatch):
    """Replace requests.get for URL sources; returns the dict of canned responses."""
    responses = {}
    calls = []

    def _get(url, **kwargs):
        calls.append(url)
        return responses.get(url, FakeResponse(404))

    monkeypatch.setattr("sustainity.services.ingestion.requests.get", _get)
    responses["calls"] = calls
    return responses
