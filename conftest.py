import pytest

from shorty.config import Config
from shorty.main import create_app


@pytest.fixture
def app():
    config = Config(testing=True, base_url="http://testserver")
    yield create_app(config)


@pytest.fixture
def store(app):
    return app.store


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def make_link(client):
    def _make_link(short_name=None, original_url="https://example.com"):
        data = {"original_url": original_url}
        if short_name is not None:
            data["short_name"] = short_name
        response = client.post("/api/links", json=data)
        assert response.status_code == 201
        return response.get_json()

    return _make_link
