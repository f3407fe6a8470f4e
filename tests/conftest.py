import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main


@pytest.fixture
def mongo_db(monkeypatch):
    """Fresh in-memory database wired into both the app and the helpers"""
    fake_db = mongomock.MongoClient()["ecommerce_test"]
    monkeypatch.setattr(database, "db", fake_db)
    monkeypatch.setattr(main, "db", fake_db)
    return fake_db


@pytest.fixture
def test_client(mongo_db) -> TestClient:
    return TestClient(main.app)


@pytest.fixture
def signup_token(test_client: TestClient):
    """Sign up a user and return the issued token"""
    def _signup(email="a@x.com", password="p", username="alice"):
        response = test_client.post(
            "/signup", json={"username": username, "email": email, "password": password}
        )
        assert response.status_code == 200
        return response.json()["token"]
    return _signup
