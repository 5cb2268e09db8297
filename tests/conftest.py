"""Shared pytest fixtures for the shop API tests."""

import os
import tempfile

os.environ["DATABASE_URL"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="shop-uploads-")
os.environ["SECRET_KEY"] = "test-secret"

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app


@pytest.fixture(autouse=True)
def mock_db(monkeypatch):
    """Fresh in-memory MongoDB for every test."""
    db = mongomock.MongoClient()["shopper_test"]
    monkeypatch.setattr(database, "db", db)
    database.ensure_indexes()
    yield db


@pytest.fixture
def test_client():
    return TestClient(app)


@pytest.fixture
def token(test_client):
    """Sign up a customer and return their auth token."""
    response = test_client.post(
        "/signup",
        json={"username": "Mona", "email": "mona@example.com", "password": "pw123"},
    )
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"auth-token": token}


@pytest.fixture
def product_data():
    def make(name="Striped Blouse", category="women", new_price=50.0, old_price=80.5):
        return {
            "name": name,
            "description": f"{name} description",
            "image": "/images/product_1.png",
            "category": category,
            "new_price": new_price,
            "old_price": old_price,
        }
    return make
