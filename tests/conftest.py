import os

# Settings are read at import time, so the test environment goes in first.
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("ADMIN_USER", "admin@olympic.test")
os.environ.setdefault("ADMIN_PASS", "admin-secret")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")
os.environ.setdefault("NOTIFICATION_CHANNEL", "log")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.db import mongo
from app.main import app


@pytest.fixture(autouse=True)
def db():
    database = AsyncMongoMockClient()["onboarding_test"]
    mongo.use_database(database)
    yield database
    mongo.use_database(None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/admin/login",
        json={"email": os.environ["ADMIN_USER"], "password": os.environ["ADMIN_PASS"]}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def register(client, email="a@x.com", password="secret123", name="a"):
    response = client.post(
        "/api/users/register",
        json={
            "name": name,
            "email": email,
            "phone": "+15551234567",
            "country": "US",
            "password": password,
        }
    )
    return response


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
