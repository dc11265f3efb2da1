"""Pytest fixtures: in-memory MongoDB (mongomock-motor) and fake collaborators."""
import asyncio
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from poolrent.config import Settings, get_settings
from poolrent.db.mongodb import create_indexes, get_database
from poolrent.main import app
from poolrent.services.email import get_email_service
from poolrent.services.storage import UploadError, get_image_uploader

JWT_SECRET = "test-jwt-secret"
ADMIN_SECRET = "test-admin-secret"


class FakeEmailService:
    """Records reset emails instead of talking to SMTP."""

    def __init__(self):
        self.sent = []

    def send_password_reset_email(self, to_email: str, token: str) -> None:
        self.sent.append((to_email, token))


class FakeUploader:
    """
    Returns deterministic URLs.

    Flip ``fail`` to simulate a provider outage, or list payloads in
    ``fail_files`` to reject just those.
    """

    def __init__(self):
        self.calls = []
        self.fail = False
        self.fail_files = set()

    async def upload_async(self, file: str, file_name: str, folder: Optional[str] = None) -> str:
        self.calls.append((file, file_name, folder))
        if self.fail or file in self.fail_files:
            raise UploadError("provider unavailable")
        return f"https://ik.imagekit.io/test{folder or ''}/{file_name}"


class _StaleEmailLookups:
    """Users collection whose email lookups always miss."""

    def __init__(self, collection):
        self._collection = collection

    def __getattr__(self, name):
        return getattr(self._collection, name)

    async def find_one(self, filter=None, *args, **kwargs):
        if filter and "email" in filter:
            return None
        return await self._collection.find_one(filter, *args, **kwargs)


class StaleEmailLookupDatabase:
    """
    Database whose ``users.find_one`` by email finds nothing.

    Mimics a concurrent writer claiming an email between the duplicate
    pre-check and the write, so only the unique index can catch it.
    """

    def __init__(self, db):
        self._db = db
        self.users = _StaleEmailLookups(db.users)

    def __getattr__(self, name):
        return getattr(self._db, name)


def make_settings(**overrides) -> Settings:
    values = {
        "JWT_SECRET": JWT_SECRET,
        "ADMIN_SECRET": ADMIN_SECRET,
        "BCRYPT_ROUNDS": 4,
        "SMTP_HOST": "",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(scope="function")
def test_settings():
    return make_settings()


@pytest.fixture(scope="function")
def mongo_db():
    """A fresh in-memory database with the production indexes."""
    db = AsyncMongoMockClient()["poolrent_test"]
    asyncio.run(create_indexes(db))
    return db


@pytest.fixture(scope="function")
def outbox():
    return FakeEmailService()


@pytest.fixture(scope="function")
def uploader():
    return FakeUploader()


@pytest.fixture(scope="function")
def client(mongo_db, test_settings, outbox, uploader):
    """
    FastAPI TestClient wired to the in-memory database.

    Used without a ``with`` block so the lifespan (real MongoDB connect)
    never runs.
    """
    app.dependency_overrides[get_database] = lambda: mongo_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_email_service] = lambda: outbox
    app.dependency_overrides[get_image_uploader] = lambda: uploader
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def admin_headers(secret: str = ADMIN_SECRET) -> dict:
    return {"X-Admin-Secret": secret}


def register_user(
    client: TestClient,
    email: str = "a@x.com",
    password: str = "secret1",
    first_name: str = "Anna",
    last_name: str = "Rossi",
) -> dict:
    """Helper: POST /api/auth/register and return the response JSON."""
    resp = client.post("/api/auth/register", json={
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "mobileNumber": "393401234567",
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def pool_payload(**overrides) -> dict:
    pool = {
        "title": "Garden pool",
        "city": "Rome",
        "capacity": 6,
        "images": ["https://ik.imagekit.io/test/pool_1.jpg"],
        "pricePerDay": 120,
        "description": "Saltwater pool with a view",
        "filters": {"heated": True, "petsAllowed": False},
        "busyDays": ["2026-08-15"],
    }
    pool.update(overrides)
    return {"pool": pool}


def create_pool(client: TestClient, token: str, **overrides) -> dict:
    """Helper: POST /api/pools and return the created pool."""
    resp = client.post("/api/pools", json=pool_payload(**overrides), headers=auth_headers(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["pool"]


def publish_pool(client: TestClient, pool_id: str, visible_until: Optional[str] = None) -> dict:
    """Helper: make a pool visible through the admin endpoint."""
    body = {"isVisible": True}
    if visible_until is not None:
        body["visibleUntil"] = visible_until
    resp = client.put(f"/api/pools/{pool_id}/visibility", json=body, headers=admin_headers())
    assert resp.status_code == 200, resp.text
    return resp.json()["pool"]
