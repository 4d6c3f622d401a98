#!/usr/bin/env python3
"""
Test bootstrap: environment for settings, database and field encryption
must be in place before anything under ``app`` is imported.
"""

import base64
import os
import sys
import tempfile
import uuid
from typing import Dict, Generator

import pytest
from dotenv import load_dotenv

load_dotenv()

_TEST_DIR = tempfile.mkdtemp(prefix="compliance-tests-")
TEST_FIELD_KEY = base64.b64encode(bytes(range(32))).decode()

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["FIELD_ENCRYPTION_KEY"] = TEST_FIELD_KEY
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ.pop("SENTRY_DSN", None)

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.db.session import SessionLocal, init_db  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture(scope="session")
def field_key() -> bytes:
    return base64.b64decode(TEST_FIELD_KEY)


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    """Reusable TestClient for the module."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Session against the test database; tables are created on demand."""
    init_db()
    session = SessionLocal()
    yield session
    session.close()


def register_user(client: TestClient, email: str = None, password: str = "s3cure-pass") -> str:
    email = email or f"user-{uuid.uuid4().hex[:12]}@acme.io"
    res = client.post(
        "/api/v1/auth/register", json={"email": email, "password": password}
    )
    assert res.status_code == 201, res.text
    return res.json()["token"]


@pytest.fixture
def auth_headers(client: TestClient) -> Dict[str, str]:
    return {"Authorization": f"Bearer {register_user(client)}"}


@pytest.fixture
def make_token(client: TestClient):
    """Factory registering a fresh user and returning its bearer token."""

    def _make(email: str = None, password: str = "s3cure-pass") -> str:
        return register_user(client, email=email, password=password)

    return _make
