# conftest.py - Fixtures compartidas

import os
from datetime import datetime, timedelta, timezone

# Settings se instancia al importar app.*: las variables van antes
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-length-0123456789")
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

import jwt
import pytest
from fastapi.testclient import TestClient

from app.api.purchases import get_purchase_service
from app.core.settings import settings
from app.db.supabase import get_supabase
from app.main import app
from tests.fake_supabase import FakeSupabase


def make_token(sub: str = "user-1", expires_in: timedelta = timedelta(hours=1), secret: str = None) -> str:
    payload = {
        "sub": sub,
        "email": f"{sub}@example.com",
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def client_id(db):
    return db.add_client("Alice")


@pytest.fixture
def service(db):
    return get_purchase_service(db)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def api(db):
    app.dependency_overrides[get_supabase] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def purchase_payload(client_id):
    return {
        "client": client_id,
        "details": "2x T-Shirt",
        "totalAmount": 39.98,
        "purchaseDate": "2024-01-01T10:00:00Z",
    }
