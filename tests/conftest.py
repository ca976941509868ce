"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from app.database.supabase_client import get_service_supabase, get_supabase
from app.main import app
from app.modules.auth.service import clear_auth_cache
from app.modules.session import registry
from tests.fakes import FakeSupabase, make_user

CLIENT_ID = "11111111-1111-1111-1111-111111111111"
ADMIN_ID = "99999999-9999-9999-9999-999999999999"
CLIENT_TOKEN = "client-token"
ADMIN_TOKEN = "admin-token"


@pytest.fixture
def fake_supabase():
    fake = FakeSupabase()
    fake.auth.add_user(CLIENT_TOKEN, make_user(CLIENT_ID, "client@example.com", full_name="Casey Client", company="Acme"))
    fake.auth.add_user(ADMIN_TOKEN, make_user(ADMIN_ID, "admin@example.com", full_name="Ada Admin"))
    fake.rows("profiles").extend([
        {
            "id": CLIENT_ID,
            "email": "client@example.com",
            "full_name": "Casey Client",
            "company": "Acme",
            "client_id": "acme-client",
            "is_admin": False,
            "created_at": "2024-01-01T00:00:00+00:00",
        },
        {
            "id": ADMIN_ID,
            "email": "admin@example.com",
            "full_name": "Ada Admin",
            "company": "Design Hub",
            "client_id": "design-hub",
            "is_admin": True,
            "created_at": "2023-12-01T00:00:00+00:00",
        },
    ])
    return fake


@pytest.fixture
def client(fake_supabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_service_supabase] = lambda: fake_supabase
    clear_auth_cache()
    registry.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    clear_auth_cache()
    registry.clear()


@pytest.fixture
def client_header():
    return {"Authorization": f"Bearer {CLIENT_TOKEN}"}


@pytest.fixture
def admin_header():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
