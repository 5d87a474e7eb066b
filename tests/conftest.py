from __future__ import annotations

import os
import tempfile
from pathlib import Path

_tmp_root = Path(tempfile.mkdtemp(prefix="freight_crm_test_"))

# config is read at import time, so the environment must be in place first
os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_PATH"] = str(_tmp_root / "crm_test.db")
os.environ["JWT_ACCESS_SECRET_KEY"] = "test-secret-key"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["ADMIN_EMAIL"] = "admin@freight.mn"
os.environ["ADMIN_PASSWORD"] = "admin12345"

import pytest
from fastapi.testclient import TestClient

ADMIN_EMAIL = "admin@freight.mn"
ADMIN_PASSWORD = "admin12345"
USER_PASSWORD = "secret123"


def login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["auth"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


def create_user(client: TestClient, headers: dict[str, str], email: str, role: str, name: str | None = None) -> dict:
    response = client.post(
        "/users",
        json={"email": email, "name": name, "password": USER_PASSWORD, "role": role},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


@pytest.fixture(scope="session")
def client():
    from main import app
    from app.core.db import session_scope
    from app.services.users.user_services import ensure_admin

    async def _seed_admin():
        async with session_scope() as db:
            await ensure_admin(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Admin")

    with TestClient(app) as test_client:
        test_client.portal.call(_seed_admin)
        yield test_client


@pytest.fixture(scope="session")
def make_user(client, admin_headers):
    """Create a user with the given role and return (user, headers)."""

    def _make(email: str, role: str, name: str | None = None):
        user = create_user(client, admin_headers, email, role, name=name)
        return user, login(client, user["username"], USER_PASSWORD)

    return _make


@pytest.fixture(scope="session")
def admin_headers(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture(scope="session")
def sales_user(client, admin_headers):
    return create_user(client, admin_headers, "bat.sales@freight.mn", "sales", name="Bat")


@pytest.fixture(scope="session")
def other_sales_user(client, admin_headers):
    return create_user(client, admin_headers, "saraa.sales@freight.mn", "sales", name="Saraa")


@pytest.fixture(scope="session")
def sales_headers(client, sales_user):
    return login(client, sales_user["username"], USER_PASSWORD)


@pytest.fixture(scope="session")
def other_sales_headers(client, other_sales_user):
    return login(client, other_sales_user["username"], USER_PASSWORD)
