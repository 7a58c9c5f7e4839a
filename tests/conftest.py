from __future__ import annotations

import os
import sys
from pathlib import Path

# Pin the environment before credvault reads it at import time.
os.environ["APP_ENV"] = "test"
os.environ["STORE_BACKEND"] = "memory"
os.environ.setdefault("PUBLIC_BASE_URL", "http://localhost:8080")

# Ensure repo root is on sys.path so `import credvault` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from credvault.api import dependencies  # noqa: E402
from credvault.db.store import InMemoryKeyValueStore  # noqa: E402
from credvault.main import app  # noqa: E402
from credvault.models.user import UserProfile  # noqa: E402
from credvault.repos.credential_repo import (  # noqa: E402
    KeyValueCredentialRequestRepo,
    KeyValueIssuedCredentialRepo,
)
from credvault.repos.session_repo import KeyValueSessionRepo  # noqa: E402
from credvault.repos.user_repo import KeyValueUserRepo  # noqa: E402
from credvault.services import identity_service  # noqa: E402

STUDENT_WALLET = "0x1234567890abcdef1234567890abcdef12345678"
ISSUER_WALLET = "0x9876543210fedcba9876543210fedcba98765432"
STAFF_WALLET = "0xabcdef1234567890abcdef1234567890abcdef12"


@pytest.fixture(autouse=True)
def reset_app_store() -> None:
    """Empty the shared in-memory store behind the HTTP layer between tests."""
    if hasattr(dependencies.store, "_store"):
        dependencies.store._store.clear()  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Service-level fixtures: a private store per test
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def users(store: InMemoryKeyValueStore) -> KeyValueUserRepo:
    return KeyValueUserRepo(store)


@pytest.fixture
def sessions(store: InMemoryKeyValueStore) -> KeyValueSessionRepo:
    return KeyValueSessionRepo(store)


@pytest.fixture
def credentials(store: InMemoryKeyValueStore) -> KeyValueIssuedCredentialRepo:
    return KeyValueIssuedCredentialRepo(store)


@pytest.fixture
def requests(store: InMemoryKeyValueStore) -> KeyValueCredentialRequestRepo:
    return KeyValueCredentialRequestRepo(store)


@pytest.fixture
def student(users: KeyValueUserRepo) -> UserProfile:
    return identity_service.register_student(
        users, name="Alex Student", email="alex@test.com", wallet_address=STUDENT_WALLET
    )


@pytest.fixture
def issuer(users: KeyValueUserRepo) -> UserProfile:
    return identity_service.register_issuer(
        users,
        name="Dr. Michael Issuer",
        email="issuer@techacademy.edu",
        wallet_address=ISSUER_WALLET,
        institution="TechAcademy Institute",
    )


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def register_and_sign_in(client: TestClient, role: str, **fields: str) -> dict:
    """Register an account through the API and sign it in on *client*.

    The returned bearer token is installed on the client's default headers.
    Returns the sign-in body (profile plus accessToken).
    """
    body = {
        "name": fields.get("name", f"Test {role.title()}"),
        "email": fields.get("email", f"{role}@example.com"),
        "walletAddress": fields["walletAddress"],
    }
    if "institution" in fields:
        body["institution"] = fields["institution"]
    if "organization" in fields:
        body["organization"] = fields["organization"]

    resp = client.post(f"/auth/register/{role}", json=body)
    assert resp.status_code == 201, resp.text

    signin = {"email": body["email"]}
    if role == "student":
        signin["walletAddress"] = body["walletAddress"]
    return sign_in_as(client, role, signin)


def sign_in_as(client: TestClient, role: str, body: dict) -> dict:
    """Sign an existing account in and authorize *client* with its token."""
    resp = client.post(f"/auth/signin/{role}", json=body)
    assert resp.status_code == 200, resp.text
    data = resp.json()
    client.headers["Authorization"] = f"Bearer {data['accessToken']}"
    return data


@pytest.fixture
def sign_in():
    return register_and_sign_in
