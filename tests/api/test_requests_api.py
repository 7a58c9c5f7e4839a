from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import ISSUER_WALLET, STAFF_WALLET, STUDENT_WALLET, sign_in_as

OTHER_ISSUER_WALLET = "0x" + "c" * 40


def _sign_in(client: TestClient, role: str, email: str, wallet: str | None = None) -> None:
    body = {"email": email}
    if wallet is not None:
        body["walletAddress"] = wallet
    sign_in_as(client, role, body)


@pytest.fixture
def accounts(client: TestClient) -> None:
    """Register a student and two issuers; leaves nobody signed in."""
    for role, body in (
        ("student", {"name": "Alex", "email": "alex@test.com", "walletAddress": STUDENT_WALLET}),
        (
            "issuer",
            {
                "name": "Dr. Issuer",
                "email": "issuer@uni.edu",
                "walletAddress": ISSUER_WALLET,
                "institution": "State University",
            },
        ),
        (
            "issuer",
            {"name": "Other", "email": "other@uni.edu", "walletAddress": OTHER_ISSUER_WALLET},
        ),
        ("staff", {"name": "Sam", "email": "staff@org.com", "walletAddress": STAFF_WALLET}),
    ):
        assert client.post(f"/auth/register/{role}", json=body).status_code == 201


@pytest.fixture
def pending_id(client: TestClient, accounts) -> str:
    _sign_in(client, "student", "alex@test.com", STUDENT_WALLET)
    resp = client.post(
        "/v1/requests",
        json={
            "issuerWalletAddress": ISSUER_WALLET,
            "credentialTitle": "Advanced Python",
            "description": "All modules done",
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def test_student_submits_request(client: TestClient, pending_id: str) -> None:
    listed = client.get("/v1/requests").json()
    assert [r["id"] for r in listed] == [pending_id]
    assert listed[0]["status"] == "pending"
    assert listed[0]["issuerInstitution"] == "State University"
    assert listed[0]["rejectionNote"] is None


def test_request_to_unknown_issuer_returns_404(client: TestClient, accounts) -> None:
    _sign_in(client, "student", "alex@test.com", STUDENT_WALLET)
    resp = client.post(
        "/v1/requests",
        json={"issuerWalletAddress": "0x" + "9" * 40, "credentialTitle": "X"},
    )
    assert resp.status_code == 404


def test_only_students_submit(client: TestClient, accounts) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    resp = client.post(
        "/v1/requests",
        json={"issuerWalletAddress": ISSUER_WALLET, "credentialTitle": "X"},
    )
    assert resp.status_code == 403


def test_submit_requires_session(client: TestClient) -> None:
    resp = client.post(
        "/v1/requests",
        json={"issuerWalletAddress": ISSUER_WALLET, "credentialTitle": "X"},
    )
    assert resp.status_code == 401


def test_staff_have_no_requests(client: TestClient, accounts) -> None:
    _sign_in(client, "staff", "staff@org.com")
    assert client.get("/v1/requests").status_code == 403


def test_issuer_pending_inbox_is_scoped(client: TestClient, pending_id: str) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    assert [r["id"] for r in client.get("/v1/requests/pending").json()] == [pending_id]

    _sign_in(client, "issuer", "other@uni.edu")
    assert client.get("/v1/requests/pending").json() == []


def test_approve_mints_credential_once(client: TestClient, pending_id: str) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    resp = client.post(
        f"/v1/requests/{pending_id}/approve",
        json={"credentialType": "Certificate", "additionalMetadata": '{"grade": "A"}'},
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["request"]["status"] == "approved"
    assert data["credential"]["title"] == "Advanced Python"
    assert data["credential"]["studentWalletAddress"] == STUDENT_WALLET
    assert data["credential"]["credentialType"] == "Certificate"
    assert data["credential"]["metadata"] == {"grade": "A"}

    again = client.post(f"/v1/requests/{pending_id}/approve")
    assert again.status_code == 409
    assert again.json()["detail"]["message"] == "Request is not pending"

    issued = client.get("/v1/credentials", params={"student": STUDENT_WALLET}).json()
    assert len(issued) == 1
    assert client.get("/v1/requests/pending").json() == []


def test_reject_then_approve_is_conflict(client: TestClient, pending_id: str) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    resp = client.post(f"/v1/requests/{pending_id}/reject", json={"note": "Need transcript"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"
    assert resp.json()["rejectionNote"] == "Need transcript"

    assert client.post(f"/v1/requests/{pending_id}/approve").status_code == 409
    assert client.get("/v1/credentials").json() == []


def test_reject_without_note_uses_default(client: TestClient, pending_id: str) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    resp = client.post(f"/v1/requests/{pending_id}/reject")
    assert resp.json()["rejectionNote"] == "Request was rejected"


def test_bad_metadata_keeps_request_pending(client: TestClient, pending_id: str) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    resp = client.post(
        f"/v1/requests/{pending_id}/approve", json={"additionalMetadata": "{broken"}
    )
    assert resp.status_code == 422
    assert [r["id"] for r in client.get("/v1/requests/pending").json()] == [pending_id]


def test_other_issuer_cannot_act(client: TestClient, pending_id: str) -> None:
    _sign_in(client, "issuer", "other@uni.edu")
    assert client.post(f"/v1/requests/{pending_id}/approve").status_code == 403
    assert client.post(f"/v1/requests/{pending_id}/reject").status_code == 403


def test_unknown_request_returns_404(client: TestClient, accounts) -> None:
    _sign_in(client, "issuer", "issuer@uni.edu")
    assert client.post("/v1/requests/req_missing/approve").status_code == 404
