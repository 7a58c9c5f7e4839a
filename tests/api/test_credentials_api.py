from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import ISSUER_WALLET, STUDENT_WALLET

BASE = "https://credvault.example.org"


@pytest.fixture
def issuer(client: TestClient, sign_in) -> dict:
    return sign_in(
        client,
        "issuer",
        email="issuer@uni.edu",
        walletAddress=ISSUER_WALLET,
        institution="State University",
    )


def _mint(client: TestClient, **overrides):
    body = {"recipientAddress": STUDENT_WALLET, "title": "Hackathon Winner"}
    body.update(overrides)
    return client.post("/v1/credentials", json=body)


def test_issuer_mints_credential(client: TestClient, issuer: dict) -> None:
    resp = _mint(client, credentialType="Award", additionalMetadata='{"place": 1}')
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["id"].startswith("cred_")
    assert data["status"] == "issued"
    assert data["issuerWalletAddress"] == ISSUER_WALLET
    assert data["issuerInstitution"] == "State University"
    assert data["credentialType"] == "Award"
    assert data["metadata"] == {"place": 1}


def test_mint_validates_input(client: TestClient, issuer: dict) -> None:
    assert _mint(client, recipientAddress="0xZZ").status_code == 422
    assert _mint(client, title=" ").status_code == 422
    assert _mint(client, additionalMetadata="[1]").status_code == 422
    assert client.get("/v1/credentials").json() == []


def test_only_issuers_mint(client: TestClient, sign_in) -> None:
    sign_in(client, "student", walletAddress=STUDENT_WALLET)
    assert _mint(client).status_code == 403


def test_list_filters(client: TestClient, issuer: dict) -> None:
    first = _mint(client).json()
    _mint(client, recipientAddress="0x" + "d" * 40)

    assert len(client.get("/v1/credentials").json()) == 2
    mine = client.get("/v1/credentials", params={"student": STUDENT_WALLET}).json()
    assert [c["id"] for c in mine] == [first["id"]]
    by_issuer = client.get("/v1/credentials", params={"issuer": ISSUER_WALLET}).json()
    assert len(by_issuer) == 2

    both = client.get(
        "/v1/credentials", params={"issuer": ISSUER_WALLET, "student": STUDENT_WALLET}
    )
    assert both.status_code == 422


def test_get_credential(client: TestClient, issuer: dict) -> None:
    cred = _mint(client).json()
    assert client.get(f"/v1/credentials/{cred['id']}").json() == cred
    assert client.get("/v1/credentials/cred_missing").status_code == 404


def test_share_link(client: TestClient, issuer: dict) -> None:
    cred = _mint(client, credentialType="Award").json()
    resp = client.get(f"/v1/credentials/{cred['id']}/share", params={"baseUrl": BASE})
    assert resp.status_code == 200
    data = resp.json()
    assert data["url"] == (
        f"{BASE}/verify?address={STUDENT_WALLET}&credentialId={cred['id']}"
    )
    assert data["title"] == "Hackathon Winner - CredVault"
    assert data["text"] == 'Verify this award: "Hackathon Winner" issued by State University'
    assert len(data["displayUrl"]) <= 63


def test_qr_payload(client: TestClient, issuer: dict) -> None:
    cred = _mint(client).json()
    resp = client.get(f"/v1/credentials/{cred['id']}/qr", params={"baseUrl": BASE})
    assert resp.status_code == 200
    data = resp.json()
    assert data["url"].startswith(f"{BASE}/verify?address=")
    assert data["data"]["credentialId"] == cred["id"]
    assert data["data"]["type"] == "Credential"
    assert data["data"]["walletAddress"] == STUDENT_WALLET
    assert data["qrImage"].startswith("data:image/png;base64,")


def test_share_unknown_credential(client: TestClient) -> None:
    assert client.get("/v1/credentials/cred_missing/share").status_code == 404
