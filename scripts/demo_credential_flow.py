"""Demo: request → approve → verify → share, using FastAPI TestClient.

Run with:
    python scripts/demo_credential_flow.py
"""

from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from credvault.api.dependencies import user_repo
from credvault.main import app
from credvault.services import clipboard, seed
from credvault.services.verification_service import parse_url_params

STUDENT_EMAIL = "student@test.com"
ISSUER_EMAIL = "issuer@techacademy.edu"


def main() -> None:
    client = TestClient(app)
    seed.seed_demo_users(user_repo)

    # ── Step 1: student signs in ────────────────────────────────────
    r = client.post(
        "/auth/signin/student",
        json={"email": STUDENT_EMAIL, "walletAddress": "0xdeadbeef"},
    )
    print(f"1. POST /auth/signin/student (wrong wallet) → {r.status_code}")

    r = client.post(
        "/auth/signin/student",
        json={"email": STUDENT_EMAIL, "walletAddress": seed.DEMO_STUDENT_WALLET},
    )
    print(f"2. POST /auth/signin/student               → {r.status_code}  {r.json()['name']}")
    student_auth = {"Authorization": f"Bearer {r.json()['accessToken']}"}

    # ── Step 2: student requests a credential ───────────────────────
    r = client.post(
        "/v1/requests",
        json={
            "issuerWalletAddress": seed.DEMO_ISSUER_WALLET,
            "credentialTitle": "Distributed Systems 101",
            "description": "Completed the spring cohort",
        },
        headers=student_auth,
    )
    request_id = r.json()["id"]
    print(f"3. POST /v1/requests                       → {r.status_code}  id={request_id}")

    # ── Step 3: issuer approves ─────────────────────────────────────
    r = client.post("/auth/signin/issuer", json={"email": ISSUER_EMAIL})
    issuer_auth = {"Authorization": f"Bearer {r.json()['accessToken']}"}
    r = client.get("/v1/requests/pending", headers=issuer_auth)
    print(f"4. GET  /v1/requests/pending               → {r.status_code}  {len(r.json())} pending")

    r = client.post(
        f"/v1/requests/{request_id}/approve",
        json={"credentialType": "Certificate", "additionalMetadata": '{"grade": "A"}'},
        headers=issuer_auth,
    )
    credential_id = r.json()["credential"]["id"]
    print(f"5. POST /v1/requests/{{id}}/approve          → {r.status_code}  credential={credential_id}")

    r = client.post(f"/v1/requests/{request_id}/approve", headers=issuer_auth)
    print(f"6. POST /v1/requests/{{id}}/approve (again)  → {r.status_code}  {r.json()['detail']}")

    # ── Step 4: share and verify ────────────────────────────────────
    r = client.get(f"/v1/credentials/{credential_id}/share")
    share = r.json()
    print(f"7. GET  /v1/credentials/{{id}}/share         → {r.status_code}  {share['displayUrl']}")

    params = parse_url_params(share["url"])
    r = client.get(
        "/v1/verify",
        params={"address": params.address, "credentialId": params.credential_id},
    )
    print(f"8. GET  /v1/verify                         → {r.status_code}  valid={r.json()['valid']}")

    # ── Step 5: copy the link ───────────────────────────────────────
    result = asyncio.run(
        clipboard.copy_to_clipboard(share["url"], clipboard.TerminalCopyEnvironment())
    )
    print(f"9. copy_to_clipboard                       → {result.method}  {clipboard.get_clipboard_message(result)}")

    print("\nAll steps completed.")


if __name__ == "__main__":
    main()
