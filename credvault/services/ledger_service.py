"""Issued credentials and credential requests.

Wallet-address filters are exact, case-sensitive matches with no
normalization; results keep insertion order.
"""

from __future__ import annotations

import logging

from credvault.models.credential import (
    CredentialDraft,
    CredentialRequest,
    CredentialRequestDraft,
    IssuedCredential,
)
from credvault.repos.credential_repo import CredentialRequestRepo, IssuedCredentialRepo

logger = logging.getLogger(__name__)


# ---- issued credentials ----


def save_issued_credential(
    credentials: IssuedCredentialRepo, draft: CredentialDraft
) -> IssuedCredential:
    credential = IssuedCredential.issue(draft)
    credentials.add(credential)
    logger.info(
        "Credential issued  credential_id=%s issuer=%s student=%s",
        credential.id,
        credential.issuer_wallet_address,
        credential.student_wallet_address,
        extra={"credential_id": credential.id},
    )
    return credential


def get_issued_credentials(credentials: IssuedCredentialRepo) -> list[IssuedCredential]:
    return credentials.list_all()


def get_credential(
    credentials: IssuedCredentialRepo, credential_id: str
) -> IssuedCredential | None:
    return credentials.get_by_id(credential_id)


def get_credentials_by_issuer(
    credentials: IssuedCredentialRepo, issuer_wallet_address: str
) -> list[IssuedCredential]:
    return [
        c
        for c in credentials.list_all()
        if c.issuer_wallet_address == issuer_wallet_address
    ]


def get_credentials_for_student(
    credentials: IssuedCredentialRepo, student_wallet_address: str
) -> list[IssuedCredential]:
    return [
        c
        for c in credentials.list_all()
        if c.student_wallet_address == student_wallet_address
    ]


# ---- credential requests ----


def submit_credential_request(
    requests: CredentialRequestRepo, draft: CredentialRequestDraft
) -> CredentialRequest:
    request = CredentialRequest.submit(draft)
    requests.add(request)
    logger.info(
        "Credential request submitted  request=%s issuer=%s student=%s",
        request.id,
        request.issuer_wallet_address,
        request.student_wallet_address,
        extra={"credential_request_id": request.id},
    )
    return request


def get_credential_requests(requests: CredentialRequestRepo) -> list[CredentialRequest]:
    return requests.list_all()


def get_credential_request(
    requests: CredentialRequestRepo, request_id: str
) -> CredentialRequest | None:
    return requests.get_by_id(request_id)


def get_pending_requests_for_issuer(
    requests: CredentialRequestRepo, issuer_wallet_address: str
) -> list[CredentialRequest]:
    return [
        r
        for r in requests.list_all()
        if r.is_pending and r.issuer_wallet_address == issuer_wallet_address
    ]
