"""Issued credential endpoints.

POST /v1/credentials             issuer mints a credential directly
GET  /v1/credentials             list (?issuer=<wallet> or ?student=<wallet>)
GET  /v1/credentials/{id}        one credential
GET  /v1/credentials/{id}/share  verification link + share-sheet text
GET  /v1/credentials/{id}/qr     verification link + QR payload and image
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from credvault.api.dependencies import credential_repo, require_issuer
from credvault.core.config import SETTINGS
from credvault.models.credential import IssuedCredential, MetadataValue
from credvault.models.user import UserProfile
from credvault.services import lifecycle_service, ledger_service, qr_service
from credvault.services import verification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/credentials", tags=["credentials"])


class MintIn(BaseModel):
    recipientAddress: str
    title: str
    description: str = ""
    credentialType: str | None = None
    additionalMetadata: str | None = None


class CredentialOut(BaseModel):
    id: str
    title: str
    description: str
    studentWalletAddress: str
    issuerWalletAddress: str
    issuerName: str
    issuerInstitution: str
    issuedDate: str
    status: str
    credentialType: str | None = None
    metadata: dict[str, MetadataValue] = {}

    @staticmethod
    def of(credential: IssuedCredential) -> CredentialOut:
        return CredentialOut(**credential.to_record())


class ShareOut(BaseModel):
    url: str
    title: str
    text: str
    displayUrl: str


class QrDataOut(BaseModel):
    credentialId: str
    walletAddress: str
    issuer: str
    title: str
    type: str
    issuedDate: str
    timestamp: int


class QrOut(BaseModel):
    url: str
    data: QrDataOut
    qrImage: str


def _get_or_404(credential_id: str) -> IssuedCredential:
    credential = ledger_service.get_credential(credential_repo, credential_id)
    if credential is None:
        raise HTTPException(status_code=404, detail={"message": "credential not found"})
    return credential


@router.post("", response_model=CredentialOut, status_code=status.HTTP_201_CREATED)
async def mint_credential(
    body: MintIn,
    issuer: Annotated[UserProfile, Depends(require_issuer)],
) -> CredentialOut:
    credential = await lifecycle_service.mint_credential_with_delay(
        credential_repo,
        delay_seconds=SETTINGS.mint_delay_seconds,
        issuer=issuer,
        recipient_wallet_address=body.recipientAddress,
        title=body.title,
        description=body.description,
        credential_type=body.credentialType,
        additional_metadata=body.additionalMetadata,
    )
    return CredentialOut.of(credential)


@router.get("", response_model=list[CredentialOut])
def list_credentials(
    issuer: str | None = Query(None),
    student: str | None = Query(None),
) -> list[CredentialOut]:
    if issuer is not None and student is not None:
        raise HTTPException(
            status_code=422,
            detail={"message": "filter by issuer or student, not both"},
        )
    if issuer is not None:
        found = ledger_service.get_credentials_by_issuer(credential_repo, issuer)
    elif student is not None:
        found = ledger_service.get_credentials_for_student(credential_repo, student)
    else:
        found = ledger_service.get_issued_credentials(credential_repo)
    return [CredentialOut.of(c) for c in found]


@router.get("/{credential_id}", response_model=CredentialOut)
def get_credential(credential_id: str) -> CredentialOut:
    return CredentialOut.of(_get_or_404(credential_id))


@router.get("/{credential_id}/share", response_model=ShareOut)
def share_credential(
    credential_id: str,
    baseUrl: str | None = Query(None),
) -> ShareOut:
    credential = _get_or_404(credential_id)
    shared = verification_service.create_shareable_url(
        credential, credential.student_wallet_address, baseUrl
    ).unwrap()
    return ShareOut(
        url=shared.url,
        title=shared.title,
        text=shared.text,
        displayUrl=verification_service.sanitize_url_for_display(shared.url),
    )


@router.get("/{credential_id}/qr", response_model=QrOut)
def credential_qr(
    credential_id: str,
    baseUrl: str | None = Query(None),
) -> QrOut:
    credential = _get_or_404(credential_id)
    qr = verification_service.generate_qr_verification_data(
        credential, credential.student_wallet_address, baseUrl
    ).unwrap()
    data = qr.data
    return QrOut(
        url=qr.url,
        data=QrDataOut(
            credentialId=data.credential_id,
            walletAddress=data.wallet_address,
            issuer=data.issuer,
            title=data.title,
            type=data.type,
            issuedDate=data.issued_date,
            timestamp=data.timestamp,
        ),
        qrImage=qr_service.render_qr_data_uri(qr.url),
    )
