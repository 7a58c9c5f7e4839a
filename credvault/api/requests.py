"""Credential request endpoints.

POST /v1/requests                student asks an issuer for a credential
GET  /v1/requests                the caller's requests (sent or received)
GET  /v1/requests/pending        issuer's pending inbox
POST /v1/requests/{id}/approve   issuer approves and mints (pending only)
POST /v1/requests/{id}/reject    issuer rejects (pending only)

Approving or rejecting a request that was already handled answers 409 so
the UI never mistakes a repeat click for a second issuance.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from credvault.api.access import check_request_addressed_to
from credvault.api.credentials import CredentialOut
from credvault.api.dependencies import (
    credential_repo,
    request_repo,
    require_issuer,
    require_student,
    require_user,
    user_repo,
)
from credvault.models.credential import CredentialRequest
from credvault.models.user import UserProfile
from credvault.services import ledger_service, lifecycle_service
from credvault.services.metadata import ApprovalMetadata

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/requests", tags=["requests"])


class RequestIn(BaseModel):
    issuerWalletAddress: str
    credentialTitle: str
    description: str = ""


class ApprovalIn(BaseModel):
    credentialType: str | None = None
    eventLink: str | None = None
    issueDate: str | None = None
    additionalMetadata: str | None = None


class RejectIn(BaseModel):
    note: str | None = None


class RequestOut(BaseModel):
    id: str
    studentName: str
    studentEmail: str
    studentWalletAddress: str
    issuerWalletAddress: str
    issuerName: str
    issuerInstitution: str
    credentialTitle: str
    description: str
    requestDate: str
    status: str
    rejectionNote: str | None = None

    @staticmethod
    def of(request: CredentialRequest) -> RequestOut:
        return RequestOut(**request.to_record())


class ApprovalOut(BaseModel):
    request: RequestOut
    credential: CredentialOut


def _get_addressed_request(request_id: str, issuer: UserProfile) -> CredentialRequest:
    request = ledger_service.get_credential_request(request_repo, request_id)
    if request is None:
        raise HTTPException(status_code=404, detail={"message": "Request not found"})
    check_request_addressed_to(issuer, request)
    return request


@router.post("", response_model=RequestOut, status_code=status.HTTP_201_CREATED)
def submit_request(
    body: RequestIn,
    student: Annotated[UserProfile, Depends(require_student)],
) -> RequestOut:
    request = lifecycle_service.request_credential(
        user_repo,
        request_repo,
        student=student,
        issuer_wallet_address=body.issuerWalletAddress,
        credential_title=body.credentialTitle,
        description=body.description,
    )
    return RequestOut.of(request)


@router.get("", response_model=list[RequestOut])
def list_my_requests(
    profile: Annotated[UserProfile, Depends(require_user)],
) -> list[RequestOut]:
    requests = ledger_service.get_credential_requests(request_repo)
    if profile.role == "student":
        mine = [r for r in requests if r.student_wallet_address == profile.wallet_address]
    elif profile.role == "issuer":
        mine = [r for r in requests if r.issuer_wallet_address == profile.wallet_address]
    else:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Staff accounts have no credential requests"},
        )
    return [RequestOut.of(r) for r in mine]


@router.get("/pending", response_model=list[RequestOut])
def list_pending(
    issuer: Annotated[UserProfile, Depends(require_issuer)],
) -> list[RequestOut]:
    pending = ledger_service.get_pending_requests_for_issuer(
        request_repo, issuer.wallet_address
    )
    return [RequestOut.of(r) for r in pending]


@router.post("/{request_id}/approve", response_model=ApprovalOut)
def approve_request(
    request_id: str,
    issuer: Annotated[UserProfile, Depends(require_issuer)],
    body: ApprovalIn | None = None,
) -> ApprovalOut:
    _get_addressed_request(request_id, issuer)
    body = body or ApprovalIn()
    request, credential = lifecycle_service.approve_credential_request(
        request_repo,
        credential_repo,
        request_id,
        ApprovalMetadata(
            credential_type=body.credentialType,
            event_link=body.eventLink,
            issue_date=body.issueDate,
            additional_metadata=body.additionalMetadata,
        ),
    )
    return ApprovalOut(request=RequestOut.of(request), credential=CredentialOut.of(credential))


@router.post("/{request_id}/reject", response_model=RequestOut)
def reject_request(
    request_id: str,
    issuer: Annotated[UserProfile, Depends(require_issuer)],
    body: RejectIn | None = None,
) -> RequestOut:
    _get_addressed_request(request_id, issuer)
    note = body.note if body else None
    return RequestOut.of(
        lifecycle_service.reject_credential_request(request_repo, request_id, note)
    )
