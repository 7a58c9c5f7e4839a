"""Credential request state machine and issuance.

    pending ──approve──▶ approved   (mints one IssuedCredential)
       │
       └────reject────▶ rejected   (carries a note)

Both outcomes are terminal.  Approving or rejecting anything that is not
pending raises RequestNotPendingError so the caller can tell "already
handled" apart from success and never issues a credential twice.  Pending
requests do not expire.

Approval performs two writes: the request is marked approved first, then
the credential is appended.  They are not atomic.  If the process dies in
between, the request stays approved with no credential behind it.  A
transactional backend should wrap both writes in one transaction.

Callers pass the acting user's profile explicitly; nothing here reads the
session slot.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from credvault.core.errors import (
    InvalidWalletAddressError,
    MissingFieldError,
    RequestNotFoundError,
    RequestNotPendingError,
    UserNotFoundError,
)
from credvault.models.credential import (
    CredentialDraft,
    CredentialRequest,
    CredentialRequestDraft,
    IssuedCredential,
    RequestStatus,
)
from credvault.models.user import UserProfile
from credvault.repos.credential_repo import CredentialRequestRepo, IssuedCredentialRepo
from credvault.repos.user_repo import UserRepo
from credvault.services import ledger_service
from credvault.services.metadata import ApprovalMetadata, parse_additional_metadata
from credvault.services.validators import is_valid_wallet

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_NOTE = "Request was rejected"
UNKNOWN_INSTITUTION = "Unknown Institution"

_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    "pending": frozenset({"approved", "rejected"}),
    "approved": frozenset(),
    "rejected": frozenset(),
}


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in _TRANSITIONS.get(current, frozenset())


def _load_for_transition(
    requests: CredentialRequestRepo, request_id: str, target: RequestStatus
) -> CredentialRequest:
    request = requests.get_by_id(request_id)
    if request is None:
        logger.warning("Transition to %s for unknown request=%s", target, request_id)
        raise RequestNotFoundError(request_id)
    if not can_transition(request.status, target):
        logger.warning(
            "Refused %s -> %s  request=%s",
            request.status,
            target,
            request_id,
            extra={"credential_request_id": request_id},
        )
        raise RequestNotPendingError(request_id, request.status)
    return request


# ---- issuer actions on requests ----


def approve_credential_request(
    requests: CredentialRequestRepo,
    credentials: IssuedCredentialRepo,
    request_id: str,
    metadata: ApprovalMetadata | None = None,
) -> tuple[CredentialRequest, IssuedCredential]:
    request = _load_for_transition(requests, request_id, "approved")
    metadata = metadata or ApprovalMetadata()
    # Parse before any write so bad JSON leaves the request pending
    extra_metadata = metadata.to_metadata()

    approved = replace(request, status="approved")
    requests.replace(approved)

    credential = ledger_service.save_issued_credential(
        credentials,
        approved.to_credential_draft(
            credential_type=metadata.credential_type or None,
            metadata=extra_metadata,
        ),
    )
    logger.info(
        "Request approved  request=%s credential_id=%s",
        request_id,
        credential.id,
        extra={"credential_request_id": request_id, "credential_id": credential.id},
    )
    return approved, credential


def reject_credential_request(
    requests: CredentialRequestRepo,
    request_id: str,
    rejection_note: str | None = None,
) -> CredentialRequest:
    request = _load_for_transition(requests, request_id, "rejected")

    rejected = replace(
        request,
        status="rejected",
        rejection_note=rejection_note or DEFAULT_REJECTION_NOTE,
    )
    requests.replace(rejected)
    logger.info(
        "Request rejected  request=%s",
        request_id,
        extra={"credential_request_id": request_id},
    )
    return rejected


# ---- student action ----


def request_credential(
    users: UserRepo,
    requests: CredentialRequestRepo,
    *,
    student: UserProfile,
    issuer_wallet_address: str,
    credential_title: str,
    description: str = "",
) -> CredentialRequest:
    """Submit a pending request from *student* to the issuer owning the wallet."""
    issuer_wallet_address = issuer_wallet_address.strip()
    credential_title = credential_title.strip()

    if not issuer_wallet_address:
        raise MissingFieldError("issuer wallet address")
    if not credential_title:
        raise MissingFieldError("credential title")
    if not is_valid_wallet(issuer_wallet_address):
        raise InvalidWalletAddressError(issuer_wallet_address)

    issuer = users.get_by_wallet(issuer_wallet_address)
    if issuer is None or issuer.role != "issuer":
        raise UserNotFoundError(f"no issuer registered for {issuer_wallet_address}")

    return ledger_service.submit_credential_request(
        requests,
        CredentialRequestDraft(
            student_name=student.name,
            student_email=student.email,
            student_wallet_address=student.wallet_address,
            issuer_wallet_address=issuer.wallet_address,
            issuer_name=issuer.name,
            issuer_institution=issuer.institution or UNKNOWN_INSTITUTION,
            credential_title=credential_title,
            description=description.strip(),
        ),
    )


# ---- manual mint ----


def _mint_draft(
    *,
    issuer: UserProfile,
    recipient_wallet_address: str,
    title: str,
    description: str,
    credential_type: str | None,
    additional_metadata: str | None,
) -> CredentialDraft:
    recipient = recipient_wallet_address.strip()
    title = title.strip()

    if not recipient:
        raise MissingFieldError("recipient wallet address")
    if not title:
        raise MissingFieldError("credential title")
    if not is_valid_wallet(recipient):
        raise InvalidWalletAddressError(recipient)

    return CredentialDraft(
        title=title,
        description=description.strip(),
        student_wallet_address=recipient,
        issuer_wallet_address=issuer.wallet_address,
        issuer_name=issuer.name,
        issuer_institution=issuer.institution or UNKNOWN_INSTITUTION,
        credential_type=credential_type or None,
        metadata=parse_additional_metadata(additional_metadata),
    )


def mint_credential(
    credentials: IssuedCredentialRepo,
    *,
    issuer: UserProfile,
    recipient_wallet_address: str,
    title: str,
    description: str = "",
    credential_type: str | None = None,
    additional_metadata: str | None = None,
) -> IssuedCredential:
    draft = _mint_draft(
        issuer=issuer,
        recipient_wallet_address=recipient_wallet_address,
        title=title,
        description=description,
        credential_type=credential_type,
        additional_metadata=additional_metadata,
    )
    return ledger_service.save_issued_credential(credentials, draft)


async def mint_credential_with_delay(
    credentials: IssuedCredentialRepo,
    *,
    delay_seconds: float,
    issuer: UserProfile,
    recipient_wallet_address: str,
    title: str,
    description: str = "",
    credential_type: str | None = None,
    additional_metadata: str | None = None,
) -> IssuedCredential:
    """Same as mint_credential, with a simulated chain confirmation wait.

    Input is validated before the wait; the write happens after it.
    """
    draft = _mint_draft(
        issuer=issuer,
        recipient_wallet_address=recipient_wallet_address,
        title=title,
        description=description,
        credential_type=credential_type,
        additional_metadata=additional_metadata,
    )
    if delay_seconds > 0:
        await asyncio.sleep(delay_seconds)
    return ledger_service.save_issued_credential(credentials, draft)
