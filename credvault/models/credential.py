from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from credvault.models.ids import new_id, utc_now_iso

CredentialStatus = Literal["issued", "pending", "revoked"]
RequestStatus = Literal["pending", "approved", "rejected"]
MetadataValue = str | int | float | bool | None

_CREDENTIAL_STATUSES = ("issued", "pending", "revoked")
_REQUEST_STATUSES = ("pending", "approved", "rejected")


@dataclass(frozen=True, slots=True)
class CredentialDraft:
    """Everything the caller supplies when minting; the ledger adds the rest."""

    title: str
    description: str
    student_wallet_address: str
    issuer_wallet_address: str
    issuer_name: str
    issuer_institution: str
    credential_type: str | None = None
    metadata: dict[str, MetadataValue] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class IssuedCredential:
    id: str
    title: str
    description: str
    student_wallet_address: str
    issuer_wallet_address: str
    issuer_name: str
    issuer_institution: str
    issued_date: str
    status: CredentialStatus = "issued"
    credential_type: str | None = None
    metadata: dict[str, MetadataValue] = field(default_factory=dict)

    @staticmethod
    def issue(draft: CredentialDraft) -> IssuedCredential:
        return IssuedCredential(
            id=new_id("cred"),
            title=draft.title,
            description=draft.description,
            student_wallet_address=draft.student_wallet_address,
            issuer_wallet_address=draft.issuer_wallet_address,
            issuer_name=draft.issuer_name,
            issuer_institution=draft.issuer_institution,
            issued_date=utc_now_iso(),
            status="issued",
            credential_type=draft.credential_type,
            metadata=dict(draft.metadata),
        )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "studentWalletAddress": self.student_wallet_address,
            "issuerWalletAddress": self.issuer_wallet_address,
            "issuerName": self.issuer_name,
            "issuerInstitution": self.issuer_institution,
            "issuedDate": self.issued_date,
            "status": self.status,
        }
        if self.credential_type is not None:
            record["credentialType"] = self.credential_type
        if self.metadata:
            record["metadata"] = dict(self.metadata)
        return record

    @staticmethod
    def from_record(record: dict[str, Any]) -> IssuedCredential:
        status = record["status"]
        if status not in _CREDENTIAL_STATUSES:
            raise ValueError(f"unknown credential status {status!r}")
        metadata = record.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError("metadata must be an object")
        return IssuedCredential(
            id=str(record["id"]),
            title=str(record["title"]),
            description=str(record["description"]),
            student_wallet_address=str(record["studentWalletAddress"]),
            issuer_wallet_address=str(record["issuerWalletAddress"]),
            issuer_name=str(record["issuerName"]),
            issuer_institution=str(record["issuerInstitution"]),
            issued_date=str(record["issuedDate"]),
            status=status,
            credential_type=record.get("credentialType"),
            metadata=metadata,
        )


@dataclass(frozen=True, slots=True)
class CredentialRequestDraft:
    student_name: str
    student_email: str
    student_wallet_address: str
    issuer_wallet_address: str
    issuer_name: str
    issuer_institution: str
    credential_title: str
    description: str


@dataclass(frozen=True, slots=True)
class CredentialRequest:
    id: str
    student_name: str
    student_email: str
    student_wallet_address: str
    issuer_wallet_address: str
    issuer_name: str
    issuer_institution: str
    credential_title: str
    description: str
    request_date: str
    status: RequestStatus = "pending"
    rejection_note: str | None = None  # only set when rejected

    @staticmethod
    def submit(draft: CredentialRequestDraft) -> CredentialRequest:
        return CredentialRequest(
            id=new_id("req"),
            student_name=draft.student_name,
            student_email=draft.student_email,
            student_wallet_address=draft.student_wallet_address,
            issuer_wallet_address=draft.issuer_wallet_address,
            issuer_name=draft.issuer_name,
            issuer_institution=draft.issuer_institution,
            credential_title=draft.credential_title,
            description=draft.description,
            request_date=utc_now_iso(),
            status="pending",
        )

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def to_credential_draft(
        self,
        *,
        credential_type: str | None = None,
        metadata: dict[str, MetadataValue] | None = None,
    ) -> CredentialDraft:
        return CredentialDraft(
            title=self.credential_title,
            description=self.description,
            student_wallet_address=self.student_wallet_address,
            issuer_wallet_address=self.issuer_wallet_address,
            issuer_name=self.issuer_name,
            issuer_institution=self.issuer_institution,
            credential_type=credential_type,
            metadata=metadata or {},
        )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "studentName": self.student_name,
            "studentEmail": self.student_email,
            "studentWalletAddress": self.student_wallet_address,
            "issuerWalletAddress": self.issuer_wallet_address,
            "issuerName": self.issuer_name,
            "issuerInstitution": self.issuer_institution,
            "credentialTitle": self.credential_title,
            "description": self.description,
            "requestDate": self.request_date,
            "status": self.status,
        }
        if self.rejection_note is not None:
            record["rejectionNote"] = self.rejection_note
        return record

    @staticmethod
    def from_record(record: dict[str, Any]) -> CredentialRequest:
        status = record["status"]
        if status not in _REQUEST_STATUSES:
            raise ValueError(f"unknown request status {status!r}")
        return CredentialRequest(
            id=str(record["id"]),
            student_name=str(record["studentName"]),
            student_email=str(record["studentEmail"]),
            student_wallet_address=str(record["studentWalletAddress"]),
            issuer_wallet_address=str(record["issuerWalletAddress"]),
            issuer_name=str(record["issuerName"]),
            issuer_institution=str(record["issuerInstitution"]),
            credential_title=str(record["credentialTitle"]),
            description=str(record["description"]),
            request_date=str(record["requestDate"]),
            status=status,
            rejection_note=record.get("rejectionNote") if status == "rejected" else None,
        )
