from __future__ import annotations

import re

from conftest import ISSUER_WALLET, STUDENT_WALLET
from credvault.models.credential import CredentialDraft, CredentialRequestDraft
from credvault.repos.credential_repo import (
    KeyValueCredentialRequestRepo,
    KeyValueIssuedCredentialRepo,
)
from credvault.services import ledger_service

OTHER_ISSUER = "0x" + "c" * 40
OTHER_STUDENT = "0x" + "d" * 40

_ID_RE = re.compile(r"^cred_\d+_[0-9a-z]{9}$")
_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def _draft(
    title: str = "Python Basics",
    student: str = STUDENT_WALLET,
    issuer: str = ISSUER_WALLET,
) -> CredentialDraft:
    return CredentialDraft(
        title=title,
        description="Intro course",
        student_wallet_address=student,
        issuer_wallet_address=issuer,
        issuer_name="Dr. Michael Issuer",
        issuer_institution="TechAcademy Institute",
    )


def _request_draft(issuer: str = ISSUER_WALLET) -> CredentialRequestDraft:
    return CredentialRequestDraft(
        student_name="Alex Student",
        student_email="alex@test.com",
        student_wallet_address=STUDENT_WALLET,
        issuer_wallet_address=issuer,
        issuer_name="Dr. Michael Issuer",
        issuer_institution="TechAcademy Institute",
        credential_title="Python Basics",
        description="",
    )


def test_save_issued_credential_assigns_id_date_and_status(
    credentials: KeyValueIssuedCredentialRepo,
) -> None:
    cred = ledger_service.save_issued_credential(credentials, _draft())
    assert _ID_RE.match(cred.id)
    assert _ISO_RE.match(cred.issued_date)
    assert cred.status == "issued"
    assert ledger_service.get_credential(credentials, cred.id) == cred


def test_saved_ids_are_unique(credentials: KeyValueIssuedCredentialRepo) -> None:
    ids = {ledger_service.save_issued_credential(credentials, _draft()).id for _ in range(20)}
    assert len(ids) == 20


def test_get_credential_unknown_id(credentials: KeyValueIssuedCredentialRepo) -> None:
    assert ledger_service.get_credential(credentials, "cred_missing") is None


def test_filters_by_issuer_and_student(credentials: KeyValueIssuedCredentialRepo) -> None:
    a = ledger_service.save_issued_credential(credentials, _draft("A"))
    b = ledger_service.save_issued_credential(credentials, _draft("B", issuer=OTHER_ISSUER))
    c = ledger_service.save_issued_credential(credentials, _draft("C", student=OTHER_STUDENT))

    assert [x.id for x in ledger_service.get_issued_credentials(credentials)] == [
        a.id,
        b.id,
        c.id,
    ]
    assert [x.id for x in ledger_service.get_credentials_by_issuer(credentials, ISSUER_WALLET)] == [
        a.id,
        c.id,
    ]
    assert [
        x.id for x in ledger_service.get_credentials_for_student(credentials, STUDENT_WALLET)
    ] == [a.id, b.id]


def test_wallet_filters_are_case_sensitive(credentials: KeyValueIssuedCredentialRepo) -> None:
    ledger_service.save_issued_credential(credentials, _draft())
    assert ledger_service.get_credentials_for_student(credentials, STUDENT_WALLET.upper()) == []


def test_submitted_request_starts_pending(requests: KeyValueCredentialRequestRepo) -> None:
    req = ledger_service.submit_credential_request(requests, _request_draft())
    assert req.id.startswith("req_")
    assert req.status == "pending"
    assert req.rejection_note is None
    assert ledger_service.get_credential_request(requests, req.id) == req


def test_pending_requests_for_issuer(requests: KeyValueCredentialRequestRepo) -> None:
    mine = ledger_service.submit_credential_request(requests, _request_draft())
    ledger_service.submit_credential_request(requests, _request_draft(issuer=OTHER_ISSUER))

    pending = ledger_service.get_pending_requests_for_issuer(requests, ISSUER_WALLET)
    assert [r.id for r in pending] == [mine.id]
    assert len(ledger_service.get_credential_requests(requests)) == 2
