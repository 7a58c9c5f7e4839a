"""Canonical verification URLs.

Wire format (query keys are emitted in this order)::

    {origin}/verify?address=<form-encoded wallet>&credentialId=<form-encoded id>

Profile links carry ``address`` only.  ``type`` and ``issuer`` are accepted
by parse_url_params but never emitted.  For any wallet and credential id
that pass their validators, parse_url_params(generate_verification_url(a, c))
gives back ``address=a, credentialId=c``.

The generators return a Result rather than raising; handle_url_error turns
an Err (or an exception) into text for the UI.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from urllib.parse import parse_qs, urlencode, urlsplit

from credvault.core.config import SETTINGS
from credvault.core.errors import (
    InvalidCredentialIdError,
    InvalidWalletAddressError,
    MissingFieldError,
)
from credvault.core.result import Err, Ok, Result
from credvault.models.credential import IssuedCredential
from credvault.repos.credential_repo import IssuedCredentialRepo
from credvault.services import ledger_service
from credvault.services.validators import is_valid_credential_id, is_valid_wallet_address

VERIFY_PATH = "/verify"
SHARE_TITLE_SUFFIX = " - CredVault"
DEFAULT_CREDENTIAL_TYPE = "Credential"
DISPLAY_ELLIPSIS = "..."


@dataclass(frozen=True, slots=True)
class CredentialParams:
    address: str | None = None
    credential_id: str | None = None
    type: str | None = None
    issuer: str | None = None


@dataclass(frozen=True, slots=True)
class CredentialSummary:
    """The display fields a QR code or share sheet needs."""

    id: str
    title: str
    issuer: str
    type: str
    date: str

    @staticmethod
    def from_issued(credential: IssuedCredential) -> CredentialSummary:
        return CredentialSummary(
            id=credential.id,
            title=credential.title,
            issuer=credential.issuer_institution or credential.issuer_name,
            type=credential.credential_type or DEFAULT_CREDENTIAL_TYPE,
            date=credential.issued_date,
        )


@dataclass(frozen=True, slots=True)
class VerificationData:
    credential_id: str
    wallet_address: str
    issuer: str
    title: str
    type: str
    issued_date: str
    timestamp: int  # epoch millis at generation; display only


@dataclass(frozen=True, slots=True)
class VerificationUrlData:
    url: str
    data: VerificationData


@dataclass(frozen=True, slots=True)
class ShareableUrl:
    url: str
    title: str
    text: str


@dataclass(frozen=True, slots=True)
class VerificationResult:
    address: str
    credential_id: str | None
    credentials: list[IssuedCredential]
    credential: IssuedCredential | None
    valid: bool


def _origin(base_url: str | None) -> str:
    return (base_url or SETTINGS.public_base_url).rstrip("/")


def _summarize(credential: CredentialSummary | IssuedCredential) -> CredentialSummary:
    if isinstance(credential, IssuedCredential):
        return CredentialSummary.from_issued(credential)
    return credential


# ---- generators ----


def generate_verification_url(
    wallet_address: str | None,
    credential_id: str | None,
    base_url: str | None = None,
) -> Result[str]:
    if not wallet_address or not credential_id:
        return Err(MissingFieldError("Wallet address", "credential ID"))

    clean_address = wallet_address.strip()
    clean_credential_id = credential_id.strip()

    # The credential id is deliberately not validated here; the verify
    # page checks it when the link is opened.
    if not is_valid_wallet_address(clean_address):
        return Err(InvalidWalletAddressError(clean_address))

    query = urlencode({"address": clean_address, "credentialId": clean_credential_id})
    return Ok(f"{_origin(base_url)}{VERIFY_PATH}?{query}")


def generate_profile_url(
    wallet_address: str | None, base_url: str | None = None
) -> Result[str]:
    if not wallet_address:
        return Err(MissingFieldError("Wallet address"))

    clean_address = wallet_address.strip()
    if not is_valid_wallet_address(clean_address):
        return Err(InvalidWalletAddressError(clean_address))

    query = urlencode({"address": clean_address})
    return Ok(f"{_origin(base_url)}{VERIFY_PATH}?{query}")


def generate_qr_verification_data(
    credential: CredentialSummary | IssuedCredential,
    wallet_address: str,
    base_url: str | None = None,
) -> Result[VerificationUrlData]:
    summary = _summarize(credential)
    result = generate_verification_url(wallet_address, summary.id, base_url)
    if isinstance(result, Err):
        return result

    return Ok(
        VerificationUrlData(
            url=result.value,
            data=VerificationData(
                credential_id=summary.id,
                wallet_address=wallet_address,
                issuer=summary.issuer,
                title=summary.title,
                type=summary.type,
                issued_date=summary.date,
                timestamp=int(time.time() * 1000),
            ),
        )
    )


def create_shareable_url(
    credential: CredentialSummary | IssuedCredential,
    wallet_address: str,
    base_url: str | None = None,
) -> Result[ShareableUrl]:
    summary = _summarize(credential)
    result = generate_verification_url(wallet_address, summary.id, base_url)
    if isinstance(result, Err):
        return result

    return Ok(
        ShareableUrl(
            url=result.value,
            title=f"{summary.title}{SHARE_TITLE_SUFFIX}",
            text=(
                f'Verify this {summary.type.lower()}: "{summary.title}" '
                f"issued by {summary.issuer}"
            ),
        )
    )


# ---- parsing ----


def parse_url_params(location: str | None) -> CredentialParams:
    """Extract the verification parameters from *location*.

    *location* may be a full URL, a path with a query, or a bare query
    string with or without the leading ``?``.  Missing or empty
    parameters come back as None.
    """
    if not location:
        return CredentialParams()

    if "?" in location or "://" in location:
        query = urlsplit(location).query
    else:
        query = location

    values = parse_qs(query.lstrip("?"))

    def first(name: str) -> str | None:
        found = values.get(name)
        return found[0] if found else None

    return CredentialParams(
        address=first("address"),
        credential_id=first("credentialId"),
        type=first("type"),
        issuer=first("issuer"),
    )


# ---- display helpers ----


def sanitize_url_for_display(url: str, max_length: int = 60) -> str:
    if len(url) <= max_length:
        return url

    # An odd length gives the extra character to the tail
    head = max_length // 2
    tail = max_length - head
    return f"{url[:head]}{DISPLAY_ELLIPSIS}{url[len(url) - tail:]}"


_BAD_WALLET_HINT = "Invalid wallet address format. Please check the address and try again."
_MISSING_INFO_HINT = "Missing required information for verification URL."


def handle_url_error(error: object) -> str:
    if isinstance(error, Err):
        error = error.error

    if isinstance(error, InvalidWalletAddressError):
        return _BAD_WALLET_HINT
    if isinstance(error, MissingFieldError):
        return _MISSING_INFO_HINT
    if isinstance(error, Exception):
        message = str(error)
        if "Invalid wallet address" in message:
            return _BAD_WALLET_HINT
        if "required" in message:
            return _MISSING_INFO_HINT
        return message

    return "Unable to generate verification URL. Please try again."


# ---- lookup ----


def verify_credential(
    credentials: IssuedCredentialRepo,
    address: str | None,
    credential_id: str | None = None,
) -> Result[VerificationResult]:
    """Resolve verification parameters against the ledger.

    Without a credential id, the result lists everything held by *address*
    and is valid when at least one of them is still issued.  With one, it
    is valid only when that credential belongs to *address* and is issued.
    """
    if not address:
        return Err(MissingFieldError("Wallet address"))

    clean_address = address.strip()
    if not is_valid_wallet_address(clean_address):
        return Err(InvalidWalletAddressError(clean_address))

    held = ledger_service.get_credentials_for_student(credentials, clean_address)

    if credential_id is None:
        return Ok(
            VerificationResult(
                address=clean_address,
                credential_id=None,
                credentials=held,
                credential=None,
                valid=any(c.status == "issued" for c in held),
            )
        )

    if not is_valid_credential_id(credential_id):
        return Err(InvalidCredentialIdError(credential_id))

    clean_id = credential_id.strip()
    match = next((c for c in held if c.id == clean_id), None)
    return Ok(
        VerificationResult(
            address=clean_address,
            credential_id=clean_id,
            credentials=held,
            credential=match,
            valid=match is not None and match.status == "issued",
        )
    )
