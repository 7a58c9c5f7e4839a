"""Error kinds raised by the credential core.

Validation failures subclass ValueError and lookups subclass LookupError so
callers that only care about the broad category can catch the builtin.
"""

from __future__ import annotations


class CredVaultError(Exception):
    """Base for every failure the core reports."""


class MissingFieldError(CredVaultError, ValueError):
    def __init__(self, *fields: str) -> None:
        self.fields = fields
        names = " and ".join(fields) if fields else "field"
        verb = "are" if len(fields) > 1 else "is"
        super().__init__(f"{names} {verb} required")


class InvalidWalletAddressError(CredVaultError, ValueError):
    def __init__(self, address: str | None = None) -> None:
        self.address = address
        super().__init__("Invalid wallet address format")


class InvalidEmailError(CredVaultError, ValueError):
    def __init__(self, email: str | None = None) -> None:
        self.email = email
        super().__init__("Invalid email format")


class InvalidCredentialIdError(CredVaultError, ValueError):
    def __init__(self, credential_id: str | None = None) -> None:
        self.credential_id = credential_id
        super().__init__("Invalid credential ID format")


class InvalidMetadataError(CredVaultError, ValueError):
    pass


class DuplicateUserError(CredVaultError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("User with this email already exists")


class UserNotFoundError(CredVaultError, LookupError):
    pass


class RequestNotFoundError(CredVaultError, LookupError):
    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__("Request not found")


class RequestNotPendingError(CredVaultError):
    def __init__(self, request_id: str, status: str) -> None:
        self.request_id = request_id
        self.status = status
        super().__init__("Request is not pending")


class StorageCorruptError(CredVaultError):
    """Recovered locally by the store helpers; only ever logged."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"stored value under {key!r} is unreadable: {reason}")


class TransportExhaustedError(CredVaultError):
    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or "All clipboard methods failed")
