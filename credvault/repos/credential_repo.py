from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, TypeVar

from credvault.db.store import (
    CREDENTIAL_REQUESTS_KEY,
    ISSUED_CREDENTIALS_KEY,
    KeyValueStore,
    read_json,
    write_json,
)
from credvault.models.credential import CredentialRequest, IssuedCredential

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IssuedCredentialRepo(Protocol):
    def list_all(self) -> list[IssuedCredential]: ...
    def get_by_id(self, credential_id: str) -> IssuedCredential | None: ...
    def add(self, credential: IssuedCredential) -> None: ...


class CredentialRequestRepo(Protocol):
    def list_all(self) -> list[CredentialRequest]: ...
    def get_by_id(self, request_id: str) -> CredentialRequest | None: ...
    def add(self, request: CredentialRequest) -> None: ...
    def replace(self, request: CredentialRequest) -> None: ...


def _load(
    store: KeyValueStore, key: str, parse: Callable[[dict[str, Any]], T]
) -> list[T]:
    items: list[T] = []
    for record in read_json(store, key, [], expect=list):
        try:
            items.append(parse(record))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed record  key=%s error=%s", key, e)
    return items


class KeyValueIssuedCredentialRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def list_all(self) -> list[IssuedCredential]:
        return _load(self._store, ISSUED_CREDENTIALS_KEY, IssuedCredential.from_record)

    def get_by_id(self, credential_id: str) -> IssuedCredential | None:
        for cred in self.list_all():
            if cred.id == credential_id:
                return cred
        return None

    def add(self, credential: IssuedCredential) -> None:
        existing = self.list_all()
        existing.append(credential)
        write_json(
            self._store, ISSUED_CREDENTIALS_KEY, [c.to_record() for c in existing]
        )


class KeyValueCredentialRequestRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def list_all(self) -> list[CredentialRequest]:
        return _load(self._store, CREDENTIAL_REQUESTS_KEY, CredentialRequest.from_record)

    def get_by_id(self, request_id: str) -> CredentialRequest | None:
        for req in self.list_all():
            if req.id == request_id:
                return req
        return None

    def add(self, request: CredentialRequest) -> None:
        existing = self.list_all()
        existing.append(request)
        self._write(existing)

    def replace(self, request: CredentialRequest) -> None:
        """Swap the stored request with the same id, keeping its position."""
        existing = self.list_all()
        for i, req in enumerate(existing):
            if req.id == request.id:
                existing[i] = request
                self._write(existing)
                return
        raise KeyError("request not found")

    def _write(self, requests: list[CredentialRequest]) -> None:
        write_json(
            self._store, CREDENTIAL_REQUESTS_KEY, [r.to_record() for r in requests]
        )
