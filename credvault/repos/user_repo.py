from __future__ import annotations

import logging
from typing import Protocol

from credvault.db.store import REGISTERED_USERS_KEY, KeyValueStore, read_json, write_json
from credvault.models.user import StoredUser

logger = logging.getLogger(__name__)


class UserRepo(Protocol):
    def list_all(self) -> list[StoredUser]: ...
    def get_by_email(self, email: str) -> StoredUser | None: ...
    def get_by_email_and_wallet(
        self, email: str, wallet_address: str
    ) -> StoredUser | None: ...
    def get_by_wallet(self, wallet_address: str) -> StoredUser | None: ...
    def add(self, user: StoredUser) -> None: ...


class KeyValueUserRepo:
    """Registered-users list, stored as one JSON array."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def list_all(self) -> list[StoredUser]:
        users: list[StoredUser] = []
        for record in read_json(self._store, REGISTERED_USERS_KEY, [], expect=list):
            try:
                users.append(StoredUser.from_record(record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed user record: %s", e)
        return users

    def get_by_email(self, email: str) -> StoredUser | None:
        wanted = email.strip().lower()
        for user in self.list_all():
            if user.normalized_email == wanted:
                return user
        return None

    def get_by_email_and_wallet(
        self, email: str, wallet_address: str
    ) -> StoredUser | None:
        # Wallet must match exactly; it stands in for a password.
        wanted = email.strip().lower()
        for user in self.list_all():
            if user.normalized_email == wanted and user.wallet_address == wallet_address:
                return user
        return None

    def get_by_wallet(self, wallet_address: str) -> StoredUser | None:
        for user in self.list_all():
            if user.wallet_address == wallet_address:
                return user
        return None

    def add(self, user: StoredUser) -> None:
        users = self.list_all()
        if any(u.normalized_email == user.normalized_email for u in users):
            raise ValueError("email already exists")
        users.append(user)
        write_json(self._store, REGISTERED_USERS_KEY, [u.to_record() for u in users])
