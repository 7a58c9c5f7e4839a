"""Per-caller session slots, keyed by bearer token.

All sessions live in one JSON object under the session key, mapping each
token to the profile it signed in as.  Only the entry points (HTTP
dependency, CLI bootstrap) read these slots; the services below them
receive the resulting UserProfile as an argument.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from credvault.db.store import USER_PROFILE_KEY, KeyValueStore, read_json, write_json
from credvault.models.user import UserProfile

logger = logging.getLogger(__name__)


class SessionRepo(Protocol):
    def get(self, token: str) -> UserProfile | None: ...
    def save(self, token: str, profile: UserProfile) -> None: ...
    def clear(self, token: str) -> None: ...


class KeyValueSessionRepo:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _all(self) -> dict[str, Any]:
        return read_json(self._store, USER_PROFILE_KEY, {}, expect=dict)

    def get(self, token: str) -> UserProfile | None:
        record = self._all().get(token)
        if record is None:
            return None
        try:
            return UserProfile.from_record(record)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Discarding malformed session record: %s", e)
            return None

    def save(self, token: str, profile: UserProfile) -> None:
        slots = self._all()
        slots[token] = profile.to_record()
        write_json(self._store, USER_PROFILE_KEY, slots)

    def clear(self, token: str) -> None:
        slots = self._all()
        if slots.pop(token, None) is None:
            return
        if slots:
            write_json(self._store, USER_PROFILE_KEY, slots)
        else:
            self._store.delete(USER_PROFILE_KEY)
