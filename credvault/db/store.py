"""Durable key-value store behind the identity registry and the ledger.

Four independent records live in the store, each one complete JSON
document under its own key (see the *_KEY constants).  Repos read the whole
document, modify it and write it back.  There is no locking or versioning:
the design assumes a single active writer.  A shared backend should add a
per-key version check before relying on the read-modify-write repos.

Three backends share the KeyValueStore protocol:

  InMemoryKeyValueStore: tests and throwaway dev runs.
  FileKeyValueStore:     one JSON file per key under STORE_PATH; survives
                         restarts, nothing else to run.
  RedisKeyValueStore:    shared across processes when REDIS_URL is set.

Corrupt or missing values degrade to "empty" at this boundary (read_json),
never to a raised error.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import redis

from credvault.core.config import Settings
from credvault.core.errors import StorageCorruptError

logger = logging.getLogger(__name__)

USER_PROFILE_KEY = "credvault_user_profile"
ISSUED_CREDENTIALS_KEY = "credvault_issued_credentials"
REGISTERED_USERS_KEY = "credvault_registered_users"
CREDENTIAL_REQUESTS_KEY = "credvault_credential_requests"

ALL_KEYS = (
    USER_PROFILE_KEY,
    ISSUED_CREDENTIALS_KEY,
    REGISTERED_USERS_KEY,
    CREDENTIAL_REQUESTS_KEY,
)


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        """Return the raw stored string, or None when the key is absent."""
        ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class FileKeyValueStore:
    """One file per key.  Writes go through a temp file + os.replace so a
    crash mid-write leaves the previous document intact."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Unreadable store file  path=%s error=%s", path, e)
            return None

    def set(self, key: str, value: str) -> None:
        fd, tmp = tempfile.mkstemp(dir=self._root, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class RedisKeyValueStore:
    # Key prefix keeps our records apart from anything else on the server
    _PREFIX = "credvault:"

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client

    def get(self, key: str) -> str | None:
        return self._redis.get(f"{self._PREFIX}{key}")  # type: ignore[return-value]

    def set(self, key: str, value: str) -> None:
        self._redis.set(f"{self._PREFIX}{key}", value)

    def delete(self, key: str) -> None:
        self._redis.delete(f"{self._PREFIX}{key}")


def build_store(settings: Settings) -> KeyValueStore:
    if settings.store_backend == "redis":
        client = redis.Redis.from_url(
            settings.redis_url,  # type: ignore[arg-type]
            decode_responses=True,  # return str instead of bytes
        )
        logger.info("Using Redis key-value store: %s", settings.redis_url)
        return RedisKeyValueStore(client)
    if settings.store_backend == "file":
        logger.info("Using file key-value store: %s", settings.store_path)
        return FileKeyValueStore(settings.store_path)
    logger.info("Using in-memory key-value store")
    return InMemoryKeyValueStore()


def read_json(store: KeyValueStore, key: str, default: Any, *, expect: type) -> Any:
    """Decode the document under *key*.

    Returns *default* when the key is absent, when the value is not JSON, or
    when it decodes to something other than *expect*.  Corruption is logged,
    never raised.
    """
    raw = store.get(key)
    if raw is None:
        return default
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        _log_corrupt(StorageCorruptError(key, f"invalid JSON ({e})"))
        return default
    if not isinstance(value, expect):
        _log_corrupt(
            StorageCorruptError(
                key, f"expected {expect.__name__}, got {type(value).__name__}"
            )
        )
        return default
    return value


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))


def _log_corrupt(err: StorageCorruptError) -> None:
    logger.warning("Recovered from corrupt store value: %s", err, extra={"store_key": err.key})
