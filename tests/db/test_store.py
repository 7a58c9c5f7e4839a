from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from credvault.core.config import Settings
from credvault.db.store import (
    ISSUED_CREDENTIALS_KEY,
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
    build_store,
    read_json,
    write_json,
)


class _FakeRedis:
    """Just enough of redis.Redis for the store wrapper."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


def _settings(**overrides) -> Settings:
    values = dict(
        app_env="test",
        log_level="info",
        log_json=False,
        port=8000,
        store_backend="memory",
        store_path=".credvault",
        redis_url=None,
        public_base_url="http://localhost:8080",
        mint_delay_seconds=0.0,
        seed_demo_users=False,
    )
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


def test_in_memory_store_get_set_delete() -> None:
    store = InMemoryKeyValueStore()
    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"
    store.delete("k")
    assert store.get("k") is None
    store.delete("k")  # deleting an absent key is a no-op


def test_file_store_persists_across_instances(tmp_path: Path) -> None:
    first = FileKeyValueStore(tmp_path / "data")
    first.set("credvault_registered_users", "[1, 2]")

    second = FileKeyValueStore(tmp_path / "data")
    assert second.get("credvault_registered_users") == "[1, 2]"
    assert (tmp_path / "data" / "credvault_registered_users.json").exists()


def test_file_store_leaves_no_temp_files(tmp_path: Path) -> None:
    store = FileKeyValueStore(tmp_path)
    store.set("k", "one")
    store.set("k", "two")
    assert store.get("k") == "two"
    assert [p.name for p in tmp_path.iterdir()] == ["k.json"]


def test_file_store_delete_missing_key(tmp_path: Path) -> None:
    store = FileKeyValueStore(tmp_path)
    store.delete("never-written")
    assert store.get("never-written") is None


def test_redis_store_prefixes_keys() -> None:
    fake = _FakeRedis()
    store = RedisKeyValueStore(fake)  # type: ignore[arg-type]
    store.set("credvault_user_profile", "{}")
    assert fake.data == {"credvault:credvault_user_profile": "{}"}
    assert store.get("credvault_user_profile") == "{}"
    store.delete("credvault_user_profile")
    assert fake.data == {}


def test_all_backends_satisfy_protocol(tmp_path: Path) -> None:
    assert isinstance(InMemoryKeyValueStore(), KeyValueStore)
    assert isinstance(FileKeyValueStore(tmp_path), KeyValueStore)
    assert isinstance(RedisKeyValueStore(_FakeRedis()), KeyValueStore)  # type: ignore[arg-type]


def test_build_store_picks_backend(tmp_path: Path) -> None:
    assert isinstance(build_store(_settings()), InMemoryKeyValueStore)
    file_store = build_store(
        _settings(store_backend="file", store_path=str(tmp_path / "s"))
    )
    assert isinstance(file_store, FileKeyValueStore)


# ---- read_json / write_json ----


def test_read_json_missing_key_returns_default() -> None:
    assert read_json(InMemoryKeyValueStore(), "absent", [], expect=list) == []


def test_write_then_read_json() -> None:
    store = InMemoryKeyValueStore()
    write_json(store, ISSUED_CREDENTIALS_KEY, [{"id": "cred_1"}])
    assert json.loads(store.get(ISSUED_CREDENTIALS_KEY) or "") == [{"id": "cred_1"}]
    assert read_json(store, ISSUED_CREDENTIALS_KEY, [], expect=list) == [{"id": "cred_1"}]


def test_read_json_recovers_from_invalid_json(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryKeyValueStore()
    store.set(ISSUED_CREDENTIALS_KEY, "{not json")

    with caplog.at_level(logging.WARNING, logger="credvault.db.store"):
        assert read_json(store, ISSUED_CREDENTIALS_KEY, [], expect=list) == []

    assert any("corrupt store value" in r.getMessage() for r in caplog.records)
    assert caplog.records[-1].store_key == ISSUED_CREDENTIALS_KEY  # type: ignore[attr-defined]


def test_read_json_recovers_from_wrong_shape() -> None:
    store = InMemoryKeyValueStore()
    store.set(ISSUED_CREDENTIALS_KEY, '{"id": "not-a-list"}')
    assert read_json(store, ISSUED_CREDENTIALS_KEY, [], expect=list) == []
