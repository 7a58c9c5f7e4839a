from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]
StoreBackend = Literal["memory", "file", "redis"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name, "").lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    store_backend: StoreBackend
    store_path: str
    redis_url: str | None
    public_base_url: str
    mint_delay_seconds: float
    seed_demo_users: bool

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")
    backend_raw = _getenv("STORE_BACKEND", "memory").lower()
    delay_raw = _getenv("MINT_DELAY_SECONDS", "0")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if backend_raw not in ("memory", "file", "redis"):
        raise ValueError(
            f"STORE_BACKEND must be memory|file|redis (got {backend_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    try:
        mint_delay = float(delay_raw)
    except ValueError:
        raise ValueError(
            f"MINT_DELAY_SECONDS must be a number (got {delay_raw!r})"
        ) from None
    if mint_delay < 0:
        raise ValueError(f"MINT_DELAY_SECONDS must be >= 0 (got {delay_raw!r})")

    redis_url = _getenv("REDIS_URL", "") or None
    if backend_raw == "redis" and redis_url is None:
        raise ValueError("STORE_BACKEND=redis requires REDIS_URL")

    public_base_url = _getenv("PUBLIC_BASE_URL", "http://localhost:8080").rstrip("/")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", False),
        port=port,
        store_backend=backend_raw,
        store_path=_getenv("STORE_PATH", ".credvault"),
        redis_url=redis_url,
        public_base_url=public_base_url,
        mint_delay_seconds=mint_delay,
        seed_demo_users=_getenv_bool("SEED_DEMO_USERS", app_env_raw == "dev"),
    )


# Module-level singleton so imports are cheap
SETTINGS = load_settings()
