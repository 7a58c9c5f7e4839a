from __future__ import annotations

import datetime
import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def new_id(prefix: str) -> str:
    """Opaque id: ``<prefix>_<epoch millis>_<9 base36 chars>``."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{prefix}_{millis}_{suffix}"


def utc_now_iso() -> str:
    # Millisecond precision with a Z suffix, the shape browsers emit
    now = datetime.datetime.now(datetime.UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_session_token() -> str:
    return secrets.token_urlsafe(32)
