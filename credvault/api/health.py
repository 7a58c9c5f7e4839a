"""Liveness and readiness.

/health answers as long as the process can respond.  /ready also
round-trips a probe key through the store, so a dead Redis shows up there
without the process being restarted.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from credvault.api.dependencies import store
from credvault.core.config import SETTINGS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_PROBE_KEY = "credvault_readiness_probe"


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/ready")
def ready(response: Response) -> dict:
    try:
        store.set(_PROBE_KEY, "ok")
        store_ok = store.get(_PROBE_KEY) == "ok"
        store.delete(_PROBE_KEY)
    except Exception:
        logger.exception("Store readiness probe failed")
        store_ok = False

    if not store_ok:
        response.status_code = 503
    return {
        "status": "ok" if store_ok else "degraded",
        "checks": {"store": {"backend": SETTINGS.store_backend, "ok": store_ok}},
    }
