from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credvault.api.auth import router as auth_router
from credvault.api.credentials import router as credentials_router
from credvault.api.dependencies import user_repo
from credvault.api.errors import register_error_handlers
from credvault.api.health import router as health_router
from credvault.api.requests import router as requests_router
from credvault.api.verify import router as verify_router
from credvault.core.config import SETTINGS
from credvault.core.logging import setup_logging
from credvault.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)
from credvault.services.seed import seed_demo_users

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_request_context_filter()

logger = logging.getLogger(__name__)

if SETTINGS.seed_demo_users:
    seed_demo_users(user_repo)

# only app setup + router registration

app = FastAPI(
    title="credvault",
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[SETTINGS.public_base_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext (outermost) → CORS → route handler
app.add_middleware(RequestContextMiddleware)

register_error_handlers(app)

app.include_router(auth_router)
app.include_router(credentials_router)
app.include_router(health_router)
app.include_router(requests_router)
app.include_router(verify_router)

logger.info(
    "credvault started  env=%s log_level=%s store=%s base_url=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.store_backend,
    SETTINGS.public_base_url,
    "on" if SETTINGS.is_dev else "off",
)


def run() -> None:
    """Console entry point: serve the app on SETTINGS.port."""
    uvicorn.run(app, host="0.0.0.0", port=SETTINGS.port, log_config=None)
