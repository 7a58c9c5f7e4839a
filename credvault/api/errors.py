"""Map core failures to HTTP responses.

Every CredVaultError that escapes an endpoint becomes a JSON body shaped
like the HTTPException details raised elsewhere: {"detail": {"message": ...}}.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from credvault.core.errors import (
    CredVaultError,
    DuplicateUserError,
    RequestNotFoundError,
    RequestNotPendingError,
    TransportExhaustedError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


def status_for(error: CredVaultError) -> int:
    if isinstance(error, (DuplicateUserError, RequestNotPendingError)):
        return status.HTTP_409_CONFLICT
    if isinstance(error, (RequestNotFoundError, UserNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ValueError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(error, TransportExhaustedError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


def error_response(error: CredVaultError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(error),
        content={"detail": {"message": str(error)}},
    )


async def _credvault_error_handler(_request: Request, exc: CredVaultError) -> JSONResponse:
    response = error_response(exc)
    logger.info("%s -> %d: %s", type(exc).__name__, response.status_code, exc)
    return response


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CredVaultError, _credvault_error_handler)  # type: ignore[arg-type]
