"""Resource-level access checks.

Plain functions (not dependencies) because they need both the acting
profile and the loaded resource.  Call them at the top of an endpoint body.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from credvault.models.credential import CredentialRequest
from credvault.models.user import UserProfile

logger = logging.getLogger(__name__)


def check_request_addressed_to(issuer: UserProfile, request: CredentialRequest) -> None:
    """Raise 403 unless *request* was sent to *issuer*'s wallet."""
    if request.issuer_wallet_address == issuer.wallet_address:
        return
    logger.warning(
        "Access denied: issuer=%s acting on request=%s addressed to %s",
        issuer.id,
        request.id,
        request.issuer_wallet_address,
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"message": "This request was sent to a different issuer"},
    )
