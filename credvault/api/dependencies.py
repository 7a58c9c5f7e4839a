from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credvault.core.config import SETTINGS
from credvault.db.store import build_store
from credvault.models.session import Session
from credvault.models.user import Role, UserProfile
from credvault.repos.credential_repo import (
    KeyValueCredentialRequestRepo,
    KeyValueIssuedCredentialRepo,
)
from credvault.repos.session_repo import KeyValueSessionRepo
from credvault.repos.user_repo import KeyValueUserRepo
from credvault.services import identity_service

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level singletons over one shared store
# ---------------------------------------------------------------------------
store = build_store(SETTINGS)
user_repo = KeyValueUserRepo(store)
session_repo = KeyValueSessionRepo(store)
credential_repo = KeyValueIssuedCredentialRepo(store)
request_repo = KeyValueCredentialRequestRepo(store)

# auto_error=False so a missing header reaches require_session's own 401
bearer_scheme = HTTPBearer(auto_error=False)


def bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """The raw token from ``Authorization: Bearer <token>``, if any."""
    if credentials is None:
        return None
    return credentials.credentials


def require_session(
    token: Annotated[str | None, Depends(bearer_token)],
) -> Session:
    """Resolve the caller's bearer token to their session.

    Used as a FastAPI dependency on any endpoint that acts for a user.
    """
    profile = identity_service.get_current_user(session_repo, token)
    if profile is None or token is None:
        if token is not None:
            logger.warning("Unknown or revoked session token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not signed in"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Session(token=token, profile=profile)


def require_user(
    session: Annotated[Session, Depends(require_session)],
) -> UserProfile:
    return session.profile


def require_role(role: Role):
    """Dependency factory: demand a signed-in user with *role*.

    Usage: Depends(require_role("issuer"))
    """

    def _guard(
        profile: Annotated[UserProfile, Depends(require_user)],
    ) -> UserProfile:
        if profile.role != role:
            logger.warning(
                "Access denied: user=%s role=%s required=%s",
                profile.id,
                profile.role,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": f"This action is only for {role}s"},
            )
        return profile

    return _guard


require_student = require_role("student")
require_staff = require_role("staff")
require_issuer = require_role("issuer")
