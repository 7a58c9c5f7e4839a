"""Registration, sign-in and profile endpoints.

POST  /auth/register/{role}  create an account (does NOT sign in)
POST  /auth/signin/{role}    sign in; students also send walletAddress
POST  /auth/logout           revoke the caller's bearer token
GET   /auth/me               current profile
PATCH /auth/me               edit own profile
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from credvault.api.dependencies import (
    bearer_token,
    require_session,
    require_user,
    session_repo,
    user_repo,
)
from credvault.core.errors import MissingFieldError
from credvault.models.session import Session
from credvault.models.user import Role, UserProfile
from credvault.services import identity_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# --- Request / Response schemas -------------------------------------------


class RegisterIn(BaseModel):
    name: str
    email: str
    walletAddress: str
    organization: str | None = None
    institution: str | None = None


class SignInIn(BaseModel):
    email: str
    walletAddress: str | None = None


class UpdateProfileIn(BaseModel):
    name: str | None = None
    walletAddress: str | None = None
    organization: str | None = None
    institution: str | None = None


class ProfileOut(BaseModel):
    id: str
    name: str
    email: str
    walletAddress: str
    role: Role
    organization: str | None = None
    institution: str | None = None
    createdAt: str
    dashboardPath: str

    @staticmethod
    def of(profile: UserProfile) -> ProfileOut:
        return ProfileOut(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            walletAddress=profile.wallet_address,
            role=profile.role,
            organization=profile.organization,
            institution=profile.institution,
            createdAt=profile.created_at,
            dashboardPath=identity_service.get_role_dashboard_path(profile.role),
        )


class SignInOut(ProfileOut):
    """The profile plus the bearer token the caller sends from now on."""

    accessToken: str
    tokenType: str = "bearer"

    @staticmethod
    def of_session(session: Session) -> SignInOut:
        return SignInOut(
            **ProfileOut.of(session.profile).model_dump(),
            accessToken=session.token,
        )


# --- POST /auth/register/{role}-------------------------------------------


@router.post(
    "/register/{role}",
    response_model=ProfileOut,
    status_code=status.HTTP_201_CREATED,
)
def register(role: Role, payload: RegisterIn) -> ProfileOut:
    if role == "student":
        profile = identity_service.register_student(
            user_repo,
            name=payload.name,
            email=payload.email,
            wallet_address=payload.walletAddress,
        )
    elif role == "staff":
        profile = identity_service.register_staff(
            user_repo,
            name=payload.name,
            email=payload.email,
            wallet_address=payload.walletAddress,
            organization=payload.organization,
        )
    else:
        profile = identity_service.register_issuer(
            user_repo,
            name=payload.name,
            email=payload.email,
            wallet_address=payload.walletAddress,
            institution=payload.institution,
        )
    return ProfileOut.of(profile)


# --- POST /auth/signin/{role} ---------------------------------------------


@router.post("/signin/{role}", response_model=SignInOut)
def sign_in(role: Role, payload: SignInIn) -> SignInOut:
    session: Session | None
    if role == "student":
        if not payload.walletAddress:
            raise MissingFieldError("walletAddress")
        session = identity_service.sign_in_student(
            user_repo,
            session_repo,
            email=payload.email,
            wallet_address=payload.walletAddress,
        )
    elif role == "staff":
        session = identity_service.sign_in_staff(
            user_repo, session_repo, email=payload.email
        )
    else:
        session = identity_service.sign_in_issuer(
            user_repo, session_repo, email=payload.email
        )

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": f"No {role} account matches these details"},
        )
    return SignInOut.of_session(session)


# --- POST /auth/logout ----------------------------------------------------


@router.post("/logout", status_code=204)
def logout(token: Annotated[str | None, Depends(bearer_token)]) -> Response:
    # Idempotent: an absent or already revoked token is still a 204
    identity_service.logout(session_repo, token)
    return Response(status_code=204)


# --- /auth/me --------------------------------------------------------------


@router.get("/me", response_model=ProfileOut)
def get_my_profile(
    profile: Annotated[UserProfile, Depends(require_user)],
) -> ProfileOut:
    return ProfileOut.of(profile)


@router.patch("/me", response_model=ProfileOut)
def update_my_profile(
    body: UpdateProfileIn,
    session: Annotated[Session, Depends(require_session)],
) -> ProfileOut:
    changes: dict[str, str] = {}
    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise MissingFieldError("name")
        changes["name"] = name
    if body.walletAddress is not None:
        changes["wallet_address"] = body.walletAddress
    if body.organization is not None:
        changes["organization"] = body.organization
    if body.institution is not None:
        changes["institution"] = body.institution

    updated = identity_service.update_profile(session_repo, session.token, **changes)
    if updated is None:
        # Token revoked between the dependency and here
        raise HTTPException(status_code=401, detail={"message": "Not signed in"})
    return ProfileOut.of(updated)
