"""Registration, sign-in and per-caller sessions.

Registration never signs the user in; the UI sends them to the sign-in
page afterwards.  Students prove who they are with email + the exact wallet
address they registered with (there are no passwords in this demo).  Staff
and issuers sign in with email alone.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from credvault.core.errors import (
    DuplicateUserError,
    InvalidEmailError,
    InvalidWalletAddressError,
    MissingFieldError,
)
from credvault.models.ids import new_session_token
from credvault.models.session import Session
from credvault.models.user import Role, UserProfile
from credvault.repos.session_repo import SessionRepo
from credvault.repos.user_repo import UserRepo
from credvault.services.validators import is_valid_email, is_valid_wallet

logger = logging.getLogger(__name__)

# Fields a signed-in user may change on their own profile
_MUTABLE_PROFILE_FIELDS = frozenset(
    {"name", "wallet_address", "organization", "institution"}
)

_DASHBOARD_PATHS: dict[str, str] = {
    "student": "/student",
    "staff": "/staff",
    "issuer": "/issuer",
}


# ---- sessions ----


def save_user_profile(sessions: SessionRepo, token: str, profile: UserProfile) -> None:
    sessions.save(token, profile)


def get_current_user(sessions: SessionRepo, token: str | None) -> UserProfile | None:
    if not token:
        return None
    return sessions.get(token)


def is_authenticated(sessions: SessionRepo, token: str | None) -> bool:
    return get_current_user(sessions, token) is not None


def logout(sessions: SessionRepo, token: str | None) -> None:
    # Only this token's session goes away; the registry is untouched.
    if not token:
        return
    sessions.clear(token)
    logger.info("Session cleared")


def update_profile(
    sessions: SessionRepo, token: str | None, **changes: str | None
) -> UserProfile | None:
    """Merge *changes* into the profile behind *token* and persist it.

    Returns None (and writes nothing) when the token has no session.
    """
    current = get_current_user(sessions, token)
    if current is None or not token:
        return None

    unknown = set(changes) - _MUTABLE_PROFILE_FIELDS
    if unknown:
        raise ValueError(f"cannot update profile fields: {', '.join(sorted(unknown))}")

    wallet = changes.get("wallet_address")
    if wallet is not None:
        wallet = wallet.strip()
        if not is_valid_wallet(wallet):
            raise InvalidWalletAddressError(wallet)
        changes["wallet_address"] = wallet

    updated = replace(current, **changes)
    sessions.save(token, updated)
    logger.info("Profile updated  user_id=%s fields=%s", updated.id, sorted(changes))
    return updated


def get_role_dashboard_path(role: str) -> str:
    return _DASHBOARD_PATHS.get(role, "/")


# ---- registration ----


def _register(
    users: UserRepo,
    *,
    role: Role,
    name: str,
    email: str,
    wallet_address: str,
    organization: str | None = None,
    institution: str | None = None,
) -> UserProfile:
    name = name.strip()
    email = email.strip().lower()
    wallet_address = wallet_address.strip()

    if not name:
        raise MissingFieldError("name")
    if not is_valid_email(email):
        logger.warning("Rejected registration with invalid email=%r", email)
        raise InvalidEmailError(email)
    if not is_valid_wallet(wallet_address):
        logger.warning("Rejected registration with invalid wallet  email=%s", email)
        raise InvalidWalletAddressError(wallet_address)

    if users.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise DuplicateUserError(email)

    profile = UserProfile.new(
        name=name,
        email=email,
        wallet_address=wallet_address,
        role=role,
        organization=(organization or "").strip() or None,
        institution=(institution or "").strip() or None,
    )
    try:
        users.add(profile)
    except ValueError:
        # Another writer registered the same email between check and add
        raise DuplicateUserError(email) from None

    logger.info(
        "User registered  user_id=%s role=%s email=%s",
        profile.id,
        role,
        email,
        extra={"user_id": profile.id, "role": role},
    )
    return profile


def register_student(
    users: UserRepo, *, name: str, email: str, wallet_address: str
) -> UserProfile:
    return _register(
        users, role="student", name=name, email=email, wallet_address=wallet_address
    )


def register_staff(
    users: UserRepo,
    *,
    name: str,
    email: str,
    wallet_address: str,
    organization: str | None = None,
) -> UserProfile:
    return _register(
        users,
        role="staff",
        name=name,
        email=email,
        wallet_address=wallet_address,
        organization=organization,
    )


def register_issuer(
    users: UserRepo,
    *,
    name: str,
    email: str,
    wallet_address: str,
    institution: str | None = None,
) -> UserProfile:
    return _register(
        users,
        role="issuer",
        name=name,
        email=email,
        wallet_address=wallet_address,
        institution=institution,
    )


# ---- sign-in ----


def _establish(sessions: SessionRepo, user: UserProfile) -> Session:
    session = Session(token=new_session_token(), profile=user)
    sessions.save(session.token, user)
    logger.info(
        "Sign-in succeeded  user_id=%s role=%s",
        user.id,
        user.role,
        extra={"user_id": user.id, "role": user.role},
    )
    return session


def sign_in_student(
    users: UserRepo, sessions: SessionRepo, *, email: str, wallet_address: str
) -> Session | None:
    wallet_address = wallet_address.strip()
    if not is_valid_email(email.strip()):
        raise InvalidEmailError(email)
    if not is_valid_wallet(wallet_address):
        raise InvalidWalletAddressError(wallet_address)

    user = users.get_by_email_and_wallet(email, wallet_address)
    if user is None or user.role != "student":
        logger.warning("Student sign-in failed  email=%s", email)
        return None
    return _establish(sessions, user)


def _sign_in_by_email(
    users: UserRepo, sessions: SessionRepo, *, email: str, role: Role
) -> Session | None:
    if not is_valid_email(email.strip()):
        raise InvalidEmailError(email)

    user = users.get_by_email(email)
    if user is None or user.role != role:
        logger.warning("%s sign-in failed  email=%s", role.capitalize(), email)
        return None
    return _establish(sessions, user)


def sign_in_staff(users: UserRepo, sessions: SessionRepo, *, email: str) -> Session | None:
    return _sign_in_by_email(users, sessions, email=email, role="staff")


def sign_in_issuer(users: UserRepo, sessions: SessionRepo, *, email: str) -> Session | None:
    return _sign_in_by_email(users, sessions, email=email, role="issuer")
