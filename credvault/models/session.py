from __future__ import annotations

from dataclasses import dataclass

from credvault.models.user import UserProfile


@dataclass(frozen=True, slots=True)
class Session:
    """A signed-in caller: the bearer token they present and their profile."""

    token: str
    profile: UserProfile
