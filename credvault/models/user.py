from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from credvault.models.ids import new_id, utc_now_iso

Role = Literal["student", "staff", "issuer"]
ROLES: tuple[Role, ...] = ("student", "staff", "issuer")


@dataclass(frozen=True, slots=True)
class UserProfile:
    id: str
    name: str
    email: str
    wallet_address: str
    role: Role
    created_at: str
    organization: str | None = None  # staff only
    institution: str | None = None  # issuer only

    @staticmethod
    def new(
        *,
        name: str,
        email: str,
        wallet_address: str,
        role: Role,
        organization: str | None = None,
        institution: str | None = None,
    ) -> UserProfile:
        return UserProfile(
            id=new_id("user"),
            name=name,
            email=email,
            wallet_address=wallet_address,
            role=role,
            created_at=utc_now_iso(),
            organization=organization if role == "staff" else None,
            institution=institution if role == "issuer" else None,
        )

    @property
    def normalized_email(self) -> str:
        return self.email.strip().lower()

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "walletAddress": self.wallet_address,
            "role": self.role,
            "createdAt": self.created_at,
        }
        if self.organization is not None:
            record["organization"] = self.organization
        if self.institution is not None:
            record["institution"] = self.institution
        return record

    @staticmethod
    def from_record(record: dict[str, Any]) -> UserProfile:
        """Raises KeyError/ValueError on a malformed record."""
        role = record["role"]
        if role not in ROLES:
            raise ValueError(f"unknown role {role!r}")
        return UserProfile(
            id=str(record["id"]),
            name=str(record["name"]),
            email=str(record["email"]),
            wallet_address=str(record["walletAddress"]),
            role=role,
            created_at=str(record["createdAt"]),
            organization=record.get("organization"),
            institution=record.get("institution"),
        )


# The registry keeps the same shape as the session record.
StoredUser = UserProfile
