"""Demo accounts for local development.

    student  student@test.com        + wallet 0x1234567890abcdef1234567890abcdef12345678
    staff    staff@university.edu    (email only)
    issuer   issuer@techacademy.edu  (email only)
"""

from __future__ import annotations

import logging

from credvault.db.store import ALL_KEYS, KeyValueStore
from credvault.models.ids import utc_now_iso
from credvault.models.user import StoredUser
from credvault.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

DEMO_STUDENT_WALLET = "0x1234567890abcdef1234567890abcdef12345678"
DEMO_STAFF_WALLET = "0xabcdef1234567890abcdef1234567890abcdef12"
DEMO_ISSUER_WALLET = "0x9876543210fedcba9876543210fedcba98765432"


def _demo_users() -> list[StoredUser]:
    created_at = utc_now_iso()
    return [
        StoredUser(
            id="test_student_001",
            name="Alex Student",
            email="student@test.com",
            wallet_address=DEMO_STUDENT_WALLET,
            role="student",
            created_at=created_at,
        ),
        StoredUser(
            id="test_staff_001",
            name="Sarah Verifier",
            email="staff@university.edu",
            wallet_address=DEMO_STAFF_WALLET,
            role="staff",
            created_at=created_at,
            organization="Tech University",
        ),
        StoredUser(
            id="test_issuer_001",
            name="Dr. Michael Issuer",
            email="issuer@techacademy.edu",
            wallet_address=DEMO_ISSUER_WALLET,
            role="issuer",
            created_at=created_at,
            institution="TechAcademy Institute",
        ),
    ]


def seed_demo_users(users: UserRepo) -> int:
    """Insert the demo accounts that are missing. Returns how many were added."""
    added = 0
    for user in _demo_users():
        if users.get_by_email(user.email) is not None:
            continue
        users.add(user)
        added += 1
    if added:
        logger.info("Seeded %d demo user(s)", added)
    return added


def demo_users_exist(users: UserRepo) -> bool:
    return all(users.get_by_email(u.email) is not None for u in _demo_users())


def clear_demo_data(store: KeyValueStore) -> None:
    for key in ALL_KEYS:
        store.delete(key)
    logger.info("Cleared all stored credvault data")
