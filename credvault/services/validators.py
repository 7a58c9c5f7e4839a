"""Syntax checks for user-supplied identifiers.

All checks are total: any input, including None or non-strings, yields a
bool.  Nothing here raises.
"""

from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_HEX_WALLET_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")
_NAMED_WALLET_RE = re.compile(r"^[A-Za-z0-9_-]+\.apt$")

# Lenient branch bounds for wallets that are neither hex nor .apt names
_MIN_OTHER_WALLET_LEN = 6
_MAX_OTHER_WALLET_LEN = 100

_MAX_CREDENTIAL_ID_LEN = 100


def is_valid_email(email: object) -> bool:
    if not isinstance(email, str):
        return False
    # fullmatch so a trailing newline can't slip past "$"
    return _EMAIL_RE.fullmatch(email) is not None


def is_valid_wallet_address(address: object) -> bool:
    if not isinstance(address, str) or not address:
        return False

    trimmed = address.strip()

    if trimmed.startswith("0x"):
        return _HEX_WALLET_RE.fullmatch(trimmed) is not None

    if ".apt" in trimmed:
        return _NAMED_WALLET_RE.fullmatch(trimmed) is not None

    # TODO: replace with the real address grammar once a chain is chosen;
    # this accepts any string of a plausible length.
    return _MIN_OTHER_WALLET_LEN <= len(trimmed) <= _MAX_OTHER_WALLET_LEN


# Registration and sign-in forms use this name.
is_valid_wallet = is_valid_wallet_address


def is_valid_credential_id(credential_id: object) -> bool:
    if not isinstance(credential_id, str) or not credential_id:
        return False
    trimmed = credential_id.strip()
    return 0 < len(trimmed) <= _MAX_CREDENTIAL_ID_LEN
