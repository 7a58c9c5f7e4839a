"""Success/error variant for operations whose failure is part of the contract.

The URL generators return ``Result`` instead of raising so a caller has to
look at the outcome before using the value::

    result = generate_verification_url(address, credential_id)
    if isinstance(result, Err):
        return handle_url_error(result)
    url = result.value
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from credvault.core.errors import CredVaultError

T = TypeVar("T")
E = TypeVar("E", bound=CredVaultError)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Ok[T], Err[CredVaultError]]
