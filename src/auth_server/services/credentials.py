# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Credential hash verification.

The hashing algorithm is an opaque capability for the rest of the core:
registries and stores only see the ``CredentialVerifier`` protocol.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from beartype import beartype
from passlib.context import CryptContext


@runtime_checkable
class CredentialVerifier(Protocol):
    """Checks a presented secret against a stored hash."""

    def verify(self, presented: str, stored_hash: str) -> bool: ...

    def dummy_verify(self) -> None:
        """Spend the cost of one verification when no stored hash exists."""
        ...


class PasswordVerifier:
    """passlib-backed verifier for client secrets and user passwords."""

    def __init__(self, schemes: Sequence[str] = ("argon2", "pbkdf2_sha256")) -> None:
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    @beartype
    def verify(self, presented: str, stored_hash: str) -> bool:
        """Return False for mismatches and for hashes no scheme recognises."""
        try:
            return bool(self._context.verify(presented, stored_hash))
        except ValueError:
            return False

    @beartype
    def dummy_verify(self) -> None:
        """Take as long as a real verification, for unknown identifiers."""
        self._context.dummy_verify()

    @beartype
    def hash(self, secret: str) -> str:
        """Hash a secret with the preferred scheme (provisioning tools, tests)."""
        return str(self._context.hash(secret))
