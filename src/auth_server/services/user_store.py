# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""End-user resolution and account status gating."""

from enum import Enum

from beartype import beartype

from ..core.errors import (
    AccountDisabled,
    AccountExpired,
    AccountLocked,
    AccountStatusError,
    CredentialsExpired,
    InvalidUserCredentials,
    UserLookupError,
    UserNotFound,
)
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.user import UserPrincipal
from .credentials import CredentialVerifier
from .repositories import UserRepository

logger = get_logger(__name__)


class IdentifierKind(str, Enum):
    BY_USERNAME = "username"
    BY_EMAIL = "email"


@beartype
def classify_identifier(identifier: str) -> IdentifierKind:
    """Decide whether a login identifier is an email address or a username.

    Anything containing "@" is treated as an email. A username that itself
    contains "@" is therefore looked up by email and will not resolve.
    """
    if "@" in identifier:
        return IdentifierKind.BY_EMAIL
    return IdentifierKind.BY_USERNAME


@beartype
def check_account_status(principal: UserPrincipal) -> Result[UserPrincipal, AccountStatusError]:
    """Reject principals whose account flags forbid authentication.

    Order is fixed: disabled, account expired, credentials expired, locked.
    """
    if not principal.enabled:
        return Err(AccountDisabled(f"User {principal.id} is disabled"))
    if not principal.account_non_expired:
        return Err(AccountExpired(f"User {principal.id} account has expired"))
    if not principal.credentials_non_expired:
        return Err(CredentialsExpired(f"User {principal.id} credentials have expired"))
    if not principal.account_non_locked:
        return Err(AccountLocked(f"User {principal.id} account is locked"))
    return Ok(principal)


class UserPrincipalStore:
    """Resolves login identifiers to principals that may authenticate."""

    def __init__(self, repository: UserRepository, verifier: CredentialVerifier) -> None:
        self._repository = repository
        self._verifier = verifier

    @beartype
    async def resolve(self, login_identifier: str) -> Result[UserPrincipal, UserLookupError]:
        """Look up a principal by username or email and check its status."""
        if classify_identifier(login_identifier) is IdentifierKind.BY_EMAIL:
            principal = await self._repository.find_by_email(login_identifier)
        else:
            principal = await self._repository.find_by_username(login_identifier)

        if principal is None:
            logger.info("User lookup failed for identifier %s", login_identifier)
            return Err(UserNotFound(f"No user for identifier {login_identifier}"))

        status = check_account_status(principal)
        if status.is_err():
            logger.info("User %s rejected: %s", principal.id, status.err_value.code)
        return status

    @beartype
    async def authenticate(
        self, login_identifier: str, password: str
    ) -> Result[UserPrincipal, UserLookupError]:
        """Resolve a principal, then verify its password."""
        resolved = await self.resolve(login_identifier)
        if resolved.is_err():
            if isinstance(resolved.err_value, UserNotFound):
                self._verifier.dummy_verify()
            return resolved

        principal = resolved.unwrap()
        if not self._verifier.verify(password, principal.password_hash):
            logger.info("Password mismatch for user %s", principal.id)
            return Err(InvalidUserCredentials(f"Bad password for user {principal.id}"))
        return Ok(principal)
