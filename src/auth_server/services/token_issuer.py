# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Token issuance for already-authenticated clients and users."""

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from beartype import beartype

from ..core.config import Settings
from ..core.keys import KeyMaterial
from ..core.logging_utils import get_logger
from ..models.client import Client
from ..models.token import Token, TokenKind
from ..models.user import UserPrincipal
from .token_codec import seal

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Builds and signs tokens.

    No lookups happen here: the caller has already authenticated the
    client and, for user-bound grants, the user.
    """

    def __init__(self, keys: KeyMaterial, settings: Settings, clock: Clock = utc_now) -> None:
        self._keys = keys
        self._clock = clock
        self._access_validity = settings.access_token_validity_seconds
        self._refresh_validity = settings.refresh_token_validity_seconds
        self._code_validity = settings.authorization_code_validity_seconds
        self._issuer = settings.issuer

    @beartype
    def issue(
        self,
        client: Client,
        principal: UserPrincipal | None,
        granted_scopes: Iterable[str],
    ) -> Token:
        """Issue a signed access token."""
        validity = client.access_token_validity_seconds or self._access_validity
        return self._build(TokenKind.ACCESS, client, principal, granted_scopes, validity)

    @beartype
    def issue_refresh(
        self,
        client: Client,
        principal: UserPrincipal | None,
        granted_scopes: Iterable[str],
    ) -> Token:
        """Issue a signed refresh token; same path, longer lifetime."""
        validity = client.refresh_token_validity_seconds or self._refresh_validity
        return self._build(TokenKind.REFRESH, client, principal, granted_scopes, validity)

    @beartype
    def issue_authorization_code(
        self,
        client: Client,
        principal: UserPrincipal,
        granted_scopes: Iterable[str],
        redirect_uri: str,
    ) -> Token:
        """Issue a short-lived signed code for the authorization_code grant.

        The code is stateless, so it can be exchanged more than once until
        it expires.
        """
        return self._build(
            TokenKind.CODE,
            client,
            principal,
            granted_scopes,
            self._code_validity,
            claims={"redirect_uri": redirect_uri},
        )

    def _build(
        self,
        kind: TokenKind,
        client: Client,
        principal: UserPrincipal | None,
        granted_scopes: Iterable[str],
        validity_seconds: int,
        claims: dict[str, Any] | None = None,
    ) -> Token:
        issued_at = int(self._clock().timestamp())
        token = Token(
            token_id=str(uuid4()),
            kind=kind,
            client_id=client.id,
            scopes=frozenset(granted_scopes) & client.scopes,
            issued_at=issued_at,
            expires_at=issued_at + validity_seconds,
            user_id=principal.subject if principal is not None else None,
            username=principal.username if principal is not None else None,
            authorities=principal.authority_names if principal is not None else (),
            issuer=self._issuer,
            claims=claims or {},
        )
        sealed = seal(token, self._keys)
        logger.debug(
            "Issued %s token %s for client %s (subject %s)",
            kind.value,
            sealed.token_id,
            client.id,
            sealed.subject,
        )
        return sealed
