# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Signed token model.

A ``Token`` is an immutable value: every field is fixed once the token is
sealed, and ``claims`` is a read-only view over a private copy of the
mapping it was built from. Enrichment builds a new ``Token``.
"""

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

import attrs
from attrs import field, frozen
from beartype import beartype


class GrantType(str, Enum):
    """Supported OAuth2 grant types."""

    PASSWORD = "password"
    CLIENT_CREDENTIALS = "client_credentials"
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"

    @property
    def is_user_bound(self) -> bool:
        return self is not GrantType.CLIENT_CREDENTIALS


class TokenKind(str, Enum):
    """Marker distinguishing the signed artifacts this server produces."""

    ACCESS = "access"
    REFRESH = "refresh"
    CODE = "code"


# Payload keys owned by the issuer; anything else is an extensible claim.
REGISTERED_CLAIMS = frozenset(
    {"sub", "client_id", "scope", "jti", "iat", "exp", "type", "iss", "user_name", "authorities"}
)


def _freeze_claims(value: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(value))


@frozen(eq=False)
class Token:
    """A token payload plus its signed compact JWS form."""

    token_id: str = field()
    kind: TokenKind = field()
    client_id: str = field()
    scopes: frozenset[str] = field(converter=frozenset)
    issued_at: int = field()
    expires_at: int = field()
    user_id: str | None = field(default=None)
    username: str | None = field(default=None)
    authorities: tuple[str, ...] = field(default=(), converter=tuple)
    issuer: str | None = field(default=None)
    claims: Mapping[str, Any] = field(factory=dict, converter=_freeze_claims)
    value: str = field(default="", repr=False)

    @property
    def subject(self) -> str:
        """User id for user-bound tokens, else the client id."""
        return self.user_id if self.user_id is not None else self.client_id

    @property
    def is_user_bound(self) -> bool:
        return self.user_id is not None

    @property
    def is_signed(self) -> bool:
        return bool(self.value)

    @property
    def validity_seconds(self) -> int:
        return self.expires_at - self.issued_at

    @beartype
    def payload(self) -> dict[str, Any]:
        """JWT claim set covered by the signature."""
        body: dict[str, Any] = dict(self.claims)
        body.update(
            {
                "sub": self.subject,
                "client_id": self.client_id,
                "scope": sorted(self.scopes),
                "jti": self.token_id,
                "iat": self.issued_at,
                "exp": self.expires_at,
                "type": self.kind.value,
            }
        )
        if self.user_id is not None:
            body["user_name"] = self.username
            body["authorities"] = list(self.authorities)
        if self.issuer is not None:
            body["iss"] = self.issuer
        return body

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], value: str) -> "Token":
        """Rebuild a token from a decoded claim set.

        Raises:
            KeyError, TypeError, ValueError: the payload is not one this
                server produced.
        """
        user_bound = "user_name" in payload
        return cls(
            token_id=str(payload["jti"]),
            kind=TokenKind(payload["type"]),
            client_id=str(payload["client_id"]),
            scopes=[str(s) for s in payload["scope"]],
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
            user_id=str(payload["sub"]) if user_bound else None,
            username=payload.get("user_name"),
            authorities=[str(a) for a in payload.get("authorities", [])],
            issuer=payload.get("iss"),
            claims={k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS},
            value=value,
        )

    def with_claims(self, claims: Mapping[str, Any]) -> "Token":
        """Unsigned copy carrying ``claims``; the caller must reseal it."""
        return attrs.evolve(self, claims=claims, value="")


@frozen
class ValidatedClaims:
    """A token that passed signature, expiry and scope checks."""

    token: Token = field()
    validated_at: int = field()

    @property
    def subject(self) -> str:
        return self.token.subject

    @property
    def scopes(self) -> frozenset[str]:
        return self.token.scopes

    @property
    def expires_in(self) -> int:
        return max(0, self.token.expires_at - self.validated_at)
