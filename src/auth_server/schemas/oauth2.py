# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Request and response schemas of the OAuth2 operations."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class _Schema(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        validate_default=True,
    )


class TokenRequest(_Schema):
    """Grant request presented to the token operation."""

    grant_type: str
    client_id: str | None = None
    client_secret: SecretStr | None = None
    scope: str | None = Field(default=None, description="Space-delimited scopes")
    username: str | None = None
    password: SecretStr | None = None
    refresh_token: str | None = None
    code: str | None = None
    redirect_uri: str | None = None

    @property
    def requested_scopes(self) -> tuple[str, ...]:
        if not self.scope:
            return ()
        return tuple(dict.fromkeys(self.scope.split()))


class TokenResponse(_Schema):
    """Successful token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    scope: str
    jti: str
    refresh_token: str | None = None
    email: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TokenKeyResponse(_Schema):
    """Public verification key in PEM and JWK form."""

    alg: str
    value: str
    keys: list[dict[str, Any]]


class IntrospectionResponse(_Schema):
    """Token introspection result (RFC 7662 field names)."""

    active: bool
    sub: str | None = None
    client_id: str | None = None
    scope: str | None = None
    exp: int | None = None
    iat: int | None = None
    jti: str | None = None
    token_type: str | None = None
    user_name: str | None = None
    authorities: list[str] | None = None
    claims: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
