# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Registered OAuth2 client model."""

from beartype import beartype
from pydantic import Field, field_validator

from .base import VersionedModel
from .token import GrantType


@beartype
class Client(VersionedModel):
    """A registered client application.

    Only the hash of the client secret is ever held; plaintext secrets are
    compared through the credential verifier and then discarded. Empty
    grant or scope sets are valid and simply authorize nothing.
    """

    id: str = Field(..., min_length=1, description="Client identifier")
    secret_hash: str = Field(..., min_length=1, repr=False)
    grant_types: frozenset[GrantType] = Field(...)
    scopes: frozenset[str] = Field(...)
    access_token_validity_seconds: int | None = Field(default=None, gt=0)
    refresh_token_validity_seconds: int | None = Field(default=None, gt=0)

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, v: frozenset[str]) -> frozenset[str]:
        """Scopes are single space-free tokens."""
        for scope in v:
            if not scope or any(c.isspace() for c in scope):
                raise ValueError(f"Invalid scope name: {scope!r}")
        return v

    def allows_grant(self, grant_type: GrantType) -> bool:
        return grant_type in self.grant_types

    @property
    def supports_refresh(self) -> bool:
        return GrantType.REFRESH_TOKEN in self.grant_types
