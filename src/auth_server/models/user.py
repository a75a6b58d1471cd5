# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""User principal and permission models."""

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig, VersionedModel


@beartype
class Permission(BaseModelConfig):
    """A named authority granted to users."""

    id: int | None = Field(default=None)
    name: str = Field(..., min_length=1, max_length=255)


@beartype
class UserPrincipal(VersionedModel):
    """An end user that may authenticate through a user-bound grant."""

    id: int = Field(..., description="User identifier")
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password_hash: str = Field(..., min_length=1, repr=False, exclude=True)
    enabled: bool = True
    account_non_expired: bool = True
    account_non_locked: bool = True
    credentials_non_expired: bool = True
    authorities: tuple[Permission, ...] = Field(default=())

    @property
    def subject(self) -> str:
        """Token ``sub`` value for this user."""
        return str(self.id)

    @property
    def authority_names(self) -> tuple[str, ...]:
        return tuple(sorted({p.name for p in self.authorities}))
