# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all domain models.

Records read from storage are immutable snapshots: the core never writes
them back, and optimistic-locking metadata is carried only so callers can
tell which revision a decision was made against.
"""

from datetime import datetime

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field


@beartype
class BaseModelConfig(BaseModel):
    """Frozen, strict base for clients, users and permissions.

    Unknown fields are rejected and surrounding whitespace is stripped from
    every string, so identifiers compare exactly as stored.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )


@beartype
class VersionedModel(BaseModelConfig):
    """Base model for persisted rows with version and audit timestamps."""

    version: int = Field(default=0, ge=0, description="Optimistic lock version")
    created_on: datetime | None = Field(default=None)
    updated_on: datetime | None = Field(default=None)
