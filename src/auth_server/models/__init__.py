# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models for clients, users and tokens."""

from .base import BaseModelConfig, VersionedModel
from .client import Client
from .token import REGISTERED_CLAIMS, GrantType, Token, TokenKind, ValidatedClaims
from .user import Permission, UserPrincipal

__all__ = [
    "REGISTERED_CLAIMS",
    "BaseModelConfig",
    "Client",
    "GrantType",
    "Permission",
    "Token",
    "TokenKind",
    "UserPrincipal",
    "ValidatedClaims",
    "VersionedModel",
]
