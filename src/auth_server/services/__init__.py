# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Token pipeline and authentication services."""

from .authorization_server import OPERATION_POLICIES, AccessPolicy, AuthorizationServer
from .client_registry import ClientRegistry
from .credentials import CredentialVerifier, PasswordVerifier
from .token_enhancer import enhance
from .token_issuer import TokenIssuer
from .token_validator import TokenValidator
from .user_store import IdentifierKind, UserPrincipalStore, check_account_status, classify_identifier

__all__ = [
    "OPERATION_POLICIES",
    "AccessPolicy",
    "AuthorizationServer",
    "ClientRegistry",
    "CredentialVerifier",
    "IdentifierKind",
    "PasswordVerifier",
    "TokenIssuer",
    "TokenValidator",
    "UserPrincipalStore",
    "check_account_status",
    "classify_identifier",
    "enhance",
]
