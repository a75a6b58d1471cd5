# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""API schemas."""

from .oauth2 import IntrospectionResponse, TokenKeyResponse, TokenRequest, TokenResponse

__all__ = ["IntrospectionResponse", "TokenKeyResponse", "TokenRequest", "TokenResponse"]
