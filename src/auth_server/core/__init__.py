# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Core infrastructure components for the authorization server."""

from .config import Settings, get_settings
from .errors import AuthError, KeyMaterialUnavailable
from .keys import KeyMaterial
from .result_types import Err, Ok, Result

__all__ = [
    "AuthError",
    "Err",
    "KeyMaterial",
    "KeyMaterialUnavailable",
    "Ok",
    "Result",
    "Settings",
    "get_settings",
]
