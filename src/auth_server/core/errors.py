# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Error taxonomy of the authorization server.

Every per-request failure is an ``AuthError`` subclass. Instances are
returned inside ``Err`` rather than raised; the HTTP boundary renders them
with ``to_dict()`` and ``status_code``. ``detail`` is for logs only and may
name the offending identifier; ``public_description`` is what callers see.

``KeyMaterialUnavailable`` is the single fatal condition and is raised at
startup instead of being returned.
"""

from typing import Any, ClassVar

from beartype import beartype


class AuthError(Exception):
    """Base class for OAuth2 request failures."""

    error: ClassVar[str] = "server_error"
    public_description: ClassVar[str] = "Request could not be processed"
    status_code: ClassVar[int] = 400

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.public_description
        super().__init__(self.detail)

    @property
    def code(self) -> str:
        """Internal discriminator, e.g. ``InvalidScope``."""
        return type(self).__name__

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to an OAuth2 error response body."""
        return {"error": self.error, "error_description": self.public_description}


# Client authentication


class ClientAuthError(AuthError):
    """Client could not be authenticated or is not allowed the request."""


class ClientNotFound(ClientAuthError):
    error = "invalid_client"
    public_description = "Bad client credentials"
    status_code = 401


class InvalidClientCredentials(ClientAuthError):
    error = "invalid_client"
    public_description = "Bad client credentials"
    status_code = 401


class UnauthorizedGrantType(ClientAuthError):
    error = "unauthorized_client"
    public_description = "Client is not authorized for this grant type"


class InvalidScope(ClientAuthError):
    error = "invalid_scope"
    public_description = "Requested scope is not allowed"


# User lookup


class UserLookupError(AuthError):
    """End user could not be resolved or authenticated."""

    error = "invalid_grant"


class UserNotFound(UserLookupError):
    public_description = "Bad credentials"


class InvalidUserCredentials(UserLookupError):
    public_description = "Bad credentials"


class AccountStatusError(UserLookupError):
    """The principal exists but its account status forbids authentication."""


class AccountDisabled(AccountStatusError):
    public_description = "User is disabled"


class AccountExpired(AccountStatusError):
    public_description = "User account has expired"


class CredentialsExpired(AccountStatusError):
    public_description = "User credentials have expired"


class AccountLocked(AccountStatusError):
    public_description = "User account is locked"


# Token validation


class TokenValidationError(AuthError):
    """A presented token failed verification."""

    error = "invalid_token"
    status_code = 401


class InvalidSignature(TokenValidationError):
    public_description = "Token signature could not be verified"


class TokenExpired(TokenValidationError):
    public_description = "Token has expired"


class UnexpectedTokenKind(TokenValidationError):
    public_description = "Token cannot be used for this operation"


class InsufficientScope(TokenValidationError):
    error = "insufficient_scope"
    public_description = "Token does not carry the required scope"
    status_code = 403


# Request shape


class InvalidRequest(AuthError):
    error = "invalid_request"
    public_description = "Missing or malformed request parameter"


class UnsupportedGrantType(AuthError):
    error = "unsupported_grant_type"
    public_description = "Grant type is not supported"


class InvalidGrant(AuthError):
    error = "invalid_grant"
    public_description = "Invalid authorization grant"


class AuthenticationRequired(AuthError):
    error = "unauthorized"
    public_description = "Full authentication is required to access this resource"
    status_code = 401


class KeyMaterialUnavailable(RuntimeError):
    """Signing keys could not be loaded; the service must not start."""
