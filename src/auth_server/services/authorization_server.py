# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authorization server orchestration and access policy.

Each operation is guarded by the policy registered for it in
``OPERATION_POLICIES`` before any work is dispatched:

* ``token``: the client must authenticate; user-bound grants additionally
  authenticate or re-resolve the end user.
* ``token_key``: open to anyone; only the public key is exposed.
* ``check_token``: the caller must present a valid bearer token.
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, Final

from beartype import beartype

from ..core.config import Settings
from ..core.errors import (
    AuthenticationRequired,
    AuthError,
    InvalidGrant,
    InvalidRequest,
    InvalidScope,
    UnsupportedGrantType,
)
from ..core.keys import KeyMaterial
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.client import Client
from ..models.token import GrantType, Token, TokenKind, ValidatedClaims
from ..models.user import UserPrincipal
from ..schemas.oauth2 import IntrospectionResponse, TokenKeyResponse, TokenRequest, TokenResponse
from .client_registry import ClientRegistry
from .credentials import CredentialVerifier, PasswordVerifier
from .repositories import ClientRepository, UserRepository
from .token_enhancer import enhance
from .token_issuer import Clock, TokenIssuer, utc_now
from .token_validator import TokenValidator
from .user_store import UserPrincipalStore

logger = get_logger(__name__)


class AccessPolicy(str, Enum):
    PERMIT_ALL = "permit_all"
    CLIENT_AUTHENTICATED = "client_authenticated"
    AUTHENTICATED = "authenticated"


OPERATION_POLICIES: Final[Mapping[str, AccessPolicy]] = MappingProxyType(
    {
        "token": AccessPolicy.CLIENT_AUTHENTICATED,
        "token_key": AccessPolicy.PERMIT_ALL,
        "check_token": AccessPolicy.AUTHENTICATED,
    }
)

GrantHandler = Callable[[Client, TokenRequest], Awaitable[Result[TokenResponse, AuthError]]]


class AuthorizationServer:
    """Token issuance, public key retrieval and token introspection."""

    def __init__(
        self,
        keys: KeyMaterial,
        clients: ClientRegistry,
        users: UserPrincipalStore,
        issuer: TokenIssuer,
        validator: TokenValidator,
        settings: Settings,
    ) -> None:
        self._keys = keys
        self._clients = clients
        self._users = users
        self._issuer = issuer
        self._validator = validator
        self._introspection_scope = settings.introspection_required_scope
        self._grant_handlers: dict[GrantType, GrantHandler] = {
            GrantType.PASSWORD: self._password_grant,
            GrantType.CLIENT_CREDENTIALS: self._client_credentials_grant,
            GrantType.REFRESH_TOKEN: self._refresh_token_grant,
            GrantType.AUTHORIZATION_CODE: self._authorization_code_grant,
        }

    @classmethod
    def build(
        cls,
        keys: KeyMaterial,
        client_repository: ClientRepository,
        user_repository: UserRepository,
        settings: Settings,
        verifier: CredentialVerifier | None = None,
        clock: Clock = utc_now,
    ) -> "AuthorizationServer":
        """Wire the server from its collaborators."""
        verifier = verifier or PasswordVerifier(settings.password_schemes)
        return cls(
            keys=keys,
            clients=ClientRegistry(client_repository, verifier),
            users=UserPrincipalStore(user_repository, verifier),
            issuer=TokenIssuer(keys, settings, clock),
            validator=TokenValidator(keys, clock),
            settings=settings,
        )

    @property
    def issuer(self) -> TokenIssuer:
        return self._issuer

    @property
    def validator(self) -> TokenValidator:
        return self._validator

    # --- Operations ---

    @beartype
    async def token(self, request: TokenRequest) -> Result[TokenResponse, AuthError]:
        """Issue a token for a grant request."""
        try:
            grant = GrantType(request.grant_type)
        except ValueError:
            return Err(UnsupportedGrantType(f"Unsupported grant type {request.grant_type!r}"))

        caller = await self._enforce("token", request=request, grant=grant)
        if caller.is_err():
            logger.warning(
                "Token request refused for client %s: %s",
                request.client_id,
                caller.err_value.code,
            )
            return caller

        client: Client = caller.unwrap()
        result = await self._grant_handlers[grant](client, request)
        if result.is_ok():
            logger.info(
                "Issued %s token %s for client %s",
                grant.value,
                result.unwrap().jti,
                client.id,
            )
        else:
            logger.warning(
                "%s grant refused for client %s: %s",
                grant.value,
                client.id,
                result.err_value.code,
            )
        return result

    @beartype
    async def token_key(self) -> Result[TokenKeyResponse, AuthError]:
        """Expose the public verification key."""
        caller = await self._enforce("token_key")
        if caller.is_err():
            return caller
        return Ok(
            TokenKeyResponse(
                alg=self._keys.algorithm,
                value=self._keys.public_key_pem(),
                keys=[self._keys.public_jwk()],
            )
        )

    @beartype
    async def check_token(
        self, token: str, bearer: str | None
    ) -> Result[IntrospectionResponse, AuthError]:
        """Describe ``token`` to an authenticated caller."""
        caller = await self._enforce("check_token", bearer=bearer)
        if caller.is_err():
            return caller

        result = self._validator.validate(token)
        if result.is_err():
            logger.info("Introspected token is inactive: %s", result.err_value.code)
            return Ok(IntrospectionResponse(active=False))

        target = result.unwrap().token
        return Ok(
            IntrospectionResponse(
                active=True,
                sub=target.subject,
                client_id=target.client_id,
                scope=" ".join(sorted(target.scopes)),
                exp=target.expires_at,
                iat=target.issued_at,
                jti=target.token_id,
                token_type=target.kind.value,
                user_name=target.username,
                authorities=list(target.authorities) if target.is_user_bound else None,
                claims=dict(target.claims) or None,
            )
        )

    # --- Access policy ---

    def policy_for(self, operation: str) -> AccessPolicy:
        return OPERATION_POLICIES[operation]

    async def _enforce(
        self,
        operation: str,
        *,
        bearer: str | None = None,
        request: TokenRequest | None = None,
        grant: GrantType | None = None,
    ) -> Result[Any, AuthError]:
        policy = self.policy_for(operation)

        if policy is AccessPolicy.PERMIT_ALL:
            return Ok(None)

        if policy is AccessPolicy.AUTHENTICATED:
            if not bearer:
                return Err(AuthenticationRequired(f"{operation} requires a bearer token"))
            required = (self._introspection_scope,) if self._introspection_scope else ()
            return self._validator.validate(bearer, required_scopes=required)

        if request is None or grant is None:
            raise ValueError(f"{operation} needs the grant request to authenticate the client")
        if not request.client_id or request.client_secret is None:
            return Err(AuthenticationRequired("Client credentials are required"))
        return await self._clients.authenticate(
            request.client_id,
            request.client_secret.get_secret_value(),
            grant,
            request.requested_scopes,
        )

    # --- Grants ---

    async def _password_grant(
        self, client: Client, request: TokenRequest
    ) -> Result[TokenResponse, AuthError]:
        if not request.username or request.password is None:
            return Err(InvalidRequest("username and password are required"))

        user = await self._users.authenticate(
            request.username, request.password.get_secret_value()
        )
        if user.is_err():
            return user

        scopes = request.requested_scopes or client.scopes
        return Ok(self._respond(client, user.unwrap(), scopes, with_refresh=client.supports_refresh))

    async def _client_credentials_grant(
        self, client: Client, request: TokenRequest
    ) -> Result[TokenResponse, AuthError]:
        scopes = request.requested_scopes or client.scopes
        return Ok(self._respond(client, None, scopes, with_refresh=False))

    async def _refresh_token_grant(
        self, client: Client, request: TokenRequest
    ) -> Result[TokenResponse, AuthError]:
        if not request.refresh_token:
            return Err(InvalidRequest("refresh_token is required"))

        original = self._redeem(request.refresh_token, TokenKind.REFRESH, client)
        if original.is_err():
            return original
        token: Token = original.unwrap().token

        scopes = self._narrow_scopes(request.requested_scopes, token.scopes)
        if scopes.is_err():
            return scopes

        principal = await self._reload_principal(token)
        if principal.is_err():
            return principal

        return Ok(
            self._respond(
                client,
                principal.unwrap(),
                scopes.unwrap(),
                with_refresh=False,
                refresh_value=request.refresh_token,
            )
        )

    async def _authorization_code_grant(
        self, client: Client, request: TokenRequest
    ) -> Result[TokenResponse, AuthError]:
        if not request.code or not request.redirect_uri:
            return Err(InvalidRequest("code and redirect_uri are required"))

        redeemed = self._redeem(request.code, TokenKind.CODE, client)
        if redeemed.is_err():
            return redeemed
        code: Token = redeemed.unwrap().token

        if code.claims.get("redirect_uri") != request.redirect_uri:
            return Err(InvalidGrant("Redirect URI mismatch"))

        scopes = self._narrow_scopes(request.requested_scopes, code.scopes)
        if scopes.is_err():
            return scopes

        principal = await self._reload_principal(code)
        if principal.is_err():
            return principal

        return Ok(
            self._respond(
                client, principal.unwrap(), scopes.unwrap(), with_refresh=client.supports_refresh
            )
        )

    # --- Helpers ---

    def _redeem(
        self, raw: str, kind: TokenKind, client: Client
    ) -> Result[ValidatedClaims, AuthError]:
        """Validate a grant artifact and check it belongs to ``client``."""
        result = self._validator.validate(raw, kind=kind)
        if result.is_err():
            return Err(InvalidGrant(f"Invalid {kind.value} artifact: {result.err_value.detail}"))
        if result.unwrap().token.client_id != client.id:
            return Err(InvalidGrant(f"{kind.value} artifact was issued to a different client"))
        return result

    @staticmethod
    def _narrow_scopes(
        requested: Iterable[str], original: frozenset[str]
    ) -> Result[frozenset[str], AuthError]:
        requested = frozenset(requested)
        widened = sorted(requested - original)
        if widened:
            return Err(InvalidScope(f"Scopes not in original grant: {', '.join(widened)}"))
        return Ok(requested or original)

    async def _reload_principal(self, token: Token) -> Result[UserPrincipal | None, AuthError]:
        """Re-resolve the user behind ``token`` so account status applies again."""
        if not token.is_user_bound:
            return Ok(None)

        resolved = await self._users.resolve(token.username or "")
        if resolved.is_err():
            return resolved
        principal = resolved.unwrap()
        if principal.subject != token.user_id:
            return Err(InvalidGrant("Grant subject no longer matches a user"))
        return Ok(principal)

    def _respond(
        self,
        client: Client,
        principal: UserPrincipal | None,
        scopes: Iterable[str],
        *,
        with_refresh: bool,
        refresh_value: str | None = None,
    ) -> TokenResponse:
        granted = frozenset(scopes) & client.scopes
        access = enhance(self._issuer.issue(client, principal, granted), principal, self._keys)

        if refresh_value is None and with_refresh:
            refresh = enhance(
                self._issuer.issue_refresh(client, principal, granted), principal, self._keys
            )
            refresh_value = refresh.value

        return TokenResponse(
            access_token=access.value,
            expires_in=access.validity_seconds,
            scope=" ".join(sorted(access.scopes)),
            jti=access.token_id,
            refresh_token=refresh_value,
            email=access.claims.get("email"),
        )
