# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Offline token verification.

Validation is a pure function of the token bytes, the process-wide public
key and the clock: there is no revocation store, so expiry is the only way
a correctly signed token stops being valid.
"""

from collections.abc import Iterable

from beartype import beartype

from ..core.errors import (
    InsufficientScope,
    InvalidSignature,
    TokenExpired,
    TokenValidationError,
    UnexpectedTokenKind,
)
from ..core.keys import KeyMaterial
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.token import Token, TokenKind, ValidatedClaims
from .token_codec import UnverifiableToken, unseal
from .token_issuer import Clock, utc_now

logger = get_logger(__name__)


class TokenValidator:
    """Verifies signature, expiry, artifact kind and scope of a raw token."""

    def __init__(self, keys: KeyMaterial, clock: Clock = utc_now) -> None:
        self._keys = keys
        self._clock = clock

    @beartype
    def validate(
        self,
        raw_token: str,
        required_scopes: Iterable[str] = (),
        kind: TokenKind = TokenKind.ACCESS,
    ) -> Result[ValidatedClaims, TokenValidationError]:
        """Validate ``raw_token``.

        Args:
            raw_token: Compact token, optionally prefixed with "Bearer "
            required_scopes: Scopes the protected operation needs
            kind: Artifact kind the caller expects

        Returns:
            Result containing the validated claims or a TokenValidationError
        """
        if raw_token.startswith("Bearer "):
            raw_token = raw_token[7:]

        raw_token = raw_token.strip()
        try:
            payload = unseal(raw_token, self._keys)
        except UnverifiableToken as e:
            logger.info("Rejected unverifiable token: %s", e)
            return Err(InvalidSignature(str(e)))

        try:
            token = Token.from_payload(payload, raw_token)
        except (KeyError, TypeError, ValueError) as e:
            return Err(InvalidSignature(f"Signed payload is not a token of this server: {e}"))

        # exp is the first instant at which the token is no longer valid
        now = int(self._clock().timestamp())
        if now >= token.expires_at:
            return Err(TokenExpired(f"Token {token.token_id} expired at {token.expires_at}"))

        if token.kind is not kind:
            return Err(
                UnexpectedTokenKind(f"Expected {kind.value} token, got {token.kind.value}")
            )

        missing = sorted(set(required_scopes) - token.scopes)
        if missing:
            return Err(InsufficientScope(f"Token lacks scopes: {', '.join(missing)}"))

        return Ok(ValidatedClaims(token=token, validated_at=now))
