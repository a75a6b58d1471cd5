# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Identity claim enrichment for user-bound tokens."""

from beartype import beartype

from ..core.keys import KeyMaterial
from ..models.token import Token
from ..models.user import UserPrincipal
from .token_codec import seal


@beartype
def enhance(token: Token, principal: UserPrincipal | None, keys: KeyMaterial) -> Token:
    """Return a resealed copy of ``token`` with the principal's ``email`` claim.

    Client-only tokens come back unchanged. The input token and its claims
    are never modified; the new claims map is built from a copy.

    Raises:
        ValueError: ``principal`` is not the user the token was issued to.
    """
    if principal is None or not token.is_user_bound:
        return token
    if token.user_id != principal.subject:
        raise ValueError(
            f"Token {token.token_id} belongs to user {token.user_id}, not {principal.subject}"
        )

    claims = dict(token.claims)
    claims["email"] = principal.email
    return seal(token.with_claims(claims), keys)
