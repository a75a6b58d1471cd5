# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Compact JWS encoding of tokens.

Tokens are standard RS256 JWTs produced and checked by python-jose. The
payload is serialized here with sorted keys and no whitespace before
signing, so equal claim sets always produce identical signing input.
"""

import json
from collections.abc import Mapping
from typing import Any

import attrs
from beartype import beartype
from jose.exceptions import JWSError

from ..core.keys import KeyMaterial
from ..models.token import Token


class UnverifiableToken(ValueError):
    """The raw token is malformed, or its signature does not verify."""


def _canonical_json(obj: Mapping[str, Any]) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")


@beartype
def seal(token: Token, keys: KeyMaterial) -> Token:
    """Sign ``token``'s payload and return a copy carrying the compact value."""
    return attrs.evolve(token, value=keys.sign_compact(_canonical_json(token.payload())))


@beartype
def unseal(raw: str, keys: KeyMaterial) -> dict[str, Any]:
    """Verify ``raw`` against ``keys`` and return its claim set.

    Raises:
        UnverifiableToken: bad structure, disallowed algorithm, signature
            mismatch, or a payload that is not a JSON object.
    """
    try:
        payload = keys.verify_compact(raw)
    except JWSError as e:
        raise UnverifiableToken(str(e)) from e

    try:
        claims = json.loads(payload)
    except ValueError as e:
        raise UnverifiableToken(f"Token payload is not JSON: {e}") from e
    if not isinstance(claims, dict):
        raise UnverifiableToken("Token payload must be a JSON object")
    return claims
