# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Asymmetric signing key material.

The keypair is read once from a passphrase-protected PKCS#12 keystore at
startup and never changes afterwards, so a single ``KeyMaterial`` instance
is shared by reference across all requests without locking.
"""

from pathlib import Path
from typing import Any

from attrs import field, frozen
from beartype import beartype
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from jose import jwk, jws
from jose.backends.base import Key
from jose.constants import ALGORITHMS

from .errors import KeyMaterialUnavailable
from .logging_utils import get_logger

logger = get_logger(__name__)

SIGNING_ALGORITHM = ALGORITHMS.RS256


@frozen
class KeyMaterial:
    """RS256 keypair with sign/verify and public key export."""

    key_id: str = field()
    _signing_key: Key = field(repr=False)
    _verifying_key: Key = field(repr=False)

    @classmethod
    def from_keystore(cls, path: Path, passphrase: str, alias: str) -> "KeyMaterial":
        """Load the keypair stored under ``alias``.

        Raises:
            KeyMaterialUnavailable: the keystore is missing or unreadable,
                the passphrase is wrong, or no RSA key carries ``alias``.
        """
        try:
            with Path(path).open("rb") as handle:
                data = handle.read()
        except OSError as e:
            raise KeyMaterialUnavailable(f"Keystore {path} cannot be read: {e}") from e

        try:
            bundle = pkcs12.load_pkcs12(data, passphrase.encode("utf-8"))
        except ValueError as e:
            raise KeyMaterialUnavailable(
                f"Keystore {path} cannot be opened (wrong passphrase or corrupt file)"
            ) from e

        certificates = [bundle.cert, *bundle.additional_certs]
        aliases = {
            c.friendly_name.decode("utf-8")
            for c in certificates
            if c is not None and c.friendly_name is not None
        }
        if alias not in aliases or bundle.key is None:
            raise KeyMaterialUnavailable(f"Key alias '{alias}' not found in keystore {path}")
        if not isinstance(bundle.key, rsa.RSAPrivateKey):
            raise KeyMaterialUnavailable(f"Key '{alias}' in keystore {path} is not an RSA key")

        logger.info("Loaded signing key '%s' from %s", alias, path)
        return cls.from_private_key(bundle.key, key_id=alias)

    @classmethod
    def from_private_key(cls, private_key: rsa.RSAPrivateKey, key_id: str) -> "KeyMaterial":
        """Wrap an in-memory RSA private key."""
        pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        signing_key = jwk.construct(pem, SIGNING_ALGORITHM)
        return cls(
            key_id=key_id,
            signing_key=signing_key,
            verifying_key=signing_key.public_key(),
        )

    @property
    def algorithm(self) -> str:
        return SIGNING_ALGORITHM

    @beartype
    def sign(self, data: bytes) -> bytes:
        """Sign ``data`` with the private key."""
        return self._signing_key.sign(data)

    @beartype
    def verify(self, data: bytes, signature: bytes) -> bool:
        """Check ``signature`` over ``data`` with the public key."""
        return bool(self._verifying_key.verify(data, signature))

    @beartype
    def sign_compact(self, payload: bytes) -> str:
        """Sign ``payload`` as an RS256 compact JWS carrying this key's ``kid``."""
        return jws.sign(
            payload,
            self._signing_key,
            headers={"kid": self.key_id},
            algorithm=SIGNING_ALGORITHM,
        )

    @beartype
    def verify_compact(self, token: str) -> bytes:
        """Return the payload of a compact JWS signed by this key.

        Raises:
            JWSError: the token is malformed, names another algorithm, or
                its signature does not verify.
        """
        return jws.verify(token, self._verifying_key, algorithms=[SIGNING_ALGORITHM])

    @beartype
    def public_key_pem(self) -> str:
        return self._verifying_key.to_pem().decode("utf-8")

    @beartype
    def public_jwk(self) -> dict[str, Any]:
        """Public key as a JWK, suitable for a JWKS document."""
        return {
            **self._verifying_key.to_dict(),
            "kid": self.key_id,
            "use": "sig",
        }
