"""Tests for signing key material loading and use."""

from pathlib import Path

import attrs
import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from jose import jws
from jose.exceptions import JWSError

from auth_server.core.errors import KeyMaterialUnavailable
from auth_server.core.keys import KeyMaterial
from tests.fixtures.factories import KEY_ALIAS, KEYSTORE_PASSPHRASE, write_keystore


class TestKeystoreLoading:
    """Loading the keypair from a PKCS#12 keystore."""

    def test_loads_named_key(self, keystore_path: Path) -> None:
        keys = KeyMaterial.from_keystore(keystore_path, KEYSTORE_PASSPHRASE, KEY_ALIAS)

        assert keys.key_id == KEY_ALIAS
        assert keys.algorithm == "RS256"

    def test_missing_keystore_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(KeyMaterialUnavailable, match="cannot be read"):
            KeyMaterial.from_keystore(tmp_path / "absent.p12", KEYSTORE_PASSPHRASE, KEY_ALIAS)

    def test_wrong_passphrase_is_fatal(self, keystore_path: Path) -> None:
        with pytest.raises(KeyMaterialUnavailable, match="cannot be opened"):
            KeyMaterial.from_keystore(keystore_path, "not-the-passphrase", KEY_ALIAS)

    def test_unknown_alias_is_fatal(self, keystore_path: Path) -> None:
        with pytest.raises(KeyMaterialUnavailable, match="alias 'other' not found"):
            KeyMaterial.from_keystore(keystore_path, KEYSTORE_PASSPHRASE, "other")

    def test_corrupt_keystore_is_fatal(self, tmp_path: Path) -> None:
        path = tmp_path / "corrupt.p12"
        path.write_bytes(b"definitely not pkcs12")

        with pytest.raises(KeyMaterialUnavailable):
            KeyMaterial.from_keystore(path, KEYSTORE_PASSPHRASE, KEY_ALIAS)

    def test_non_rsa_key_is_fatal(self, tmp_path: Path) -> None:
        ec_key = ec.generate_private_key(ec.SECP256R1())
        path = write_keystore(tmp_path / "ec.p12", ec_key, KEY_ALIAS, KEYSTORE_PASSPHRASE)

        with pytest.raises(KeyMaterialUnavailable, match="not an RSA key"):
            KeyMaterial.from_keystore(path, KEYSTORE_PASSPHRASE, KEY_ALIAS)


class TestSignVerify:
    """Signing with the private half, verifying with the public half."""

    def test_signature_verifies(self, keys: KeyMaterial) -> None:
        signature = keys.sign(b"payload")

        assert keys.verify(b"payload", signature)

    def test_signature_over_other_data_fails(self, keys: KeyMaterial) -> None:
        signature = keys.sign(b"payload")

        assert not keys.verify(b"payload!", signature)

    def test_signature_from_other_key_fails(self, keys: KeyMaterial, other_rsa_key) -> None:
        other = KeyMaterial.from_private_key(other_rsa_key, key_id="other")

        assert not keys.verify(b"payload", other.sign(b"payload"))

    def test_key_material_is_immutable(self, keys: KeyMaterial) -> None:
        with pytest.raises(attrs.exceptions.FrozenInstanceError):
            keys.key_id = "changed"  # type: ignore[misc]


class TestPublicKeyExport:
    """Only the public half is ever exported."""

    def test_pem_is_public_key(self, keys: KeyMaterial) -> None:
        pem = keys.public_key_pem()

        assert pem.startswith("-----BEGIN PUBLIC KEY-----")
        assert "PRIVATE" not in pem

    def test_jwk_has_no_private_members(self, keys: KeyMaterial) -> None:
        jwk = keys.public_jwk()

        assert jwk["kty"] == "RSA"
        assert jwk["kid"] == KEY_ALIAS
        assert jwk["use"] == "sig"
        assert {"n", "e"} <= jwk.keys()
        assert not {"d", "p", "q", "dp", "dq", "qi"} & jwk.keys()


class TestCompactSerialization:
    """Compact JWS signing and verification."""

    def test_round_trip(self, keys: KeyMaterial) -> None:
        token = keys.sign_compact(b'{"a":1}')

        assert keys.verify_compact(token) == b'{"a":1}'
        assert jws.get_unverified_header(token) == {"alg": "RS256", "kid": KEY_ALIAS, "typ": "JWT"}

    def test_other_key_is_rejected(self, keys: KeyMaterial, other_rsa_key) -> None:
        other = KeyMaterial.from_private_key(other_rsa_key, key_id=KEY_ALIAS)

        with pytest.raises(JWSError):
            keys.verify_compact(other.sign_compact(b"{}"))
