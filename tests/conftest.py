"""Test configuration and fixtures.

Provides a generated RSA signing key, a PKCS#12 keystore written to
``tmp_path``, a controllable clock, and in-memory client and user records.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from auth_server.core.config import Settings
from auth_server.core.keys import KeyMaterial
from auth_server.models.client import Client
from auth_server.models.token import GrantType
from auth_server.models.user import UserPrincipal
from auth_server.services.authorization_server import AuthorizationServer
from auth_server.services.credentials import PasswordVerifier
from auth_server.services.repositories import InMemoryClientRepository, InMemoryUserRepository
from tests.fixtures.factories import (
    CLIENT_SECRET,
    KEY_ALIAS,
    KEYSTORE_PASSPHRASE,
    FrozenClock,
    make_user,
    write_keystore,
)


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def keys(rsa_key: rsa.RSAPrivateKey) -> KeyMaterial:
    return KeyMaterial.from_private_key(rsa_key, key_id=KEY_ALIAS)


@pytest.fixture
def keystore_path(tmp_path: Path, rsa_key: rsa.RSAPrivateKey) -> Path:
    return write_keystore(tmp_path / "jwt.p12", rsa_key, KEY_ALIAS, KEYSTORE_PASSPHRASE)


@pytest.fixture
def clock() -> FrozenClock:
    """Clock pinned to the current second, so tokens are also valid in real time."""
    return FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def settings(keystore_path: Path) -> Settings:
    return Settings(
        keystore_path=keystore_path,
        keystore_passphrase=KEYSTORE_PASSPHRASE,
        key_alias=KEY_ALIAS,
        password_schemes=["pbkdf2_sha256"],
    )


@pytest.fixture(scope="session")
def verifier() -> PasswordVerifier:
    return PasswordVerifier(["pbkdf2_sha256"])


@pytest.fixture(scope="session")
def client_cid1(verifier: PasswordVerifier) -> Client:
    return Client(
        id="cid1",
        secret_hash=verifier.hash(CLIENT_SECRET),
        grant_types=frozenset(
            {
                GrantType.CLIENT_CREDENTIALS,
                GrantType.PASSWORD,
                GrantType.REFRESH_TOKEN,
                GrantType.AUTHORIZATION_CODE,
            }
        ),
        scopes=frozenset({"read", "write"}),
    )


@pytest.fixture(scope="session")
def client_service(verifier: PasswordVerifier) -> Client:
    """Machine client limited to client_credentials with a short token life."""
    return Client(
        id="svc",
        secret_hash=verifier.hash("svc-secret"),
        grant_types=frozenset({GrantType.CLIENT_CREDENTIALS}),
        scopes=frozenset({"read"}),
        access_token_validity_seconds=600,
    )


@pytest.fixture(scope="session")
def bob(verifier: PasswordVerifier) -> UserPrincipal:
    return make_user(verifier)


@pytest.fixture(scope="session")
def users(verifier: PasswordVerifier, bob: UserPrincipal) -> list[UserPrincipal]:
    return [
        bob,
        make_user(verifier, id=2, username="alice", email="alice@example.com"),
        make_user(
            verifier,
            id=3,
            username="mallory",
            email="mallory@example.com",
            enabled=False,
            account_non_locked=False,
        ),
        make_user(verifier, id=4, username="a@b", email="ab@example.com"),
    ]


@pytest.fixture
def client_repository(client_cid1: Client, client_service: Client) -> InMemoryClientRepository:
    return InMemoryClientRepository([client_cid1, client_service])


@pytest.fixture
def user_repository(users: list[UserPrincipal]) -> InMemoryUserRepository:
    return InMemoryUserRepository(users)


@pytest.fixture
def server(
    keys: KeyMaterial,
    client_repository: InMemoryClientRepository,
    user_repository: InMemoryUserRepository,
    settings: Settings,
    verifier: PasswordVerifier,
    clock: FrozenClock,
) -> AuthorizationServer:
    return AuthorizationServer.build(
        keys, client_repository, user_repository, settings, verifier=verifier, clock=clock
    )
