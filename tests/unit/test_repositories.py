"""Unit tests for the record repositories."""

from unittest.mock import AsyncMock

import pytest

from auth_server.core.errors import UnauthorizedGrantType
from auth_server.models.token import GrantType
from auth_server.services.client_registry import ClientRegistry
from auth_server.services.repositories import (
    ClientRepository,
    InMemoryClientRepository,
    InMemoryUserRepository,
    SqlClientRepository,
    SqlUserRepository,
    UserRepository,
)


@pytest.fixture
def db():
    return AsyncMock()


def _user_row(**overrides):
    row = {
        "id": 1,
        "username": "bob",
        "email": "bob@x.com",
        "password": "$pbkdf2-sha256$stored",
        "enabled": True,
        "account_non_expired": True,
        "account_non_locked": True,
        "credentials_non_expired": True,
        "version": None,
        "created_on": None,
        "updated_on": None,
        "permissions": ["can_read", "can_write"],
    }
    row.update(overrides)
    return row


class TestInMemoryRepositories:
    """Tests for the in-memory repositories."""

    def test_satisfy_protocols(self):
        assert isinstance(InMemoryClientRepository(), ClientRepository)
        assert isinstance(InMemoryUserRepository(), UserRepository)

    @pytest.mark.asyncio
    async def test_email_lookup_ignores_case(self, user_repository):
        principal = await user_repository.find_by_email("BOB@X.COM")

        assert principal is not None
        assert principal.username == "bob"

    @pytest.mark.asyncio
    async def test_unknown_client(self, client_repository):
        assert await client_repository.find_by_id("nobody") is None


class TestSqlClientRepository:
    """Tests for SqlClientRepository row mapping."""

    @pytest.mark.asyncio
    async def test_maps_comma_separated_columns(self, db):
        db.fetchrow.return_value = {
            "client_id": "cid1",
            "client_secret": "$pbkdf2-sha256$stored",
            "scope": "read, write",
            "authorized_grant_types": "password,refresh_token,implicit",
            "access_token_validity": 3600,
            "refresh_token_validity": None,
        }

        client = await SqlClientRepository(db).find_by_id("cid1")

        assert client.scopes == frozenset({"read", "write"})
        assert client.grant_types == frozenset({GrantType.PASSWORD, GrantType.REFRESH_TOKEN})
        assert client.access_token_validity_seconds == 3600
        assert client.refresh_token_validity_seconds is None
        assert db.fetchrow.await_args.args[1] == "cid1"

    @pytest.mark.asyncio
    async def test_missing_client(self, db):
        db.fetchrow.return_value = None

        assert await SqlClientRepository(db).find_by_id("nobody") is None

    @pytest.mark.asyncio
    async def test_row_without_usable_grants_or_scopes(self, db, verifier):
        """Such a client loads, then fails authorization instead of crashing."""
        db.fetchrow.return_value = {
            "client_id": "legacy",
            "client_secret": verifier.hash("s"),
            "scope": None,
            "authorized_grant_types": "implicit",
            "access_token_validity": None,
            "refresh_token_validity": None,
        }
        repository = SqlClientRepository(db)

        client = await repository.find_by_id("legacy")
        result = await ClientRegistry(repository, verifier).authenticate(
            "legacy", "s", GrantType.CLIENT_CREDENTIALS
        )

        assert client.grant_types == frozenset()
        assert client.scopes == frozenset()
        assert isinstance(result.err_value, UnauthorizedGrantType)


class TestSqlUserRepository:
    """Tests for SqlUserRepository row mapping."""

    @pytest.mark.asyncio
    async def test_find_by_username(self, db):
        db.fetchrow.return_value = _user_row()

        principal = await SqlUserRepository(db).find_by_username("bob")

        assert principal.subject == "1"
        assert principal.authority_names == ("can_read", "can_write")
        assert principal.version == 0
        query, username = db.fetchrow.await_args.args
        assert "u.username = $1" in query
        assert username == "bob"

    @pytest.mark.asyncio
    async def test_find_by_email_is_case_insensitive(self, db):
        db.fetchrow.return_value = _user_row(account_non_locked=False, permissions=[])

        principal = await SqlUserRepository(db).find_by_email("Bob@X.com")

        assert principal.account_non_locked is False
        assert principal.authorities == ()
        assert "lower(u.email) = lower($1)" in db.fetchrow.await_args.args[0]

    @pytest.mark.asyncio
    async def test_missing_user(self, db):
        db.fetchrow.return_value = None

        assert await SqlUserRepository(db).find_by_email("nobody@x.com") is None
