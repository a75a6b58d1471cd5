"""Unit tests for client authentication."""

from unittest.mock import MagicMock

import pytest

from auth_server.core.errors import (
    ClientNotFound,
    InvalidClientCredentials,
    InvalidScope,
    UnauthorizedGrantType,
)
from auth_server.models.token import GrantType
from auth_server.services.client_registry import ClientRegistry
from tests.fixtures.factories import CLIENT_SECRET


@pytest.fixture
def registry(client_repository, verifier):
    return ClientRegistry(client_repository, verifier)


class TestClientRegistry:
    """Tests for ClientRegistry.authenticate."""

    @pytest.mark.asyncio
    async def test_authenticates_known_client(self, registry):
        """Correct secret, allowed grant and scope yields the client."""
        result = await registry.authenticate(
            "cid1", CLIENT_SECRET, GrantType.CLIENT_CREDENTIALS, ["read"]
        )

        assert result.is_ok()
        assert result.value.id == "cid1"

    @pytest.mark.asyncio
    async def test_empty_scope_request_is_allowed(self, registry):
        result = await registry.authenticate("cid1", CLIENT_SECRET, GrantType.PASSWORD)

        assert result.is_ok()

    @pytest.mark.asyncio
    async def test_unknown_client(self, registry):
        result = await registry.authenticate("nobody", "x", GrantType.CLIENT_CREDENTIALS)

        assert result.is_err()
        assert isinstance(result.error, ClientNotFound)
        assert result.error.error == "invalid_client"

    @pytest.mark.asyncio
    async def test_wrong_secret(self, registry):
        result = await registry.authenticate("cid1", "wrong", GrantType.CLIENT_CREDENTIALS)

        assert isinstance(result.err_value, InvalidClientCredentials)

    @pytest.mark.asyncio
    async def test_unknown_and_bad_secret_look_identical_to_callers(self, registry):
        """A caller cannot probe which client ids exist."""
        missing = await registry.authenticate("nobody", "x", GrantType.CLIENT_CREDENTIALS)
        wrong = await registry.authenticate("cid1", "x", GrantType.CLIENT_CREDENTIALS)

        assert missing.error.to_dict() == wrong.error.to_dict()
        assert missing.error.status_code == wrong.error.status_code == 401

    @pytest.mark.asyncio
    async def test_grant_type_not_allowed(self, registry):
        result = await registry.authenticate("svc", "svc-secret", GrantType.PASSWORD)

        assert isinstance(result.err_value, UnauthorizedGrantType)

    @pytest.mark.asyncio
    async def test_scope_not_allowed(self, registry):
        result = await registry.authenticate(
            "cid1", CLIENT_SECRET, GrantType.CLIENT_CREDENTIALS, ["admin"]
        )

        assert isinstance(result.err_value, InvalidScope)
        assert "admin" in result.err_value.detail

    @pytest.mark.asyncio
    async def test_secret_is_checked_before_grant_and_scope(self, registry):
        """Failures are reported in a fixed order."""
        result = await registry.authenticate("svc", "wrong", GrantType.PASSWORD, ["admin"])

        assert isinstance(result.err_value, InvalidClientCredentials)

    @pytest.mark.asyncio
    async def test_grant_is_checked_before_scope(self, registry):
        result = await registry.authenticate("svc", "svc-secret", GrantType.PASSWORD, ["admin"])

        assert isinstance(result.err_value, UnauthorizedGrantType)

    @pytest.mark.asyncio
    async def test_unknown_client_still_runs_a_verification(self, client_repository, verifier):
        """A miss costs a hash check, like a wrong secret does."""
        spy = MagicMock(wraps=verifier)
        registry = ClientRegistry(client_repository, spy)

        await registry.authenticate("nobody", "x", GrantType.CLIENT_CREDENTIALS)

        spy.dummy_verify.assert_called_once_with()
        spy.verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_known_client_skips_dummy_verification(self, client_repository, verifier):
        spy = MagicMock(wraps=verifier)
        registry = ClientRegistry(client_repository, spy)

        await registry.authenticate("cid1", "wrong", GrantType.CLIENT_CREDENTIALS)

        spy.verify.assert_called_once()
        spy.dummy_verify.assert_not_called()
