# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Client authentication against registered client records."""

from collections.abc import Iterable

from beartype import beartype

from ..core.errors import (
    ClientAuthError,
    ClientNotFound,
    InvalidClientCredentials,
    InvalidScope,
    UnauthorizedGrantType,
)
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.client import Client
from ..models.token import GrantType
from .credentials import CredentialVerifier
from .repositories import ClientRepository

logger = get_logger(__name__)


class ClientRegistry:
    """Resolves clients and validates presented credentials."""

    def __init__(self, repository: ClientRepository, verifier: CredentialVerifier) -> None:
        self._repository = repository
        self._verifier = verifier

    @beartype
    async def authenticate(
        self,
        client_id: str,
        presented_secret: str,
        requested_grant_type: GrantType,
        requested_scopes: Iterable[str] = (),
    ) -> Result[Client, ClientAuthError]:
        """Authenticate a client for one grant request.

        Checks run in a fixed order and stop at the first failure: the
        client exists, the secret matches its stored hash, the grant type
        is allowed, and every requested scope is allowed.

        Args:
            client_id: Presented client identifier
            presented_secret: Presented plaintext secret
            requested_grant_type: Grant type of the request
            requested_scopes: Scopes named in the request, possibly empty

        Returns:
            Result containing the client record or a ClientAuthError
        """
        client = await self._repository.find_by_id(client_id)
        if client is None:
            self._verifier.dummy_verify()
            logger.warning("Client authentication failed: unknown client %s", client_id)
            return Err(ClientNotFound(f"Client not found: {client_id}"))

        if not self._verifier.verify(presented_secret, client.secret_hash):
            logger.warning("Client authentication failed: bad secret for %s", client_id)
            return Err(InvalidClientCredentials(f"Bad secret for client {client_id}"))

        if not client.allows_grant(requested_grant_type):
            return Err(
                UnauthorizedGrantType(
                    f"Client {client_id} is not authorized for grant "
                    f"{requested_grant_type.value}"
                )
            )

        invalid = sorted(set(requested_scopes) - client.scopes)
        if invalid:
            return Err(
                InvalidScope(
                    f"Client {client_id} not authorized for scopes: {', '.join(invalid)}"
                )
            )

        return Ok(client)
