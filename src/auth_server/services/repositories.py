# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Read-only access to persisted client and user records.

Rows are owned by an external administrative process. The core depends
only on the two protocols below; the SQL implementations map the JDBC-style
schema (comma-separated grant types and scopes) onto the domain models.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from beartype import beartype

from ..core.database import Database
from ..models.client import Client
from ..models.token import GrantType
from ..models.user import Permission, UserPrincipal


@runtime_checkable
class ClientRepository(Protocol):
    async def find_by_id(self, client_id: str) -> Client | None: ...


@runtime_checkable
class UserRepository(Protocol):
    async def find_by_username(self, username: str) -> UserPrincipal | None: ...

    async def find_by_email(self, email: str) -> UserPrincipal | None: ...


class InMemoryClientRepository:
    """Client records held in a dict (local development and tests)."""

    def __init__(self, clients: Iterable[Client] = ()) -> None:
        self._clients = {c.id: c for c in clients}

    async def find_by_id(self, client_id: str) -> Client | None:
        return self._clients.get(client_id)


class InMemoryUserRepository:
    """User records indexed by username and by email."""

    def __init__(self, users: Iterable[UserPrincipal] = ()) -> None:
        users = list(users)
        self._by_username = {u.username: u for u in users}
        self._by_email = {u.email.lower(): u for u in users}

    async def find_by_username(self, username: str) -> UserPrincipal | None:
        return self._by_username.get(username)

    async def find_by_email(self, email: str) -> UserPrincipal | None:
        return self._by_email.get(email.lower())


_KNOWN_GRANT_TYPES = frozenset(g.value for g in GrantType)


def _split_csv(value: str | None) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


class SqlClientRepository:
    """Clients stored in ``oauth_client_details``."""

    def __init__(self, db: Database) -> None:
        self._db = db

    @beartype
    async def find_by_id(self, client_id: str) -> Client | None:
        row = await self._db.fetchrow(
            """
            SELECT client_id, client_secret, scope, authorized_grant_types,
                   access_token_validity, refresh_token_validity
            FROM oauth_client_details
            WHERE client_id = $1
            """,
            client_id,
        )
        if not row:
            return None
        return Client(
            id=row["client_id"],
            secret_hash=row["client_secret"],
            scopes=_split_csv(row["scope"]),
            grant_types=_split_csv(row["authorized_grant_types"]) & _KNOWN_GRANT_TYPES,
            access_token_validity_seconds=row["access_token_validity"],
            refresh_token_validity_seconds=row["refresh_token_validity"],
        )


class SqlUserRepository:
    """Users with their permissions from ``users`` / ``user_permissions``."""

    _QUERY = """
        SELECT u.id, u.username, u.email, u.password, u.enabled,
               u.account_non_expired, u.account_non_locked,
               u.credentials_non_expired, u.version, u.created_on, u.updated_on,
               COALESCE(
                   array_agg(p.name ORDER BY p.name) FILTER (WHERE p.name IS NOT NULL),
                   '{{}}'
               ) AS permissions
        FROM users u
        LEFT JOIN user_permissions up ON up.user_id = u.id
        LEFT JOIN permissions p ON p.id = up.permission_id
        WHERE {predicate}
        GROUP BY u.id
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @beartype
    async def find_by_username(self, username: str) -> UserPrincipal | None:
        row = await self._db.fetchrow(
            self._QUERY.format(predicate="u.username = $1"), username
        )
        return self._to_principal(row) if row else None

    @beartype
    async def find_by_email(self, email: str) -> UserPrincipal | None:
        row = await self._db.fetchrow(
            self._QUERY.format(predicate="lower(u.email) = lower($1)"), email
        )
        return self._to_principal(row) if row else None

    @staticmethod
    def _to_principal(row: Mapping[str, Any]) -> UserPrincipal:
        return UserPrincipal(
            id=row["id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password"],
            enabled=row["enabled"],
            account_non_expired=row["account_non_expired"],
            account_non_locked=row["account_non_locked"],
            credentials_non_expired=row["credentials_non_expired"],
            authorities=tuple(Permission(name=name) for name in row["permissions"]),
            version=row["version"] or 0,
            created_on=row["created_on"],
            updated_on=row["updated_on"],
        )
