# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Database connection management with asyncpg connection pooling.

Client and user records are owned by an external administrative process;
this service only reads them, so the wrapper exposes read helpers only.
"""

import contextlib
from collections.abc import AsyncIterator
from typing import Any

import asyncpg
from beartype import beartype

from .config import Settings
from .logging_utils import get_logger

logger = get_logger(__name__)


class Database:
    """Thin asyncpg pool wrapper."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._pool: asyncpg.Pool | None = None

    @beartype
    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return
        if not self._settings.database_url:
            raise RuntimeError("AUTH_DATABASE_URL is not configured")

        self._pool = await asyncpg.create_pool(
            self._settings.database_url,
            min_size=self._settings.database_pool_min,
            max_size=self._settings.database_pool_max,
            command_timeout=self._settings.database_command_timeout,
        )
        logger.info(
            "Database pool ready (min=%d, max=%d)",
            self._settings.database_pool_min,
            self._settings.database_pool_max,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
        self._pool = None

    @contextlib.asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, released on exit."""
        if self._pool is None:
            raise RuntimeError("Database not connected")
        async with self._pool.acquire() as conn:
            yield conn

    async def fetch(self, query: str, *args: Any) -> list[Any]:
        """Execute a query and fetch all results."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Any:
        """Execute a query and fetch a single row."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    @property
    def is_connected(self) -> bool:
        return self._pool is not None
