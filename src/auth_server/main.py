# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authorization server application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI

from . import __version__
from .api.v1 import router as v1_router
from .core.config import Settings, get_settings
from .core.database import Database
from .core.errors import KeyMaterialUnavailable
from .core.keys import KeyMaterial
from .core.logging_utils import configure_logging, get_logger
from .services.authorization_server import AuthorizationServer
from .services.repositories import SqlClientRepository, SqlUserRepository

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the record store for the lifetime of the application."""
    database: Database | None = app.state.database
    if database is not None:
        await database.connect()
    yield
    if database is not None:
        await database.disconnect()


@beartype
def create_app(
    settings: Settings | None = None,
    server: AuthorizationServer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Signing keys are loaded here, before the application exists, so a
    missing keystore, wrong passphrase or unknown alias stops startup with
    ``KeyMaterialUnavailable``.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level)

    database: Database | None = None
    if server is None:
        keys = KeyMaterial.from_keystore(
            settings.keystore_path,
            settings.keystore_passphrase.get_secret_value(),
            settings.key_alias,
        )
        database = Database(settings)
        server = AuthorizationServer.build(
            keys,
            SqlClientRepository(database),
            SqlUserRepository(database),
            settings,
        )

    app = FastAPI(
        title="Authorization Server",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url=None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.authorization_server = server
    app.state.database = database
    app.include_router(v1_router)
    return app


@beartype
def main() -> None:
    """Run the server; exit non-zero when key material is unavailable."""
    settings = get_settings()
    try:
        app = create_app(settings)
    except KeyMaterialUnavailable as e:
        logger.critical("Refusing to start: %s", e)
        raise SystemExit(1) from e

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
