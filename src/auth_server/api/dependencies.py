# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies for the OAuth2 endpoints."""

from beartype import beartype
from fastapi import Depends, Form, Request
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)

from ..schemas.oauth2 import TokenRequest
from ..services.authorization_server import AuthorizationServer

client_basic = HTTPBasic(auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


@beartype
def get_authorization_server(request: Request) -> AuthorizationServer:
    """Server instance built at startup."""
    return request.app.state.authorization_server


@beartype
def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    return credentials.credentials if credentials else None


@beartype
def get_token_request(
    grant_type: str = Form(...),
    scope: str | None = Form(None),
    username: str | None = Form(None),
    password: str | None = Form(None),
    refresh_token: str | None = Form(None),
    code: str | None = Form(None),
    redirect_uri: str | None = Form(None),
    client_id: str | None = Form(None),
    client_secret: str | None = Form(None),
    basic: HTTPBasicCredentials | None = Depends(client_basic),
) -> TokenRequest:
    """Build a grant request; HTTP Basic client credentials win over form fields."""
    if basic is not None:
        client_id, client_secret = basic.username, basic.password

    return TokenRequest(
        grant_type=grant_type,
        client_id=client_id,
        client_secret=client_secret,
        scope=scope,
        username=username,
        password=password,
        refresh_token=refresh_token,
        code=code,
        redirect_uri=redirect_uri,
    )
