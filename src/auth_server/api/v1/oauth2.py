# auth-server - OAuth2 Authorization Server
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""OAuth2 token, token key and check token endpoints."""

from typing import Any

from beartype import beartype
from fastapi import APIRouter, Depends, Form
from fastapi.responses import JSONResponse

from ...core.errors import AuthError
from ...schemas.oauth2 import TokenRequest
from ...services.authorization_server import AuthorizationServer
from ..dependencies import get_authorization_server, get_bearer_token, get_token_request

router = APIRouter(prefix="/oauth", tags=["oauth2"])

_NO_STORE = {"Cache-Control": "no-store", "Pragma": "no-cache"}


def _error_response(error: AuthError) -> JSONResponse:
    headers = dict(_NO_STORE)
    if error.status_code == 401:
        headers["WWW-Authenticate"] = f'Bearer error="{error.error}"'
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)


@router.post("/token")
@beartype
async def token(
    token_request: TokenRequest = Depends(get_token_request),
    server: AuthorizationServer = Depends(get_authorization_server),
) -> Any:
    """OAuth2 token endpoint.

    Supports the password, client_credentials, refresh_token and
    authorization_code grants. Client credentials are taken from HTTP Basic
    authentication or the client_id / client_secret form fields.
    """
    result = await server.token(token_request)
    if result.is_err():
        return _error_response(result.unwrap_err())
    return JSONResponse(content=result.unwrap().to_dict(), headers=_NO_STORE)


@router.get("/token_key")
@beartype
async def token_key(
    server: AuthorizationServer = Depends(get_authorization_server),
) -> Any:
    """Public verification key; no authentication required."""
    result = await server.token_key()
    if result.is_err():
        return _error_response(result.unwrap_err())
    return result.unwrap().model_dump()


@router.post("/check_token")
@beartype
async def check_token(
    token: str = Form(...),
    bearer: str | None = Depends(get_bearer_token),
    server: AuthorizationServer = Depends(get_authorization_server),
) -> Any:
    """Token introspection; the caller must present a valid bearer token."""
    result = await server.check_token(token, bearer)
    if result.is_err():
        return _error_response(result.unwrap_err())
    return result.unwrap().to_dict()
