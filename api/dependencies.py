"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from fastapi import Header

from connectors.models import Credential
from utils.errors import AuthBoundaryError


def credential_from_headers(
    authorization: Optional[str], refresh_token: Optional[str]
) -> Credential:
    """
    The caller's vendor credential: the access token from
    ``Authorization: Bearer …`` and the refresh token from the vendor
    refresh-token header.  A missing or malformed bearer is rejected.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthBoundaryError("Missing or invalid access token")
    access_token = authorization[7:].strip()
    if not access_token:
        raise AuthBoundaryError("Missing or invalid access token")
    return Credential(access_token=access_token, refresh_token=refresh_token or "")


def inbound_credential(refresh_header: str) -> Callable[..., Awaitable[Credential]]:
    """
    Build a dependency that rejects requests without a bearer before any
    MCP or tool logic runs.  *refresh_header* is the vendor-specific
    refresh-token header name.
    """

    async def dependency(
        authorization: Optional[str] = Header(None, alias="Authorization"),
        refresh_token: Optional[str] = Header(None, alias=refresh_header),
    ) -> Credential:
        return credential_from_headers(authorization, refresh_token)

    return dependency
