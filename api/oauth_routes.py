"""
OAuth authorization-server routes for one vendor — discovery, dynamic
client registration, the authorize redirect and the token endpoint.

Route prefix: /{provider}
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from api.vendors import VendorBinding
from config.settings import config
from connectors.client_store import RegisteredClient
from utils.errors import OAuthError

logger = logging.getLogger(__name__)


def issuer_for(request: Request, provider: str) -> str:
    base = config.public_base_url or str(request.base_url)
    return f"{base.rstrip('/')}/{provider}"


def build_oauth_router(binding: VendorBinding) -> APIRouter:
    connector = binding.connector
    router = APIRouter(tags=[f"{connector.provider_name}-oauth"])

    @router.get("/.well-known/oauth-authorization-server")
    async def discovery(request: Request) -> Dict[str, Any]:
        """OAuth 2.0 authorization server metadata."""
        return connector.discovery_metadata(issuer_for(request, connector.provider_name))

    @router.post("/register", status_code=status.HTTP_201_CREATED)
    async def register_client(request: Request) -> JSONResponse:
        """Dynamic client registration; records are kept in the injected store."""
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return JSONResponse(
                {"error": "invalid_client_metadata", "error_description": "body must be a JSON object"},
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        client = RegisteredClient(
            client_id=str(uuid.uuid4()),
            client_name=body.get("client_name") or "MCP Client",
            redirect_uris=body.get("redirect_uris") or [],
            grant_types=body.get("grant_types") or ["authorization_code", "refresh_token"],
            response_types=body.get("response_types") or ["code"],
            scope=body.get("scope"),
            created_at=int(time.time() * 1000),
        )
        request.app.state.client_store.put(client.client_id, client)
        logger.info("Registered %s client %s (%s)", connector.provider_name, client.client_id, client.client_name)

        return JSONResponse(
            client.model_dump(exclude={"created_at"}),
            status_code=status.HTTP_201_CREATED,
        )

    @router.get("/authorize")
    async def authorize(request: Request) -> RedirectResponse:
        """Redirect to the vendor's consent page with our own client_id."""
        query = dict(request.query_params)
        challenge = query.get("code_challenge")
        logger.info(
            "PKCE authorize: method=%s code_challenge=%s redirect_uri=%s",
            query.get("code_challenge_method"),
            f"{challenge[:8]}…" if challenge else None,
            query.get("redirect_uri"),
        )
        return RedirectResponse(connector.build_authorize_url(query), status_code=status.HTTP_302_FOUND)

    @router.post("/token")
    async def token(request: Request) -> JSONResponse:
        """
        Relay the grant to the vendor and return its token response
        verbatim.  Vendor errors pass through with their (allow-listed)
        status.
        """
        form = await request.form()
        grant_type = form.get("grant_type")
        code_verifier = form.get("code_verifier")
        logger.info(
            "PKCE token: grant_type=%s code_verifier_len=%s redirect_uri=%s",
            grant_type,
            len(code_verifier) if code_verifier else None,
            form.get("redirect_uri"),
        )

        try:
            if grant_type == "authorization_code":
                code = form.get("code")
                if not code:
                    return _invalid_request("missing 'code'")
                credential = await connector.exchange_authorization_code(
                    code,
                    form.get("redirect_uri") or "",
                    code_verifier=code_verifier or None,
                    scope=form.get("scope") or None,
                )
                return JSONResponse(credential.token_response)

            if grant_type == "refresh_token":
                refresh_token = form.get("refresh_token")
                if not refresh_token:
                    return _invalid_request("missing 'refresh_token'")
                credential = await connector.refresh_access_token(
                    refresh_token, scope=form.get("scope") or None
                )
                return JSONResponse(credential.token_response)
        except OAuthError as exc:
            return JSONResponse(exc.body, status_code=exc.status)

        return JSONResponse({"error": "unsupported_grant_type"}, status_code=status.HTTP_400_BAD_REQUEST)

    return router


def _invalid_request(description: str) -> JSONResponse:
    return JSONResponse(
        {"error": "invalid_request", "error_description": description},
        status_code=status.HTTP_400_BAD_REQUEST,
    )
