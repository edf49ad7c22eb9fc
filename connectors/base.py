"""
BaseConnector — abstract token-exchange client for all OAuth2 vendors.

Every vendor (QuickBooks, Microsoft, …) subclasses this and supplies its
endpoints plus the way it authenticates the client at the token endpoint.
The grant requests themselves are shared.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

import httpx

from connectors.models import Credential
from utils.errors import OAuthError

logger = logging.getLogger(__name__)


def form_body(params: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Drop empty values so optional grant fields are simply absent."""
    return {k: v for k, v in params.items() if v}


class BaseConnector(ABC):
    """Abstract base for all vendor token-exchange strategies."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: Optional[str] = None,
    ) -> None:
        self.http_client = http_client
        self.client_id = client_id
        self.client_secret = client_secret

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug: 'quickbooks', 'microsoft'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable: 'QuickBooks', 'Microsoft'."""
        ...

    @property
    @abstractmethod
    def scopes(self) -> List[str]:
        """Default OAuth scopes requested from this vendor."""
        ...

    @property
    @abstractmethod
    def refresh_token_header(self) -> str:
        """Inbound header carrying the caller's vendor refresh token."""
        ...

    @property
    def code_challenge_methods(self) -> List[str]:
        return ["S256", "plain"]

    # ── Endpoints ───────────────────────────────────────────────────────

    @property
    @abstractmethod
    def authorize_endpoint(self) -> str:
        ...

    @property
    @abstractmethod
    def token_endpoint(self) -> str:
        ...

    # ── Client authentication (the vendor strategy) ─────────────────────

    @abstractmethod
    def authenticate_token_request(
        self, form: Dict[str, str]
    ) -> Tuple[Dict[str, str], Dict[str, str]]:
        """
        Attach client credentials to a token request.

        Returns the (headers, form) pair to POST.
        """
        ...

    def is_configured(self) -> bool:
        return bool(self.client_id)

    # ── Grants ──────────────────────────────────────────────────────────

    async def exchange_authorization_code(
        self,
        code: str,
        redirect_uri: str,
        code_verifier: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> Credential:
        """
        Exchange an authorization code for tokens.

        The PKCE ``code_verifier`` is forwarded verbatim; verifying it
        against the challenge is the vendor's job.
        """
        form = form_body(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "code_verifier": code_verifier,
                "scope": scope or " ".join(self.scopes),
            }
        )
        data = await self._post_token(form, "authorization_code")
        logger.info("%s authorization code exchanged", self.display_name)
        return Credential.from_token_response(data)

    async def refresh_access_token(
        self,
        refresh_token: str,
        scope: Optional[str] = None,
    ) -> Credential:
        """
        Use a refresh token to get a new access token.

        When the vendor does not rotate the refresh token, the one passed
        in is carried over to the returned Credential.
        """
        form = form_body(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "scope": scope or " ".join(self.scopes),
            }
        )
        data = await self._post_token(form, "refresh_token")
        logger.info(
            "%s access token refreshed (refresh token %s)",
            self.display_name,
            "rotated" if data.get("refresh_token") else "kept",
        )
        return Credential.from_token_response(
            data, previous_refresh_token=refresh_token
        )

    async def _post_token(self, form: Dict[str, str], grant_type: str) -> Dict[str, Any]:
        headers, body = self.authenticate_token_request(form)
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
            **headers,
        }
        resp = await self.http_client.post(self.token_endpoint, data=body, headers=headers)

        if resp.is_error:
            try:
                error_body = resp.json()
            except ValueError:
                error_body = None
            if not isinstance(error_body, dict):
                error_body = {
                    "error": "invalid_request",
                    "error_description": resp.text,
                }
            logger.warning(
                "%s %s grant failed: %d %s",
                self.display_name,
                grant_type,
                resp.status_code,
                error_body.get("error"),
            )
            raise OAuthError(resp.status_code, error_body, grant_type)

        try:
            data = resp.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not data.get("access_token"):
            logger.warning(
                "%s %s grant returned %d without an access_token",
                self.display_name,
                grant_type,
                resp.status_code,
            )
            raise OAuthError(
                502,
                {
                    "error": "invalid_response",
                    "error_description": f"{self.display_name} token endpoint returned no access_token",
                },
                grant_type,
            )
        return data

    # ── Authorization redirect & discovery ──────────────────────────────

    def build_authorize_url(self, query: Mapping[str, str]) -> str:
        """
        Proxy the caller's authorize query to the vendor, substituting our
        own ``client_id``.
        """
        params = {k: v for k, v in query.items() if k != "client_id"}
        params.setdefault("scope", " ".join(self.scopes))
        params["client_id"] = self.client_id
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    def discovery_metadata(self, issuer: str) -> Dict[str, Any]:
        return {
            "issuer": issuer,
            "authorization_endpoint": f"{issuer}/authorize",
            "token_endpoint": f"{issuer}/token",
            "registration_endpoint": f"{issuer}/register",
            "response_types_supported": ["code"],
            "response_modes_supported": ["query"],
            "grant_types_supported": ["authorization_code", "refresh_token"],
            "token_endpoint_auth_methods_supported": ["none"],
            "code_challenge_methods_supported": self.code_challenge_methods,
            "scopes_supported": self.scopes,
        }
