"""
AuthenticatedRequestExecutor — bearer-authenticated upstream calls with
transparent recovery from an expired access token.

Contract per logical call:
  • send with the session's current access token;
  • on 401, refresh once through the session lock and retry once;
  • a second 401, or any other non-2xx, is a terminal ``UpstreamAPIError``;
  • timeouts and transport failures are terminal and never trigger a refresh.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from connectors.base import BaseConnector
from connectors.token_manager import CredentialSession
from utils.errors import UpstreamAPIError

logger = logging.getLogger(__name__)


class AuthenticatedRequestExecutor:
    """Issues HTTP calls on behalf of one CredentialSession."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        connector: BaseConnector,
        session: CredentialSession,
    ) -> None:
        self.http_client = http_client
        self.connector = connector
        self.session = session

    @property
    def provider(self) -> str:
        return self.connector.display_name

    async def execute(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Send the request; return the 2xx response or raise."""
        token = self.session.credential.access_token
        resp = await self._send(method, url, token, params=params, json=json, headers=headers)

        if resp.status_code == 401:
            logger.info("%s %s %s → 401, refreshing token", self.provider, method, url)
            token = await self.session.refresh(token, self.connector)
            resp = await self._send(method, url, token, params=params, json=json, headers=headers)
            if resp.status_code == 401:
                logger.warning("%s rejected the refreshed token for %s %s", self.provider, method, url)
                raise UpstreamAPIError(
                    401,
                    resp.reason_phrase or "Unauthorized",
                    "still unauthorized after token refresh",
                    provider=self.provider,
                )

        if resp.is_error:
            logger.warning("%s %s %s → %d %s", self.provider, method, url, resp.status_code, resp.reason_phrase)
            raise UpstreamAPIError(resp.status_code, resp.reason_phrase, provider=self.provider)

        return resp

    async def execute_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Like :meth:`execute`, but return the decoded body (``None`` if empty)."""
        resp = await self.execute(method, url, params=params, json=json, headers=headers)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        *,
        params: Optional[Dict[str, Any]],
        json: Any,
        headers: Optional[Dict[str, str]],
    ) -> httpx.Response:
        merged = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            **(headers or {}),
        }
        try:
            return await self.http_client.request(
                method, url, params=params, json=json, headers=merged
            )
        except httpx.TimeoutException as exc:
            raise UpstreamAPIError(
                504, "Gateway Timeout", str(exc) or "request timed out", provider=self.provider
            ) from exc
        except httpx.TransportError as exc:
            raise UpstreamAPIError(
                502, "Bad Gateway", str(exc) or type(exc).__name__, provider=self.provider
            ) from exc
