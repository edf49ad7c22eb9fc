"""
MicrosoftConnector — OAuth2 for Microsoft Graph (Outlook calendar & mail).

Entra ID endpoints are tenant-scoped, and the app may be registered as a
public client, so credentials go in the form body and the secret is
optional.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import httpx

from config.settings import config
from connectors.base import BaseConnector, form_body

logger = logging.getLogger(__name__)

MICROSOFT_GRAPH_DEFAULT_SCOPES = [
    "openid",
    "profile",
    "offline_access",       # needed to receive a refresh_token
    "Calendars.ReadWrite",
    "Mail.ReadWrite",
    "Mail.Send",
    "User.Read",
    "People.Read",
    "Contacts.ReadWrite",
    "MailboxSettings.Read",
]


def get_microsoft_auth_endpoint(tenant_id: str, endpoint: str) -> str:
    """``endpoint`` is ``"authorize"`` or ``"token"``."""
    return f"https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/{endpoint}"


class MicrosoftConnector(BaseConnector):
    """OAuth2 connector for Microsoft Graph."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            http_client,
            client_id if client_id is not None else config.microsoft_client_id,
            client_secret if client_secret is not None else config.microsoft_client_secret,
        )
        self.tenant_id = tenant_id or config.microsoft_tenant_id

    @property
    def provider_name(self) -> str:
        return "microsoft"

    @property
    def display_name(self) -> str:
        return "Microsoft"

    @property
    def scopes(self) -> List[str]:
        return list(MICROSOFT_GRAPH_DEFAULT_SCOPES)

    @property
    def refresh_token_header(self) -> str:
        return "X-Microsoft-Refresh-Token"

    @property
    def code_challenge_methods(self) -> List[str]:
        return ["S256"]

    @property
    def authorize_endpoint(self) -> str:
        return get_microsoft_auth_endpoint(self.tenant_id, "authorize")

    @property
    def token_endpoint(self) -> str:
        return get_microsoft_auth_endpoint(self.tenant_id, "token")

    def authenticate_token_request(
        self, form: Dict[str, str]
    ) -> Tuple[Dict[str, str], Dict[str, str]]:
        body = form_body(
            {"client_id": self.client_id, "client_secret": self.client_secret}
        )
        body.update(form)
        return {}, body
