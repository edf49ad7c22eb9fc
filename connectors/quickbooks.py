"""
QuickBooksConnector — OAuth2 for the Intuit accounting API.

Intuit registers apps as confidential clients: the client id and secret
travel in an HTTP Basic header on every token request, never in the form.
"""

from __future__ import annotations

import base64
import logging
from typing import Dict, List, Optional, Tuple

import httpx

from config.settings import config
from connectors.base import BaseConnector

logger = logging.getLogger(__name__)

# Intuit OAuth2 endpoints
_QB_AUTH_URL = "https://appcenter.intuit.com/connect/oauth2"
_QB_TOKEN_URL = "https://oauth.platform.intuit.com/oauth2/v1/tokens/bearer"

QUICKBOOKS_DEFAULT_SCOPES = ["com.intuit.quickbooks.accounting"]


class QuickBooksConnector(BaseConnector):
    """OAuth2 connector for QuickBooks Online."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
    ) -> None:
        super().__init__(
            http_client,
            client_id if client_id is not None else config.quickbooks_client_id,
            client_secret if client_secret is not None else config.quickbooks_client_secret,
        )

    @property
    def provider_name(self) -> str:
        return "quickbooks"

    @property
    def display_name(self) -> str:
        return "QuickBooks"

    @property
    def scopes(self) -> List[str]:
        return list(QUICKBOOKS_DEFAULT_SCOPES)

    @property
    def refresh_token_header(self) -> str:
        return "X-QuickBooks-Refresh-Token"

    @property
    def authorize_endpoint(self) -> str:
        return _QB_AUTH_URL

    @property
    def token_endpoint(self) -> str:
        return _QB_TOKEN_URL

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authenticate_token_request(
        self, form: Dict[str, str]
    ) -> Tuple[Dict[str, str], Dict[str, str]]:
        raw = f"{self.client_id}:{self.client_secret or ''}".encode()
        basic = base64.b64encode(raw).decode()
        return {"Authorization": f"Basic {basic}"}, form
