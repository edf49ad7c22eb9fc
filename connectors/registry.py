"""
ConnectorRegistry — builds and provides access to all vendor connectors.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import httpx

from connectors.base import BaseConnector
from connectors.microsoft import MicrosoftConnector
from connectors.quickbooks import QuickBooksConnector

logger = logging.getLogger(__name__)


def all_connectors(http_client: httpx.AsyncClient) -> List[BaseConnector]:
    """Every known connector — add new vendors here."""
    return [
        QuickBooksConnector(http_client),
        MicrosoftConnector(http_client),
    ]


class ConnectorRegistry:
    """Holds the configured connectors of one application instance."""

    def __init__(self, connectors: List[BaseConnector]) -> None:
        self._all = list(connectors)
        self._connectors: Dict[str, BaseConnector] = {}
        self._discovered = False

    def discover(self) -> None:
        """Register all configured connectors."""
        if self._discovered:
            return
        for conn in self._all:
            if conn.is_configured():
                self._connectors[conn.provider_name] = conn
                logger.info(
                    "Connector registered: %s (%s)",
                    conn.display_name,
                    conn.provider_name,
                )
            else:
                logger.warning(
                    "Connector %s skipped — not configured (missing client_id/secret)",
                    conn.provider_name,
                )
        self._discovered = True

    def get(self, provider: str) -> Optional[BaseConnector]:
        """Get a connector by provider name."""
        return self._connectors.get(provider)

    def list_configured(self) -> List[str]:
        """Return names of configured connectors."""
        return list(self._connectors.keys())
