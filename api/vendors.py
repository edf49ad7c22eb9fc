"""
Vendor bindings — one connector, its tool bridge and its session registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict

from connectors.base import BaseConnector
from connectors.executor import AuthenticatedRequestExecutor
from connectors.token_manager import CredentialSession, SessionRegistry
from services.microsoft_service import MicrosoftService
from services.quickbooks_service import QuickBooksService
from tools.bridge import ToolBridge
from tools.registry import ToolRegistry

SERVICE_FACTORIES: Dict[str, Callable[[AuthenticatedRequestExecutor], Any]] = {
    "quickbooks": QuickBooksService,
    "microsoft": MicrosoftService,
}

INSTRUCTIONS: Dict[str, str] = {
    "quickbooks": (
        "This MCP server is for the QuickBooks API. It can be used to get the "
        "user's company info, invoices, customers, items, payments, purchases and vendors."
    ),
    "microsoft": (
        "This MCP server is for the Microsoft Outlook API. It can be used to "
        "read, create, update and delete the user's calendar events."
    ),
}


@dataclass
class VendorBinding:
    connector: BaseConnector
    bridge: ToolBridge
    sessions: SessionRegistry

    @property
    def provider(self) -> str:
        return self.connector.provider_name

    @property
    def instructions(self) -> str:
        return INSTRUCTIONS.get(self.provider, "")

    def executor_for(self, session: CredentialSession) -> AuthenticatedRequestExecutor:
        return AuthenticatedRequestExecutor(self.connector.http_client, self.connector, session)


def build_vendor(connector: BaseConnector, sessions: SessionRegistry) -> VendorBinding:
    """Discover the vendor's tools and wire them to its service."""
    registry = ToolRegistry(connector.provider_name)
    registry.auto_discover_tools()
    bridge = ToolBridge(registry, SERVICE_FACTORIES[connector.provider_name])
    return VendorBinding(connector=connector, bridge=bridge, sessions=sessions)
