"""
Account-linked MCP broker — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AsyncExitStack
from typing import List, Optional

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from api.mcp_routes import VendorMcp
from api.middleware import register_middleware
from api.oauth_routes import build_oauth_router
from api.vendors import build_vendor
from config.settings import config
from connectors.base import BaseConnector
from connectors.client_store import ClientStore, InMemoryClientStore
from connectors.registry import ConnectorRegistry, all_connectors
from connectors.token_manager import SessionRegistry

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "urllib3"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    http_client: Optional[httpx.AsyncClient] = None,
    connectors: Optional[List[BaseConnector]] = None,
    client_store: Optional[ClientStore] = None,
) -> FastAPI:
    app = FastAPI(
        title="Account-Linked MCP Broker",
        version="1.0.0",
        description="OAuth2 broker and MCP tool bridge for QuickBooks and Microsoft Graph.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Mcp-Session-Id"],
    )

    register_middleware(app)

    owns_client = http_client is None
    http_client = http_client or httpx.AsyncClient(timeout=config.upstream_timeout_seconds)

    registry = ConnectorRegistry(connectors if connectors is not None else all_connectors(http_client))
    registry.discover()

    app.state.http_client = http_client
    app.state.connectors = registry
    app.state.client_store = client_store if client_store is not None else InMemoryClientStore()

    # Routes — one prefix per configured vendor
    mcp_servers: List[VendorMcp] = []
    for provider in registry.list_configured():
        binding = build_vendor(registry.get(provider), SessionRegistry(config.session_ttl_seconds))
        vendor_mcp = VendorMcp(binding)
        mcp_servers.append(vendor_mcp)
        app.include_router(build_oauth_router(binding), prefix=f"/{provider}")
        app.include_router(vendor_mcp.router(), prefix=f"/{provider}")
        logger.info("Mounted %s at /%s (%d tools)", provider, provider, len(binding.bridge.registry.list_tools()))

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        mounted = ", ".join(registry.list_configured()) or "no vendors configured"
        return f"MCP broker is running ({mounted})"

    lifetime = AsyncExitStack()

    @app.on_event("startup")
    async def on_startup():
        for vendor_mcp in mcp_servers:
            await lifetime.enter_async_context(vendor_mcp.run())

    @app.on_event("shutdown")
    async def on_shutdown():
        await lifetime.aclose()
        if owns_client:
            await http_client.aclose()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
