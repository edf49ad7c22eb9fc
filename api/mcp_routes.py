"""
MCP endpoints for one vendor, served by the MCP Python SDK.

Transports (route prefix: /{provider}):
    /mcp            streamable HTTP — POST, GET (server stream), DELETE
    /sse            SSE stream (GET)
    /sse/message/   SSE client → server messages (POST, ``?session_id=``)

The SDK owns the protocol: version negotiation, ``Mcp-Session-Id``
issuance and JSON-RPC framing.  Every request must carry the bearer access
token; the vendor refresh-token header is optional.  Tool calls run through
the vendor's ToolBridge with the Credential held for the transport session.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncContextManager, Dict, List, Optional

import mcp.types as types
from fastapi import APIRouter, Depends, Request, Response
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.types import ASGIApp, Receive, Scope, Send

from api.dependencies import credential_from_headers, inbound_credential
from api.vendors import VendorBinding

logger = logging.getLogger(__name__)

SERVER_VERSION = "1.0.0"
MCP_SESSION_HEADER = "mcp-session-id"


class ASGIPassthrough(Response):
    """Hands the raw ASGI exchange to an SDK transport."""

    def __init__(self, app: ASGIApp) -> None:
        super().__init__()
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


def session_key(request: Optional[Request]) -> Optional[str]:
    """Transport session id of the HTTP request that carried a tool call."""
    if request is None:
        return None
    return request.headers.get(MCP_SESSION_HEADER) or request.query_params.get("session_id")


def build_mcp_server(binding: VendorBinding) -> Server:
    """Low-level SDK server exposing the vendor's tool table."""
    connector = binding.connector
    server: Server = Server(
        f"{connector.display_name} Service",
        version=SERVER_VERSION,
        instructions=binding.instructions,
    )

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [types.Tool.model_validate(entry) for entry in binding.bridge.registry.catalog()]

    # Arguments are validated by the bridge so failures come back in our envelope.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        request = server.request_context.request
        headers = request.headers if request is not None else {}
        credential = credential_from_headers(
            headers.get("authorization"),
            headers.get(connector.refresh_token_header),
        )
        session = await binding.sessions.resolve(session_key(request), credential)
        return await binding.bridge.invoke(name, arguments, binding.executor_for(session))

    return server


class VendorMcp:
    """One vendor's SDK server together with the transports that carry it."""

    def __init__(self, binding: VendorBinding) -> None:
        self.binding = binding
        self.server = build_mcp_server(binding)
        self.session_manager = StreamableHTTPSessionManager(app=self.server, json_response=True)
        self.sse = SseServerTransport(f"/{binding.provider}/sse/message/")

    def run(self) -> AsyncContextManager[None]:
        """Keeps streamable HTTP sessions alive; enter once per app lifetime."""
        return self.session_manager.run()

    async def _serve_sse(self, scope: Scope, receive: Receive, send: Send) -> None:
        async with self.sse.connect_sse(scope, receive, send) as (read_stream, write_stream):
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )

    def router(self) -> APIRouter:
        binding = self.binding
        require_credential = inbound_credential(binding.connector.refresh_token_header)
        router = APIRouter(
            tags=[f"{binding.provider}-mcp"],
            dependencies=[Depends(require_credential)],
        )

        @router.api_route("/mcp", methods=["GET", "POST", "DELETE"])
        async def streamable_http(request: Request) -> Response:
            if request.method == "DELETE":
                session_id = request.headers.get(MCP_SESSION_HEADER)
                if session_id and binding.sessions.drop(session_id):
                    logger.info("%s session %s closed", binding.provider, session_id)
            return ASGIPassthrough(self.session_manager.handle_request)

        @router.get("/sse")
        async def sse_stream() -> Response:
            return ASGIPassthrough(self._serve_sse)

        @router.post("/sse/message/")
        async def sse_message() -> Response:
            return ASGIPassthrough(self.sse.handle_post_message)

        return router
