"""
Registered OAuth clients (dynamic client registration bookkeeping).

The store is an injected capability; the in-memory implementation suits a
single-process deployment.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field


class RegisteredClient(BaseModel):
    client_id: str
    client_name: str = "MCP Client"
    redirect_uris: List[str] = Field(default_factory=list)
    grant_types: List[str] = Field(
        default_factory=lambda: ["authorization_code", "refresh_token"]
    )
    response_types: List[str] = Field(default_factory=lambda: ["code"])
    scope: Optional[str] = None
    token_endpoint_auth_method: str = "none"
    created_at: int


class ClientStore(Protocol):
    def put(self, client_id: str, record: RegisteredClient) -> None:
        ...

    def get(self, client_id: str) -> Optional[RegisteredClient]:
        ...


class InMemoryClientStore:
    def __init__(self) -> None:
        self._clients: Dict[str, RegisteredClient] = {}

    def put(self, client_id: str, record: RegisteredClient) -> None:
        self._clients[client_id] = record

    def get(self, client_id: str) -> Optional[RegisteredClient]:
        return self._clients.get(client_id)
