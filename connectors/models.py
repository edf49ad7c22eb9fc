"""
Credential — the access/refresh token pair owned by one agent session.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Credential(BaseModel):
    access_token: str
    refresh_token: str = ""
    expires_at: Optional[datetime] = None
    scope: Optional[str] = None
    token_type: str = "Bearer"

    # Verbatim vendor token response, relayed unchanged by the /token route.
    token_response: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_token_response(
        cls,
        data: Dict[str, Any],
        *,
        previous_refresh_token: str = "",
    ) -> "Credential":
        """
        Build a Credential from a vendor token response.

        The refresh token only rotates when the vendor returns a new one;
        otherwise *previous_refresh_token* stays in force.
        """
        expires_at = None
        if data.get("expires_in") is not None:
            expires_at = datetime.now(timezone.utc) + timedelta(
                seconds=int(data["expires_in"])
            )
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or previous_refresh_token,
            expires_at=expires_at,
            scope=data.get("scope"),
            token_type=data.get("token_type") or "Bearer",
            token_response=dict(data),
        )

    def update_from(self, refreshed: "Credential") -> None:
        """Apply a successful refresh in place."""
        self.access_token = refreshed.access_token
        if refreshed.refresh_token:
            self.refresh_token = refreshed.refresh_token
        self.expires_at = refreshed.expires_at
        if refreshed.scope:
            self.scope = refreshed.scope
        self.token_response = refreshed.token_response
