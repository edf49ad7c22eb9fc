"""
Error taxonomy shared by the connectors, the request executor and the
tool bridge.

All four are caught at the tool boundary and rendered as a failure
envelope; ``OAuthError`` is additionally passed through verbatim by the
``/token`` route.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

# Statuses a vendor token-endpoint failure may be reported with.
OAUTH_PASSTHROUGH_STATUSES = frozenset(
    {400, 401, 403, 404, 405, 409, 410, 415, 422, 429, 500, 502, 503, 504}
)


def clamp_oauth_status(status: Optional[int]) -> int:
    """Return *status* if it is on the passthrough allow-list, else 400."""
    if status in OAUTH_PASSTHROUGH_STATUSES:
        return status  # type: ignore[return-value]
    return 400


class OAuthError(Exception):
    """A vendor token endpoint answered non-2xx."""

    def __init__(self, status: Optional[int], body: Any, grant_type: str) -> None:
        self.status = clamp_oauth_status(status)
        self.body: Dict[str, Any] = (
            body if isinstance(body, dict) else {"error": "invalid_request"}
        )
        self.grant_type = grant_type
        super().__init__(
            f"OAuth {grant_type} grant failed ({self.status}): "
            f"{self.body.get('error_description') or self.body.get('error')}"
        )


class UpstreamAPIError(Exception):
    """A resource API call failed after any permitted refresh-retry."""

    def __init__(
        self,
        status: int,
        status_text: str,
        detail: Optional[str] = None,
        *,
        provider: str = "upstream",
    ) -> None:
        self.status = status
        self.status_text = status_text
        self.detail = detail
        self.provider = provider
        message = f"{provider} API error: {status} {status_text}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ValidationError(Exception):
    """Payload or tool-argument shape mismatch; never silently coerced."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class AuthBoundaryError(Exception):
    """Missing or malformed bearer credential at the inbound edge."""

    def __init__(self, message: str = "Missing or invalid access token") -> None:
        self.message = message
        super().__init__(message)
