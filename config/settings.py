"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── QuickBooks (Intuit) OAuth2 ───────────────────────────────────────
    quickbooks_client_id: str = ""
    quickbooks_client_secret: str = ""
    quickbooks_account_id: str = ""             # company "realm" id
    quickbooks_environment: str = "production"  # "production" | "sandbox"
    quickbooks_minor_version: int = 75

    # ── Microsoft Graph OAuth2 ───────────────────────────────────────────
    microsoft_client_id: str = ""
    microsoft_client_secret: Optional[str] = None  # public clients omit it
    microsoft_tenant_id: str = "common"

    # ── Upstream calls ───────────────────────────────────────────────────
    upstream_timeout_seconds: float = 30.0
    session_ttl_seconds: int = 3600

    # ── Server ───────────────────────────────────────────────────────────
    public_base_url: str = ""   # issuer override, e.g. https://mcp.example.com
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    def quickbooks_api_base(self) -> str:
        """Accounting API root for the configured Intuit environment."""
        if self.quickbooks_environment == "sandbox":
            return "https://sandbox-quickbooks.api.intuit.com/v3"
        return "https://quickbooks.api.intuit.com/v3"


config = Settings()
