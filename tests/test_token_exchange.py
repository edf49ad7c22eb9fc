"""
Tests for the vendor token-exchange strategies (QuickBooks / Microsoft).
"""

import base64
from urllib.parse import parse_qs

import httpx
import pytest

from connectors.microsoft import MicrosoftConnector
from connectors.quickbooks import QuickBooksConnector
from utils.errors import OAuthError


def _recording_client(*responses):
    """AsyncClient that replays *responses* in order and records requests."""
    requests = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return queue.pop(0)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


def _form(request: httpx.Request) -> dict:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


_TOKENS = {
    "access_token": "at-1",
    "token_type": "bearer",
    "expires_in": 3600,
    "refresh_token": "rt-1",
    "x_refresh_token_expires_in": 8726400,
}


class TestQuickBooksConnector:
    @pytest.mark.asyncio
    async def test_code_exchange_uses_basic_auth(self):
        client, requests = _recording_client(httpx.Response(200, json=_TOKENS))
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        credential = await connector.exchange_authorization_code(
            "auth-code", "https://agent.example/cb", code_verifier="verifier-123"
        )

        req = requests[0]
        assert str(req.url) == "https://oauth.platform.intuit.com/oauth2/v1/tokens/bearer"
        expected = base64.b64encode(b"cid:secret").decode()
        assert req.headers["Authorization"] == f"Basic {expected}"
        form = _form(req)
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "auth-code"
        assert form["redirect_uri"] == "https://agent.example/cb"
        assert form["code_verifier"] == "verifier-123"
        assert form["scope"] == "com.intuit.quickbooks.accounting"
        assert "client_id" not in form and "client_secret" not in form

        assert credential.access_token == "at-1"
        assert credential.refresh_token == "rt-1"
        assert credential.expires_at is not None
        assert credential.token_response == _TOKENS

    @pytest.mark.asyncio
    async def test_absent_code_verifier_is_not_invented(self):
        client, requests = _recording_client(httpx.Response(200, json=_TOKENS))
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        await connector.exchange_authorization_code("auth-code", "https://agent.example/cb")

        assert "code_verifier" not in _form(requests[0])

    @pytest.mark.asyncio
    async def test_refresh_keeps_old_refresh_token_when_not_rotated(self):
        client, requests = _recording_client(
            httpx.Response(200, json={"access_token": "at-2", "token_type": "bearer", "expires_in": 3600})
        )
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        credential = await connector.refresh_access_token("rt-old")

        form = _form(requests[0])
        assert form["grant_type"] == "refresh_token"
        assert form["refresh_token"] == "rt-old"
        assert credential.access_token == "at-2"
        assert credential.refresh_token == "rt-old"

    @pytest.mark.asyncio
    async def test_refresh_adopts_rotated_refresh_token(self):
        client, _ = _recording_client(
            httpx.Response(200, json={"access_token": "at-2", "refresh_token": "rt-new", "expires_in": 3600})
        )
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        credential = await connector.refresh_access_token("rt-old")

        assert credential.refresh_token == "rt-new"

    def test_requires_secret_to_be_configured(self):
        connector = QuickBooksConnector(httpx.AsyncClient(), client_id="cid", client_secret="")
        assert connector.is_configured() is False


class TestMicrosoftConnector:
    @pytest.mark.asyncio
    async def test_code_exchange_targets_tenant_with_form_credentials(self):
        client, requests = _recording_client(httpx.Response(200, json=_TOKENS))
        connector = MicrosoftConnector(client, client_id="ms-id", client_secret="ms-secret", tenant_id="contoso")

        await connector.exchange_authorization_code("code", "https://agent.example/cb", code_verifier="v")

        req = requests[0]
        assert str(req.url) == "https://login.microsoftonline.com/contoso/oauth2/v2.0/token"
        assert "Authorization" not in req.headers
        form = _form(req)
        assert form["client_id"] == "ms-id"
        assert form["client_secret"] == "ms-secret"
        assert form["code_verifier"] == "v"
        assert "offline_access" in form["scope"].split()

    @pytest.mark.asyncio
    async def test_public_client_sends_no_secret(self):
        client, requests = _recording_client(httpx.Response(200, json=_TOKENS))
        connector = MicrosoftConnector(client, client_id="ms-id", client_secret="", tenant_id="contoso")

        await connector.refresh_access_token("rt")

        form = _form(requests[0])
        assert form["client_id"] == "ms-id"
        assert "client_secret" not in form

    def test_discovery_advertises_s256_only(self):
        connector = MicrosoftConnector(httpx.AsyncClient(), client_id="ms-id", tenant_id="contoso")
        meta = connector.discovery_metadata("https://broker.example/microsoft")
        assert meta["code_challenge_methods_supported"] == ["S256"]
        assert meta["token_endpoint"] == "https://broker.example/microsoft/token"
        assert meta["token_endpoint_auth_methods_supported"] == ["none"]


class TestOAuthErrors:
    @pytest.mark.asyncio
    async def test_vendor_error_body_and_status_pass_through(self):
        body = {"error": "invalid_grant", "error_description": "Token expired"}
        client, _ = _recording_client(httpx.Response(401, json=body))
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        with pytest.raises(OAuthError) as excinfo:
            await connector.refresh_access_token("rt")

        assert excinfo.value.status == 401
        assert excinfo.value.body == body
        assert excinfo.value.grant_type == "refresh_token"

    @pytest.mark.asyncio
    async def test_unlisted_status_is_reported_as_400(self):
        client, _ = _recording_client(httpx.Response(418, json={"error": "teapot"}))
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        with pytest.raises(OAuthError) as excinfo:
            await connector.exchange_authorization_code("c", "https://agent.example/cb")

        assert excinfo.value.status == 400
        assert excinfo.value.body == {"error": "teapot"}

    @pytest.mark.asyncio
    async def test_listed_status_is_kept(self):
        client, _ = _recording_client(httpx.Response(429, json={"error": "slow_down"}))
        connector = MicrosoftConnector(client, client_id="ms-id", tenant_id="common")

        with pytest.raises(OAuthError) as excinfo:
            await connector.refresh_access_token("rt")

        assert excinfo.value.status == 429

    @pytest.mark.asyncio
    async def test_plain_text_error_is_wrapped(self):
        client, _ = _recording_client(httpx.Response(502, text="upstream exploded"))
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        with pytest.raises(OAuthError) as excinfo:
            await connector.refresh_access_token("rt")

        assert excinfo.value.status == 502
        assert excinfo.value.body == {
            "error": "invalid_request",
            "error_description": "upstream exploded",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"error": "weird"}),
            httpx.Response(200, text="<html>ok</html>"),
            httpx.Response(200, json=["at-1"]),
        ],
    )
    async def test_success_status_without_access_token_is_an_oauth_error(self, response):
        client, _ = _recording_client(response)
        connector = QuickBooksConnector(client, client_id="cid", client_secret="secret")

        with pytest.raises(OAuthError) as excinfo:
            await connector.refresh_access_token("rt")

        assert excinfo.value.status == 502
        assert excinfo.value.body["error"] == "invalid_response"
