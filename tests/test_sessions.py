"""
Tests for SessionRegistry — held credentials, caller re-authentication and
idle expiry.
"""

import pytest

from connectors.models import Credential
from connectors.token_manager import SessionRegistry


class _Clock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return _Clock()


class TestResolve:
    @pytest.mark.asyncio
    async def test_without_session_id_is_ephemeral(self):
        registry = SessionRegistry()

        session = await registry.resolve(None, Credential(access_token="at-A"))

        assert session.credential.access_token == "at-A"
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_unknown_id_opens_held_session(self):
        registry = SessionRegistry()

        session = await registry.resolve("s-1", Credential(access_token="at-A", refresh_token="rt-A"))

        assert session.session_id == "s-1"
        assert registry.get("s-1") is session

    @pytest.mark.asyncio
    async def test_same_bearer_keeps_refreshed_credential(self):
        registry = SessionRegistry()
        session = await registry.resolve("s-1", Credential(access_token="at-A", refresh_token="rt-A"))
        session.credential.update_from(Credential(access_token="at-refreshed", refresh_token="rt-2"))

        again = await registry.resolve("s-1", Credential(access_token="at-A", refresh_token="rt-A"))

        assert again is session
        assert again.credential.access_token == "at-refreshed"
        assert again.credential.refresh_token == "rt-2"

    @pytest.mark.asyncio
    async def test_new_bearer_replaces_held_credential(self):
        registry = SessionRegistry()
        session = await registry.resolve("s-1", Credential(access_token="at-A", refresh_token="rt-A"))
        session.credential.update_from(Credential(access_token="at-refreshed", refresh_token="rt-2"))

        again = await registry.resolve("s-1", Credential(access_token="at-B", refresh_token="rt-B"))

        assert again.credential.access_token == "at-B"
        assert again.credential.refresh_token == "rt-B"

    @pytest.mark.asyncio
    async def test_new_bearer_without_refresh_token_does_not_inherit_old_one(self):
        registry = SessionRegistry()
        await registry.resolve("s-1", Credential(access_token="at-A", refresh_token="rt-A"))

        session = await registry.resolve("s-1", Credential(access_token="forged"))

        assert session.credential.access_token == "forged"
        assert session.credential.refresh_token == ""


class TestExpiry:
    @pytest.mark.asyncio
    async def test_idle_session_is_not_returned(self, clock):
        registry = SessionRegistry(ttl_seconds=60, clock=clock)
        await registry.resolve("s-1", Credential(access_token="at-A"))

        clock.now += 61

        assert registry.get("s-1") is None
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_expired_id_is_reopened_with_inbound_credential(self, clock):
        registry = SessionRegistry(ttl_seconds=60, clock=clock)
        old = await registry.resolve("s-1", Credential(access_token="at-A"))
        old.credential.update_from(Credential(access_token="at-refreshed"))

        clock.now += 61
        session = await registry.resolve("s-1", Credential(access_token="at-A"))

        assert session is not old
        assert session.credential.access_token == "at-A"

    @pytest.mark.asyncio
    async def test_use_keeps_session_alive(self, clock):
        registry = SessionRegistry(ttl_seconds=60, clock=clock)
        await registry.resolve("s-1", Credential(access_token="at-A"))

        clock.now += 40
        assert registry.get("s-1") is not None
        clock.now += 40
        assert registry.get("s-1") is not None

    def test_create_prunes_idle_sessions(self, clock):
        registry = SessionRegistry(ttl_seconds=60, clock=clock)
        registry.create(Credential(access_token="at-A"), session_id="old")

        clock.now += 61
        registry.create(Credential(access_token="at-B"), session_id="new")

        assert len(registry) == 1
        assert registry.get("new") is not None

    def test_drop(self):
        registry = SessionRegistry()
        registry.create(Credential(access_token="at-A"), session_id="s-1")

        assert registry.drop("s-1") is True
        assert registry.drop("s-1") is False
