"""
Token manager — per-session credentials with a single-flight refresh.

A ``CredentialSession`` owns exactly one Credential.  Every refresh goes
through its lock, so concurrent invocations that hit a 401 at the same
moment cause one token-endpoint call, not one each.

The caller keeps presenting the bearer it last obtained.  While that
bearer is unchanged the session's (possibly refreshed) Credential is
used; a different bearer means the caller re-authenticated, and its
Credential replaces the held one.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Callable, Dict, Optional

from connectors.base import BaseConnector
from connectors.models import Credential
from utils.errors import UpstreamAPIError

logger = logging.getLogger(__name__)


class CredentialSession:
    """One agent session's Credential plus the guard around its mutation."""

    def __init__(self, credential: Credential, session_id: Optional[str] = None) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.credential = credential
        # Bearer the caller last presented; not updated by our own refreshes.
        self.inbound_access_token = credential.access_token
        self.last_used = time.monotonic()
        self._lock = asyncio.Lock()

    async def adopt(self, inbound: Credential) -> bool:
        """
        Replace the held Credential with *inbound* if the caller now
        presents a different bearer.  Returns True when replaced.
        """
        async with self._lock:
            if inbound.access_token == self.inbound_access_token:
                return False
            self.credential = inbound.model_copy()
            self.inbound_access_token = inbound.access_token
            logger.info("Session %s adopted the caller's new credential", self.session_id)
            return True

    async def refresh(self, stale_access_token: str, connector: BaseConnector) -> str:
        """
        Replace a rejected access token and return the one to retry with.

        If another invocation already swapped out *stale_access_token*
        while we waited on the lock, its result is reused.
        """
        async with self._lock:
            if self.credential.access_token != stale_access_token:
                logger.debug(
                    "Session %s already refreshed by a concurrent call", self.session_id
                )
                return self.credential.access_token

            if not self.credential.refresh_token:
                raise UpstreamAPIError(
                    401,
                    "Unauthorized",
                    "access token rejected and no refresh token available",
                    provider=connector.display_name,
                )

            refreshed = await connector.refresh_access_token(self.credential.refresh_token)
            self.credential.update_from(refreshed)
            logger.info("Refreshed %s token for session %s", connector.provider_name, self.session_id)
            return self.credential.access_token


class SessionRegistry:
    """
    In-memory map of session id → CredentialSession.

    Credentials live only as long as their session; nothing is persisted.
    Sessions idle for longer than ``ttl_seconds`` are forgotten.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: Dict[str, CredentialSession] = {}

    def _expired(self, session: CredentialSession) -> bool:
        return self._clock() - session.last_used > self.ttl_seconds

    def create(self, credential: Credential, session_id: Optional[str] = None) -> CredentialSession:
        self.prune()
        session = CredentialSession(credential, session_id=session_id)
        session.last_used = self._clock()
        self._sessions[session.session_id] = session
        logger.debug("Session %s opened (%d active)", session.session_id, len(self))
        return session

    def get(self, session_id: str) -> Optional[CredentialSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._expired(session):
            del self._sessions[session_id]
            logger.info("Session %s expired after %ds idle", session_id, self.ttl_seconds)
            return None
        session.last_used = self._clock()
        return session

    async def resolve(self, session_id: Optional[str], credential: Credential) -> CredentialSession:
        """
        Session for one tool call.

        Without a session id the call gets an ephemeral session seeded from
        *credential*.  A new (or expired) id is opened with *credential*; a
        held session adopts *credential* when the caller's bearer changed.
        """
        if not session_id:
            return CredentialSession(credential)
        session = self.get(session_id)
        if session is None:
            return self.create(credential, session_id=session_id)
        await session.adopt(credential)
        return session

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def prune(self) -> int:
        """Forget sessions idle for longer than the TTL."""
        stale = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.info("Pruned %d idle sessions", len(stale))
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)
