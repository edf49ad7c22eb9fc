"""
Tests for PaginatedFetcher — nextLink following into one ordered list.
"""

import httpx
import pytest
from pydantic import BaseModel
from unittest.mock import MagicMock

from connectors.executor import AuthenticatedRequestExecutor
from connectors.models import Credential
from connectors.pagination import PaginatedFetcher
from connectors.token_manager import CredentialSession
from utils.errors import ValidationError

_BASE = "https://graph.test/v1.0/me/calendarView"


class Row(BaseModel):
    id: str


def _fetcher(pages):
    """Fetcher over a transport that serves *pages* keyed by URL."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=pages[str(request.url)])

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    connector = MagicMock()
    connector.display_name = "Graph"
    session = CredentialSession(Credential(access_token="at", refresh_token="rt"))
    executor = AuthenticatedRequestExecutor(client, connector, session)
    return PaginatedFetcher(executor), seen


class TestPaginatedFetcher:
    @pytest.mark.asyncio
    async def test_three_pages_concatenate_in_order(self):
        pages = {
            f"{_BASE}?p=1": {"value": [{"id": "a"}, {"id": "b"}], "@odata.nextLink": f"{_BASE}?p=2"},
            f"{_BASE}?p=2": {"value": [{"id": "c"}], "@odata.nextLink": f"{_BASE}?p=3"},
            f"{_BASE}?p=3": {"value": [{"id": "d"}, {"id": "e"}]},
        }
        fetcher, seen = _fetcher(pages)

        rows = await fetcher.fetch_all(f"{_BASE}?p=1", Row)

        assert [r.id for r in rows] == ["a", "b", "c", "d", "e"]
        assert seen == [f"{_BASE}?p=1", f"{_BASE}?p=2", f"{_BASE}?p=3"]

    @pytest.mark.asyncio
    async def test_duplicates_across_pages_are_kept(self):
        pages = {
            f"{_BASE}?p=1": {"value": [{"id": "a"}], "@odata.nextLink": f"{_BASE}?p=2"},
            f"{_BASE}?p=2": {"value": [{"id": "a"}]},
        }
        fetcher, _ = _fetcher(pages)

        rows = await fetcher.fetch_all(f"{_BASE}?p=1", Row)

        assert [r.id for r in rows] == ["a", "a"]

    @pytest.mark.asyncio
    async def test_empty_single_page(self):
        fetcher, seen = _fetcher({f"{_BASE}?p=1": {"value": []}})

        assert await fetcher.fetch_all(f"{_BASE}?p=1", Row) == []
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_page_without_rows_field_fails(self):
        fetcher, _ = _fetcher({f"{_BASE}?p=1": {"items": []}})

        with pytest.raises(ValidationError):
            await fetcher.fetch_all(f"{_BASE}?p=1", Row)

    @pytest.mark.asyncio
    async def test_invalid_row_fails_the_whole_fetch(self):
        pages = {
            f"{_BASE}?p=1": {"value": [{"id": "a"}], "@odata.nextLink": f"{_BASE}?p=2"},
            f"{_BASE}?p=2": {"value": [{"name": "no id"}]},
        }
        fetcher, _ = _fetcher(pages)

        with pytest.raises(ValidationError):
            await fetcher.fetch_all(f"{_BASE}?p=1", Row)
