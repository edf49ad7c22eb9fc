"""
PaginatedFetcher — follow a vendor "next page" link into one ordered list.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel

from connectors.executor import AuthenticatedRequestExecutor
from utils.errors import ValidationError
from utils.schemas import parse_resource

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class PaginatedFetcher:
    """
    Eagerly walks a cursor-paginated collection.

    Rows are validated page by page and kept in response order; page
    boundaries and ordering are the vendor's, with no deduplication.
    """

    def __init__(
        self,
        executor: AuthenticatedRequestExecutor,
        *,
        rows_field: str = "value",
        next_link_field: str = "@odata.nextLink",
    ) -> None:
        self.executor = executor
        self.rows_field = rows_field
        self.next_link_field = next_link_field

    async def fetch_all(self, initial_url: str, row_model: Type[T]) -> List[T]:
        rows: List[T] = []
        url: Optional[str] = initial_url
        pages = 0

        while url:
            page = await self.executor.execute_json("GET", url)
            if not isinstance(page, dict) or not isinstance(page.get(self.rows_field), list):
                raise ValidationError(
                    f"Page {pages + 1} has no '{self.rows_field}' list"
                )
            rows.extend(parse_resource(row_model, raw) for raw in page[self.rows_field])
            pages += 1
            url = page.get(self.next_link_field) or None

        logger.debug("Fetched %d rows across %d pages from %s", len(rows), pages, initial_url)
        return rows
