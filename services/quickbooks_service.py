"""
QuickBooksService — company info and paged entity queries against the
QuickBooks Online accounting API.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from config.settings import config
from connectors.executor import AuthenticatedRequestExecutor
from utils.schemas import (
    TABLE_DEFAULT_SORT,
    CompanyInfo,
    CompanyInfoResponse,
    QueryPage,
    parse_query_response,
    parse_resource,
)

logger = logging.getLogger(__name__)


def build_query(table: str, page: int, page_size: int) -> str:
    """
    QuickBooks SQL-ish query for one zero-based page of *table*.

    ``STARTPOSITION`` is one-based on the QuickBooks side.
    """
    start = page * page_size + 1
    return (
        f"SELECT * FROM {table} ORDERBY {TABLE_DEFAULT_SORT[table]} "
        f"STARTPOSITION {start} MAXRESULTS {page_size}"
    )


class QuickBooksService:
    def __init__(
        self,
        executor: AuthenticatedRequestExecutor,
        company_id: Optional[str] = None,
        base_url: Optional[str] = None,
        minor_version: Optional[int] = None,
    ) -> None:
        self.executor = executor
        self.company_id = company_id or config.quickbooks_account_id
        self.base_url = base_url or config.quickbooks_api_base()
        self.minor_version = minor_version or config.quickbooks_minor_version

    @property
    def company_url(self) -> str:
        return f"{self.base_url}/company/{self.company_id}"

    async def get_company_info(self) -> CompanyInfo:
        raw = await self.executor.execute_json(
            "GET",
            f"{self.company_url}/companyinfo/{self.company_id}",
            params={"minorversion": self.minor_version},
        )
        return parse_resource(CompanyInfoResponse, raw).company_info

    async def query_table(self, table: str, page: int = 0, page_size: int = 10) -> QueryPage:
        query = build_query(table, page, page_size)
        logger.debug("QuickBooks query: %s", query)
        raw = await self.executor.execute_json(
            "GET",
            f"{self.company_url}/query",
            params={"query": query, "minorversion": self.minor_version},
        )
        return parse_query_response(table, raw)

    async def get_invoices(self, page: int = 0, page_size: int = 10) -> List[Any]:
        return (await self.query_table("Invoice", page, page_size)).rows

    async def get_customers(self, page: int = 0, page_size: int = 10) -> List[Any]:
        return (await self.query_table("Customer", page, page_size)).rows

    async def get_items(self, page: int = 0, page_size: int = 10) -> List[Any]:
        return (await self.query_table("Item", page, page_size)).rows

    async def get_payments(self, page: int = 0, page_size: int = 10) -> List[Any]:
        return (await self.query_table("Payment", page, page_size)).rows

    async def get_purchases(self, page: int = 0, page_size: int = 10) -> List[Any]:
        return (await self.query_table("Purchase", page, page_size)).rows

    async def get_vendors(self, page: int = 0, page_size: int = 10) -> List[Any]:
        return (await self.query_table("Vendor", page, page_size)).rows
