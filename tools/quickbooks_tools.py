"""
QuickBooks tools — company info and paged entity listings.

Every listing takes a zero-based ``page`` and a ``pageSize`` and returns
the rows in the table's default sort order (invoices: due date, newest
first).
"""

from __future__ import annotations

from typing import Any, List

from services.quickbooks_service import QuickBooksService
from tools import tool
from utils.schemas import CompanyInfo, NoParams, PageParams


@tool(
    "quickbooks",
    name="getCompanyInfo",
    description="Get QuickBooks company information",
    params=NoParams,
    summary="Company info retrieved",
)
async def get_company_info(service: QuickBooksService, params: NoParams) -> CompanyInfo:
    return await service.get_company_info()


@tool(
    "quickbooks",
    name="getInvoices",
    description="Get a page of QuickBooks invoices, sorted by due date (newest first)",
    params=PageParams,
    summary="Invoices retrieved",
)
async def get_invoices(service: QuickBooksService, params: PageParams) -> List[Any]:
    return await service.get_invoices(params.page, params.page_size)


@tool(
    "quickbooks",
    name="getCustomers",
    description="Get a page of QuickBooks customers, sorted by display name",
    params=PageParams,
    summary="Customers retrieved",
)
async def get_customers(service: QuickBooksService, params: PageParams) -> List[Any]:
    return await service.get_customers(params.page, params.page_size)


@tool(
    "quickbooks",
    name="getItems",
    description="Get a page of QuickBooks products and services, sorted by name",
    params=PageParams,
    summary="Items retrieved",
)
async def get_items(service: QuickBooksService, params: PageParams) -> List[Any]:
    return await service.get_items(params.page, params.page_size)


@tool(
    "quickbooks",
    name="getPayments",
    description="Get a page of QuickBooks customer payments, most recent first",
    params=PageParams,
    summary="Payments retrieved",
)
async def get_payments(service: QuickBooksService, params: PageParams) -> List[Any]:
    return await service.get_payments(params.page, params.page_size)


@tool(
    "quickbooks",
    name="getPurchases",
    description="Get a page of QuickBooks purchases (expenses), most recent first",
    params=PageParams,
    summary="Purchases retrieved",
)
async def get_purchases(service: QuickBooksService, params: PageParams) -> List[Any]:
    return await service.get_purchases(params.page, params.page_size)


@tool(
    "quickbooks",
    name="getVendors",
    description="Get a page of QuickBooks vendors, sorted by display name",
    params=PageParams,
    summary="Vendors retrieved",
)
async def get_vendors(service: QuickBooksService, params: PageParams) -> List[Any]:
    return await service.get_vendors(params.page, params.page_size)
