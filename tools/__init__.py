"""
@tool decorator — marks a function as a tool and declares its wire name,
parameter schema and the vendor it belongs to.

Usage:
    from tools import tool

    @tool(
        "quickbooks",
        name="getInvoices",
        description="Get QuickBooks invoices, newest due date first",
        params=PageParams,
        summary="Invoices retrieved",
    )
    async def get_invoices(service: QuickBooksService, params: PageParams):
        ...
"""

from __future__ import annotations

from typing import Callable, Optional, Type

from pydantic import BaseModel

from utils.schemas import NoParams


def tool(
    provider: str,
    *,
    name: str,
    description: str,
    params: Type[BaseModel] = NoParams,
    summary: Optional[str] = None,
) -> Callable:
    """
    Decorator that tags a coroutine function as a registered tool.

    Parameters
    ----------
    provider : vendor slug whose registry picks this tool up.
    name : tool name exposed to the calling agent.
    description : tool description exposed to the calling agent.
    params : pydantic model that arguments are validated against before
        the handler runs.
    summary : success line for the result envelope (defaults to ``name``).
    """

    def decorator(func: Callable) -> Callable:
        func.is_tool = True  # type: ignore[attr-defined]
        func.provider = provider  # type: ignore[attr-defined]
        func.tool_name = name  # type: ignore[attr-defined]
        func.description = description  # type: ignore[attr-defined]
        func.params_model = params  # type: ignore[attr-defined]
        func.summary = summary or name  # type: ignore[attr-defined]
        return func

    return decorator
