"""
ToolBridge — validated, authenticated tool dispatch.

Per invocation:
    Received → Validated → Authenticated-Call
             → {Success | Refresh-Retry → Success | Refresh-Retry → Failed}
             → Enveloped

The caller always gets an MCP ``CallToolResult``; handler failures never
escape as exceptions.  Only an unknown tool name raises
(``ToolNotFoundError``).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional

import mcp.types as types
from pydantic import BaseModel

from connectors.executor import AuthenticatedRequestExecutor
from tools.registry import ToolRegistry
from utils.errors import OAuthError, UpstreamAPIError, ValidationError
from utils.schemas import parse_resource

logger = logging.getLogger(__name__)


def to_jsonable(data: Any) -> Any:
    """Dump validated models by their wire aliases, recursively."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_unset=True)
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {k: to_jsonable(v) for k, v in data.items()}
    return data


def format_response(description: str, data: Any) -> types.CallToolResult:
    text = f"Success! {description}\n\nResult:\n{json.dumps(to_jsonable(data), indent=2)}"
    return types.CallToolResult(content=[types.TextContent(type="text", text=text)])


def format_error(description: str, detail: Any = None) -> types.CallToolResult:
    text = f"Error! {description}"
    if detail is not None:
        text = f"{text}\n\nDetails:\n{json.dumps(to_jsonable(detail), indent=2, default=str)}"
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)], isError=True
    )


class ToolBridge:
    """Dispatches tool calls for one vendor."""

    def __init__(
        self,
        registry: ToolRegistry,
        service_factory: Callable[[AuthenticatedRequestExecutor], Any],
    ) -> None:
        self.registry = registry
        self.service_factory = service_factory

    async def invoke(
        self,
        name: str,
        raw_args: Optional[Mapping[str, Any]],
        executor: AuthenticatedRequestExecutor,
    ) -> types.CallToolResult:
        definition = self.registry.get(name)

        try:
            params = parse_resource(definition.params_model, raw_args if raw_args is not None else {})
        except ValidationError as exc:
            logger.info("Rejected arguments for %s: %d error(s)", name, len(exc.errors))
            return format_error(
                f"Invalid arguments for {name}",
                [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg")}
                    for e in exc.errors
                ],
            )

        try:
            service = self.service_factory(executor)
            data = await definition.handler(service, params)
        except OAuthError as exc:
            logger.warning("%s failed: token refresh rejected (%d)", name, exc.status)
            return format_error(f"{name} failed: {exc}", exc.body)
        except UpstreamAPIError as exc:
            logger.warning("%s failed: %s", name, exc)
            return format_error(
                f"{name} failed: {exc}",
                {"status": exc.status, "statusText": exc.status_text},
            )
        except ValidationError as exc:
            logger.warning("%s failed: upstream payload invalid: %s", name, exc)
            return format_error(f"{name} failed: upstream response did not match the expected shape")
        except Exception as exc:
            logger.exception("%s failed unexpectedly", name)
            return format_error(f"{name} failed: {type(exc).__name__}: {exc}")

        return format_response(definition.summary, data)
