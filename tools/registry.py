"""
ToolRegistry — the per-vendor table of tool name → schema + handler.

Built once at startup by scanning ``tools/*_tools.py`` for ``@tool``
functions of one provider, then sealed.  Names must be unique.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pathlib
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_TOOLS_DIR = pathlib.Path(__file__).resolve().parent


class ToolNotFoundError(ValueError):
    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' not found in registry")


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    params_model: Type[BaseModel]
    handler: Callable[[Any, Any], Awaitable[Any]]
    summary: str

    def input_schema(self) -> Dict[str, Any]:
        return self.params_model.model_json_schema(by_alias=True)


class ToolRegistry:
    """Maps tool-name → ToolDefinition for a single vendor."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        self._tools: Dict[str, ToolDefinition] = {}
        self._sealed = False

    def register(
        self,
        name: str,
        description: str,
        params_model: Type[BaseModel],
        handler: Callable[[Any, Any], Awaitable[Any]],
        summary: Optional[str] = None,
    ) -> ToolDefinition:
        if self._sealed:
            raise RuntimeError(
                f"Tool registry for '{self.provider}' is sealed; cannot add '{name}'"
            )
        if name in self._tools:
            raise ValueError(f"Duplicate tool name '{name}' for provider '{self.provider}'")
        definition = ToolDefinition(
            name=name,
            description=description,
            params_model=params_model,
            handler=handler,
            summary=summary or name,
        )
        self._tools[name] = definition
        return definition

    def seal(self) -> None:
        self._sealed = True

    def get(self, tool_name: str) -> ToolDefinition:
        """
        Return the definition for *tool_name*.

        Raises
        ------
        ToolNotFoundError – tool not registered for this provider
        """
        if tool_name not in self._tools:
            raise ToolNotFoundError(tool_name)
        return self._tools[tool_name]

    def has_tool(self, tool_name: str) -> bool:
        return tool_name in self._tools

    def list_tools(self) -> List[str]:
        return list(self._tools.keys())

    def catalog(self) -> List[Dict[str, Any]]:
        """Tool descriptors in ``tools/list`` shape."""
        return [
            {
                "name": d.name,
                "description": d.description,
                "inputSchema": d.input_schema(),
            }
            for d in self._tools.values()
        ]

    # ── auto-discovery ──────────────────────────────────────────────────

    def auto_discover_tools(self, tools_dir: pathlib.Path = _TOOLS_DIR) -> None:
        """
        Scan ``tools/*_tools.py`` for ``@tool`` functions of this provider,
        register them in source order, and seal the registry.
        """
        tool_files = sorted(tools_dir.glob("*_tools.py"))

        if not tool_files:
            raise RuntimeError(f"No *_tools.py files found in {tools_dir}")

        for tool_file in tool_files:
            relative = tool_file.relative_to(tools_dir.parent)
            module_name = ".".join(relative.with_suffix("").parts)
            try:
                module = importlib.import_module(module_name)
            except ImportError as exc:
                raise RuntimeError(
                    f"Failed to load tools from {tool_file.name}: {exc}"
                ) from exc

            functions = [
                obj
                for _, obj in inspect.getmembers(module, inspect.isfunction)
                if getattr(obj, "is_tool", False) and getattr(obj, "provider", None) == self.provider
            ]
            functions.sort(key=lambda fn: fn.__code__.co_firstlineno)
            for fn in functions:
                self.register(
                    name=fn.tool_name,
                    description=fn.description,
                    params_model=fn.params_model,
                    handler=fn,
                    summary=fn.summary,
                )

        self.seal()
        logger.info(
            "Registered %d %s tools from %d files",
            len(self._tools),
            self.provider,
            len(tool_files),
        )
