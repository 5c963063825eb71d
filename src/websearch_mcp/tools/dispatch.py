from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from websearch_mcp.config.settings import Settings
from websearch_mcp.terminal.manager import TerminalSessionManager
from websearch_mcp.tools.registry import ToolRegistry, build_registry
from websearch_mcp.tools.tool_models import AdapterContext, ToolError, ToolResult

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Resolves tool names through the registry and invokes their handlers.

    This is the surface a transport binds to. ``invoke`` never raises: unknown
    names, invalid arguments and handler failures all come back as ToolError.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        terminals: TerminalSessionManager | None = None,
    ) -> None:
        self.registry = registry
        self.terminals = terminals

    @classmethod
    def from_settings(cls, settings: Settings) -> "ToolDispatcher":
        terminals = TerminalSessionManager(
            default_cwd=settings.default_cwd,
            default_shell=settings.default_shell,
        )
        context = AdapterContext(settings=settings, terminals=terminals)
        return cls(build_registry(context), terminals=terminals)

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.input_schema(),
            }
            for tool in self.registry.get_all_tools()
        ]

    async def invoke(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        tool = self.registry.get_tool(name)
        if tool is None:
            return ToolError(
                f"Unknown tool: {name}",
                message="Tool not found",
                details={"available_tools": self.registry.tool_names()},
            )

        try:
            validated = tool.args_schema.model_validate(arguments or {})
        except ValidationError as exc:
            return ToolError(
                f"Invalid arguments for tool {name}",
                message="Argument validation failed",
                details={"validation_errors": exc.errors(include_url=False)},
            )

        try:
            return await tool.handler(**validated.model_dump())
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool %s failed", name)
            return ToolError(str(exc) or type(exc).__name__, message=f"Tool {name} failed")

    async def aclose(self) -> None:
        if self.terminals is not None:
            await self.terminals.shutdown()
