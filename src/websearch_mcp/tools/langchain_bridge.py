from __future__ import annotations

from typing import Any

from langchain_core.tools import StructuredTool

from websearch_mcp.tools.registry import ToolRegistry
from websearch_mcp.tools.tool_models import Tool


def to_structured_tool(tool: Tool) -> StructuredTool:
    """Wrap a registered tool so a LangChain/LangGraph agent can bind it."""

    async def _arun(**kwargs: Any) -> str:
        # LangChain forwards only the keys the model supplied; re-validate to fill defaults.
        validated = tool.args_schema.model_validate(kwargs)
        result = await tool.handler(**validated.model_dump())
        return result.text

    return StructuredTool.from_function(
        name=tool.name,
        description=tool.description,
        coroutine=_arun,
        args_schema=tool.args_schema,
    )


def to_structured_tools(registry: ToolRegistry) -> list[StructuredTool]:
    return [to_structured_tool(tool) for tool in registry.get_all_tools()]
