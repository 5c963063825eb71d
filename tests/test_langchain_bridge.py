"""Tests for exposing registry tools as LangChain StructuredTools."""

import json

import pytest

from websearch_mcp.tools.langchain_bridge import to_structured_tool, to_structured_tools
from websearch_mcp.tools.registry import build_registry


@pytest.fixture
def registry(context):
    return build_registry(context)


def test_one_structured_tool_per_registered_tool(registry):
    tools = to_structured_tools(registry)
    assert [t.name for t in tools] == registry.tool_names()


def test_schema_is_carried_over(registry):
    structured = to_structured_tool(registry.get_tool("get_links"))
    assert "query" in structured.args
    assert structured.description == registry.get_tool("get_links").description


@pytest.mark.asyncio
async def test_ainvoke_fills_defaults(registry):
    structured = to_structured_tool(registry.get_tool("mock_news"))
    output = await structured.ainvoke({"category": "technology"})
    payload = json.loads(output)
    assert payload["category_filter"] == "technology"
    assert payload["total_results"] == 1
