"""MCP protocol surface over the tool dispatcher.

The low-level ``mcp`` Server is used instead of FastMCP because tool
schemas come from the registry at runtime, not from decorated functions.
"""

from __future__ import annotations

import logging
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from websearch_mcp import __version__
from websearch_mcp.exceptions import ToolInvocationError
from websearch_mcp.tools.dispatch import ToolDispatcher

logger = logging.getLogger(__name__)

SERVER_NAME = "websearch-searxng"
USAGE_RESOURCE_URI = "mcp://websearch"
USAGE_TEXT = (
    "Use the get_links tool to search the web using SearXNG.\n\n"
    "Example usage:\n"
    "- Call get_links with query: 'latest technology trends 2025'\n"
    "- Optional categories parameter: 'general,web', 'news', 'images', etc.\n"
    "- Returns up to 6 search results with titles, URLs, and snippets."
)


def build_mcp_server(dispatcher: ToolDispatcher) -> Server:
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=entry["name"],
                description=entry["description"],
                inputSchema=entry["input_schema"],
            )
            for entry in dispatcher.list_tools()
        ]

    @server.call_tool()
    async def _call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        logger.info("tools/call %s", name)
        result = await dispatcher.invoke(name, arguments)
        if result.is_error:
            # The SDK turns a raised exception into a CallToolResult with isError set.
            raise ToolInvocationError(result.text)
        return [types.TextContent(type="text", text=part.payload) for part in result.content]

    @server.list_resources()
    async def _list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=AnyUrl(USAGE_RESOURCE_URI),
                name="Web Search MCP Server",
                description="How to search the web with get_links",
                mimeType="text/plain",
            )
        ]

    @server.read_resource()
    async def _read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        if str(uri).rstrip("/") != USAGE_RESOURCE_URI:
            raise ValueError(f"Unknown resource: {uri}")
        return [ReadResourceContents(content=USAGE_TEXT, mime_type="text/plain")]

    return server


async def run_stdio(dispatcher: ToolDispatcher) -> None:
    server = build_mcp_server(dispatcher)
    logger.info("%s MCP server running on stdio", SERVER_NAME)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await dispatcher.aclose()
