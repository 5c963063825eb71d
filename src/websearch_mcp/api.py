from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Body, FastAPI, HTTPException
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import RedirectResponse
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.types import Receive, Scope, Send

from websearch_mcp import __version__
from websearch_mcp.config.settings import get_settings
from websearch_mcp.server import build_mcp_server
from websearch_mcp.tools.dispatch import ToolDispatcher
from websearch_mcp.tools.tool_models import ToolResult

logger = logging.getLogger(__name__)


class MCPEndpoint:
    """ASGI endpoint handing /mcp requests to the streamable-HTTP session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager) -> None:
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


def render_result(result: ToolResult) -> dict[str, Any]:
    return {
        "is_error": result.is_error,
        "content": [{"type": part.kind, "text": part.payload} for part in result.content],
    }


def create_app(dispatcher: ToolDispatcher | None = None) -> FastAPI:
    dispatcher = dispatcher or ToolDispatcher.from_settings(get_settings())
    session_manager = StreamableHTTPSessionManager(
        app=build_mcp_server(dispatcher), json_response=True
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        async with session_manager.run():
            logger.info("MCP endpoint ready at /mcp")
            try:
                yield
            finally:
                await dispatcher.aclose()

    app = FastAPI(
        title="Websearch MCP Server",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher
    router = APIRouter(prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root_redirect():
        return RedirectResponse(url="/api/docs")

    @router.get("/docs", include_in_schema=False)
    async def swagger_ui():
        return get_swagger_ui_html(
            openapi_url=app.openapi_url,
            title=app.title + " - Swagger UI",
        )

    @router.get("/health")
    def health_check():
        return {"status": "ok"}

    @router.get("/adapters")
    def list_adapters():
        return [
            {
                "name": adapter.name,
                "description": adapter.description,
                "tools": [tool.name for tool in adapter.tools],
            }
            for adapter in dispatcher.registry.get_all_adapters()
        ]

    @router.get("/tools")
    def list_tools():
        return dispatcher.list_tools()

    @router.post("/tools/{name}/invoke")
    async def invoke_tool(name: str, arguments: dict[str, Any] | None = Body(default=None)):
        if dispatcher.registry.get_tool(name) is None:
            raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")
        result = await dispatcher.invoke(name, arguments)
        return render_result(result)

    app.include_router(router)
    app.add_route(
        "/mcp",
        MCPEndpoint(session_manager),
        methods=["GET", "POST", "DELETE"],
        include_in_schema=False,
    )
    return app
