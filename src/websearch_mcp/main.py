from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from websearch_mcp.config.settings import get_settings
from websearch_mcp.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _print_adapters(dispatcher) -> None:
    for adapter in dispatcher.registry.get_all_adapters():
        tool_names = ", ".join(tool.name for tool in adapter.tools)
        print(f"- {adapter.name}: {adapter.description}")
        print(f"    tools: {tool_names}")


def _print_tools(dispatcher) -> None:
    for entry in dispatcher.list_tools():
        print(f"- {entry['name']}: {entry['description']}")


async def _call_once(dispatcher, name: str, arguments: dict) -> int:
    try:
        result = await dispatcher.invoke(name, arguments)
    finally:
        await dispatcher.aclose()
    print(result.text)
    return 1 if result.is_error else 0


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Serve web API adapters and terminal sessions as MCP tools"
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default=settings.transport,
        help="Protocol transport (default from TRANSPORT)",
    )
    parser.add_argument("--host", default=settings.host, help="Host to bind the HTTP server to")
    parser.add_argument(
        "--port", type=int, default=settings.port, help="Port to run the HTTP server on"
    )
    parser.add_argument("--reload", action="store_true", help="Enable hot reloading")
    parser.add_argument("--list-adapters", action="store_true", help="List registered adapters")
    parser.add_argument("--list-tools", action="store_true", help="List registered tools")
    parser.add_argument("--call", metavar="NAME", help="Invoke one tool and print its result")
    parser.add_argument(
        "--args",
        default="{}",
        help="JSON object of arguments for --call",
    )
    parser.add_argument(
        "--make-adapter", metavar="NAME", help="Scaffold a new adapter module"
    )
    parser.add_argument(
        "--description", help="Adapter description used by --make-adapter"
    )
    args = parser.parse_args()

    setup_logging(settings.log_level)

    if args.make_adapter:
        from websearch_mcp.commands.make_adapter import run_make_adapter

        run_make_adapter(args.make_adapter, description=args.description)
        return

    if args.reload and args.transport != "http":
        parser.error("--reload only applies to the http transport")

    if args.transport == "http" and not (args.list_adapters or args.list_tools or args.call):
        import uvicorn

        logger.info(
            "Starting server on %s:%s (reload=%s)",
            args.host,
            args.port,
            "on" if args.reload else "off",
        )
        # Factory import string so the reloader can rebuild the app in its worker.
        uvicorn.run(
            "websearch_mcp.api:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            reload=args.reload,
        )
        return

    from websearch_mcp.tools.dispatch import ToolDispatcher

    dispatcher = ToolDispatcher.from_settings(settings)

    if args.list_adapters:
        _print_adapters(dispatcher)
        return

    if args.list_tools:
        _print_tools(dispatcher)
        return

    if args.call:
        try:
            arguments = json.loads(args.args)
        except json.JSONDecodeError as exc:
            parser.error(f"--args is not valid JSON: {exc}")
        if not isinstance(arguments, dict):
            parser.error("--args must be a JSON object")
        sys.exit(asyncio.run(_call_once(dispatcher, args.call, arguments)))

    from websearch_mcp.server import run_stdio

    asyncio.run(run_stdio(dispatcher))


if __name__ == "__main__":
    main()
