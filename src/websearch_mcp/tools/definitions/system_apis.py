from __future__ import annotations

import asyncio
import logging
import sys

from pydantic import BaseModel, Field, field_validator

from websearch_mcp.tools.tool_factory.web.http_get import is_http_url, utc_timestamp
from websearch_mcp.tools.tool_models import (
    Adapter,
    AdapterContext,
    AdapterSpec,
    Tool,
    ToolError,
    json_result,
)

logger = logging.getLogger(__name__)


def browser_command(url: str, platform: str | None = None) -> list[str]:
    """Argument vector that opens ``url`` in the default browser on ``platform``."""
    platform = platform or sys.platform
    if platform == "darwin":
        return ["open", url]
    if platform == "win32":
        return ["cmd", "/c", "start", "", url]
    if platform.startswith("linux"):
        return ["xdg-open", url]
    raise RuntimeError(f"Unsupported platform: {platform}")


async def launch_url(url: str) -> list[str]:
    """Run the platform opener for ``url``; raises RuntimeError on a non-zero exit."""
    argv = browser_command(url)
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await process.communicate()
    if process.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        raise RuntimeError(detail or f"{argv[0]} exited with code {process.returncode}")
    return argv


def _check_url(url: str) -> str:
    if not is_http_url(url):
        raise ValueError(f"Invalid URL: {url}. Please provide a valid HTTP or HTTPS URL.")
    return url


class OpenUrlInput(BaseModel):
    url: str = Field(description="The URL to open in the browser")
    wait_time: float = Field(
        default=0, ge=0, le=10, description="Wait time in seconds before opening (0-10)"
    )

    @field_validator("url")
    @classmethod
    def _http_only(cls, url: str) -> str:
        return _check_url(url)


class OpenMultipleUrlsInput(BaseModel):
    urls: list[str] = Field(
        min_length=1, max_length=10, description="Array of URLs to open (1-10 URLs)"
    )
    delay_between: float = Field(
        default=1, ge=0, le=5, description="Delay between opening URLs in seconds (0-5)"
    )
    wait_time: float = Field(
        default=0,
        ge=0,
        le=10,
        description="Initial wait time before opening first URL (0-10)",
    )

    @field_validator("urls")
    @classmethod
    def _http_only(cls, urls: list[str]) -> list[str]:
        invalid = [url for url in urls if not is_http_url(url)]
        if invalid:
            raise ValueError(
                f"Invalid URLs found: {', '.join(invalid)}. "
                "Please provide valid HTTP or HTTPS URLs."
            )
        return urls


def build_system_apis(context: AdapterContext) -> Adapter:
    async def _open_url(url: str, wait_time: float = 0):
        if wait_time > 0:
            await asyncio.sleep(wait_time)
        try:
            argv = await launch_url(url)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to open %s: %s", url, exc)
            return ToolError(
                str(exc),
                message=f"Failed to open {url} in browser",
                details={"url": url, "platform": sys.platform, "opened_at": utc_timestamp()},
            )
        return json_result(
            {
                "success": True,
                "url": url,
                "platform": sys.platform,
                "command": " ".join(argv),
                "opened_at": utc_timestamp(),
                "message": f"Successfully opened {url} in your default browser",
            }
        )

    async def _open_multiple_urls(
        urls: list[str], delay_between: float = 1, wait_time: float = 0
    ):
        if wait_time > 0:
            await asyncio.sleep(wait_time)

        results = []
        for index, url in enumerate(urls):
            try:
                await launch_url(url)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Failed to open %s: %s", url, exc)
                results.append(
                    {"url": url, "success": False, "error": str(exc), "opened_at": utc_timestamp()}
                )
            else:
                results.append({"url": url, "success": True, "opened_at": utc_timestamp()})
            if index < len(urls) - 1 and delay_between > 0:
                await asyncio.sleep(delay_between)

        opened = sum(1 for r in results if r["success"])
        return json_result(
            {
                "total_urls": len(urls),
                "successful_opens": opened,
                "failed_opens": len(urls) - opened,
                "platform": sys.platform,
                "delay_between": delay_between,
                "initial_wait": wait_time,
                "results": results,
                "completed_at": utc_timestamp(),
                "message": f"Opened {opened} of {len(urls)} URLs successfully",
            }
        )

    return Adapter(
        name="system-apis",
        description="System APIs for opening URLs and browser automation",
        tools=(
            Tool(
                name="open_url",
                description="Open a URL in the system default browser",
                args_schema=OpenUrlInput,
                handler=_open_url,
            ),
            Tool(
                name="open_multiple_urls",
                description="Open multiple URLs in the system default browser",
                args_schema=OpenMultipleUrlsInput,
                handler=_open_multiple_urls,
            ),
        ),
    )


adapter = AdapterSpec(
    name="system-apis",
    builder=build_system_apis,
    intent="Hand URLs off to the desktop browser on the host machine.",
    schema_notes="Only http(s) URLs are accepted; at most 10 per call.",
)
