from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

import httpx

from websearch_mcp.tools.tool_models import ToolError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


async def fetch_json(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 20,
) -> Any:
    """GET ``url`` and decode the JSON body. Non-2xx responses raise httpx.HTTPStatusError."""
    async with httpx.AsyncClient(
        timeout=timeout_seconds, headers=headers, follow_redirects=True
    ) as client:
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()


async def fetch_text(
    url: str,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10,
) -> str:
    """GET ``url`` with a browser user agent and return the decoded body."""
    merged = {"User-Agent": DEFAULT_USER_AGENT, **(headers or {})}
    async with httpx.AsyncClient(
        timeout=timeout_seconds, headers=merged, follow_redirects=True
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.text


async def send_request(
    method: str,
    url: str,
    content: str | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 20,
) -> httpx.Response:
    """Issue an arbitrary request and return the buffered response; non-2xx raises."""
    async with httpx.AsyncClient(timeout=timeout_seconds, follow_redirects=True) as client:
        response = await client.request(method, url, content=content, headers=headers)
        response.raise_for_status()
        return response


def status_code_of(exc: Exception) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def upstream_failure(
    source: str,
    exc: Exception,
    auth_status: int | None = None,
    auth_message: str | None = None,
) -> ToolError:
    """Build the ToolError for a failed upstream call.

    When the upstream answers with ``auth_status`` the error names the
    credential problem instead of echoing the raw HTTP error.
    """
    status = status_code_of(exc)
    if auth_status is not None and status == auth_status and auth_message:
        return ToolError(
            auth_message,
            message=f"{source} rejected the API key",
            details={"source": source, "status_code": status},
        )
    details: dict[str, Any] = {"source": source}
    if status is not None:
        details["status_code"] = status
    return ToolError(
        f"Failed to fetch from {source}: {exc}",
        message=f"{source} request failed",
        details=details,
    )


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
