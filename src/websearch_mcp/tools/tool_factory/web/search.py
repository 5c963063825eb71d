from __future__ import annotations

import logging
from typing import Any

from websearch_mcp.tools.tool_factory.web.http_get import fetch_json

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = "general,web"
DEFAULT_ENGINES = "bing,duckduckgo,brave"


async def searxng_search(
    query: str,
    base_url: str,
    categories: str | None = None,
    engines: str = DEFAULT_ENGINES,
    timeout_seconds: float = 10,
) -> dict[str, Any] | None:
    """Query a SearXNG instance's JSON API. Returns None when the instance is unreachable."""
    params = {
        "q": query,
        "format": "json",
        "categories": (categories or "").strip() or DEFAULT_CATEGORIES,
        "engines": engines,
    }
    try:
        data = await fetch_json(
            f"{base_url.rstrip('/')}/search", params=params, timeout_seconds=timeout_seconds
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("SearXNG search failed for %r: %s", query, exc)
        return None
    return data if isinstance(data, dict) else None
