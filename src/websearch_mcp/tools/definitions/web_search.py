import asyncio

from pydantic import BaseModel, Field, field_validator

from websearch_mcp.tools.tool_factory.web.http_get import is_http_url
from websearch_mcp.tools.tool_factory.web.scraper import scrape_url
from websearch_mcp.tools.tool_factory.web.search import searxng_search
from websearch_mcp.tools.tool_models import (
    Adapter,
    AdapterContext,
    AdapterSpec,
    Tool,
    ToolError,
    json_result,
)

MAX_RESULTS = 6


class GetLinksInput(BaseModel):
    query: str = Field(min_length=1, description="Search query")
    categories: str | None = Field(
        default=None, description="Comma-separated categories (default general,web)"
    )


class ScrapeLinksInput(BaseModel):
    links: list[str] = Field(min_length=1, description="Array of URLs to scrape")

    @field_validator("links")
    @classmethod
    def _http_only(cls, links: list[str]) -> list[str]:
        invalid = [link for link in links if not is_http_url(link)]
        if invalid:
            raise ValueError(f"Invalid URLs: {', '.join(invalid)}")
        return links


def build_web_search(context: AdapterContext) -> Adapter:
    settings = context.settings

    async def _get_links(query: str, categories: str | None = None):
        data = await searxng_search(
            query,
            base_url=settings.searxng_base_url,
            categories=categories,
            timeout_seconds=settings.scrape_timeout_seconds,
        )
        if not data or not data.get("results"):
            return ToolError(
                f'No results found for "{query}"',
                message="SearXNG returned no results or could not be reached",
            )

        results = [
            {
                "title": r.get("title"),
                "url": r.get("url"),
                "content": r.get("content"),
                "engine": r.get("engine"),
            }
            for r in data["results"]
            if r.get("url")
        ][:MAX_RESULTS]
        return json_result(results)

    async def _scrape_links(links: list[str]):
        pages = await asyncio.gather(
            *(scrape_url(url, timeout_seconds=settings.scrape_timeout_seconds) for url in links)
        )
        return json_result(list(pages))

    return Adapter(
        name="web-search",
        description="Web search and content scraping tools using SearXNG",
        tools=(
            Tool(
                name="get_links",
                description=f"Search SearXNG and return up to {MAX_RESULTS} links",
                args_schema=GetLinksInput,
                handler=_get_links,
            ),
            Tool(
                name="scrape_links",
                description="Scrape multiple URLs and return clean, structured content",
                args_schema=ScrapeLinksInput,
                handler=_scrape_links,
            ),
        ),
    )


adapter = AdapterSpec(
    name="web-search",
    builder=build_web_search,
    intent="Discover relevant real-time information from the open web.",
    schema_notes="get_links takes 'query'; scrape_links takes a list of http(s) URLs.",
)
