from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from websearch_mcp.tools.tool_factory.web.http_get import (
    fetch_json,
    upstream_failure,
    utc_timestamp,
)
from websearch_mcp.tools.tool_models import (
    Adapter,
    AdapterContext,
    AdapterSpec,
    Tool,
    json_result,
)

NEWSAPI_URL = "https://newsapi.org/v2"
GUARDIAN_URL = "https://content.guardianapis.com/search"
DEMO_KEY = "demo"

NEWSAPI_KEY_HINT = (
    "Invalid API key. Please provide a valid NewsAPI.org key or get one free from "
    "https://newsapi.org/"
)
GUARDIAN_KEY_HINT = (
    "Invalid API key. Please provide a valid Guardian API key or get one free from "
    "https://open-platform.theguardian.com/access/"
)

NewsCategory = Literal[
    "business", "entertainment", "general", "health", "science", "sports", "technology"
]


class NewsApiInput(BaseModel):
    query: str | None = Field(default=None, description="Search keywords")
    category: NewsCategory | None = Field(default=None, description="News category")
    country: str = Field(default="us", description="Country code (e.g., us, gb, de, fr)")
    page_size: int = Field(default=10, ge=1, le=100, description="Number of articles (1-100)")
    api_key: str | None = Field(
        default=None, description="NewsAPI.org key (optional, uses demo key)"
    )


class GuardianNewsInput(BaseModel):
    query: str | None = Field(default=None, description="Search keywords")
    section: str | None = Field(
        default=None, description="Guardian section (e.g., politics, technology, sport)"
    )
    page_size: int = Field(default=10, ge=1, le=50, description="Number of articles (1-50)")
    api_key: str | None = Field(
        default=None, description="Guardian API key (optional, uses demo key)"
    )


class MockNewsInput(BaseModel):
    category: str | None = Field(default=None, description="News category")
    limit: int = Field(default=5, ge=1, le=20, description="Number of articles (1-20)")


def _preview(text: str | None, size: int) -> str | None:
    if not text:
        return None
    return text[:size] + "..." if len(text) > size else text


def mock_articles() -> list[dict[str, Any]]:
    now = datetime.now(timezone.utc)
    return [
        {
            "title": "Breaking: Major Technology Breakthrough Announced",
            "description": "Scientists have made a groundbreaking discovery that could "
            "revolutionize the tech industry.",
            "author": "Tech Reporter",
            "source": "Mock News Network",
            "url": "https://example.com/news/1",
            "image_url": "https://picsum.photos/seed/tech1/800/600.jpg",
            "published_at": now.isoformat(),
            "content_preview": "In a stunning development today, researchers unveiled...",
        },
        {
            "title": "Global Markets React to Economic Changes",
            "description": "Financial markets worldwide are responding to new economic policies.",
            "author": "Finance Correspondent",
            "source": "Mock Business Daily",
            "url": "https://example.com/news/2",
            "image_url": "https://picsum.photos/seed/finance1/800/600.jpg",
            "published_at": (now - timedelta(hours=1)).isoformat(),
            "content_preview": "Stock markets around the globe showed mixed reactions...",
        },
        {
            "title": "Healthcare Innovation Saves Lives",
            "description": "New medical treatments are showing promising results in clinical trials.",
            "author": "Health Reporter",
            "source": "Mock Health News",
            "url": "https://example.com/news/3",
            "image_url": "https://picsum.photos/seed/health1/800/600.jpg",
            "published_at": (now - timedelta(hours=2)).isoformat(),
            "content_preview": "A revolutionary new treatment approach has demonstrated...",
        },
    ]


def build_news_apis(context: AdapterContext) -> Adapter:
    settings = context.settings
    timeout = settings.default_api_timeout_seconds

    async def _newsapi(
        query: str | None = None,
        category: str | None = None,
        country: str = "us",
        page_size: int = 10,
        api_key: str | None = None,
    ):
        params: dict[str, Any] = {
            "apiKey": api_key or settings.newsapi_key or DEMO_KEY,
            "pageSize": page_size,
        }
        # /everything rejects country and category, so a keyword query switches endpoint.
        if query:
            endpoint = f"{NEWSAPI_URL}/everything"
            params["q"] = query
        else:
            endpoint = f"{NEWSAPI_URL}/top-headlines"
            params["country"] = country
            if category:
                params["category"] = category

        try:
            data = await fetch_json(endpoint, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("NewsAPI.org", exc, 401, NEWSAPI_KEY_HINT)

        articles = [
            {
                "title": a.get("title"),
                "description": a.get("description"),
                "author": a.get("author"),
                "source": (a.get("source") or {}).get("name"),
                "url": a.get("url"),
                "image_url": a.get("urlToImage"),
                "published_at": a.get("publishedAt"),
                "content_preview": _preview(a.get("content"), 200),
            }
            for a in data.get("articles", [])
        ]
        return json_result(
            {
                "source": "NewsAPI.org",
                "total_results": data.get("totalResults"),
                "articles": articles,
                "filters": {"query": query, "category": category, "country": country},
                "fetched_at": utc_timestamp(),
            }
        )

    async def _guardian_news(
        query: str | None = None,
        section: str | None = None,
        page_size: int = 10,
        api_key: str | None = None,
    ):
        params: dict[str, Any] = {
            "api-key": api_key or settings.guardian_api_key or DEMO_KEY,
            "page-size": page_size,
            "show-fields": "headline,standfirst,bodyText,thumbnail,byline",
            "order-by": "newest",
        }
        if query:
            params["q"] = query
        if section:
            params["section"] = section

        try:
            data = await fetch_json(GUARDIAN_URL, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("The Guardian API", exc, 403, GUARDIAN_KEY_HINT)

        body = data.get("response", {})
        articles = []
        for item in body.get("results", []):
            fields = item.get("fields") or {}
            articles.append(
                {
                    "id": item.get("id"),
                    "title": item.get("webTitle"),
                    "section": item.get("sectionName"),
                    "author": fields.get("byline"),
                    "headline": fields.get("headline"),
                    "standfirst": fields.get("standfirst"),
                    "body_preview": _preview(fields.get("bodyText"), 300),
                    "thumbnail": fields.get("thumbnail"),
                    "url": item.get("webUrl"),
                    "published_at": item.get("webPublicationDate"),
                    "pillar": item.get("pillarName"),
                }
            )
        return json_result(
            {
                "source": "The Guardian API",
                "total_results": body.get("total"),
                "current_page": body.get("currentPage"),
                "pages": body.get("pages"),
                "articles": articles,
                "filters": {"query": query, "section": section},
                "fetched_at": utc_timestamp(),
            }
        )

    async def _mock_news(category: str | None = None, limit: int = 5):
        articles = mock_articles()
        if category:
            needle = category.lower()
            articles = [
                a
                for a in articles
                if needle in a["title"].lower() or needle in a["description"].lower()
            ]
        articles = articles[:limit]
        return json_result(
            {
                "source": "Mock News API",
                "total_results": len(articles),
                "articles": articles,
                "category_filter": category,
                "fetched_at": utc_timestamp(),
            }
        )

    return Adapter(
        name="news-apis",
        description="News and article APIs from multiple providers",
        tools=(
            Tool(
                name="newsapi",
                description="Get news articles from NewsAPI.org",
                args_schema=NewsApiInput,
                handler=_newsapi,
            ),
            Tool(
                name="guardian_news",
                description="Get news articles from The Guardian API",
                args_schema=GuardianNewsInput,
                handler=_guardian_news,
            ),
            Tool(
                name="mock_news",
                description="Get mock news articles for testing (no API key required)",
                args_schema=MockNewsInput,
                handler=_mock_news,
            ),
        ),
    )


adapter = AdapterSpec(
    name="news-apis",
    builder=build_news_apis,
    intent="Fetch recent headlines and articles from news providers.",
    schema_notes="mock_news needs no key and is safe for offline checks.",
)
