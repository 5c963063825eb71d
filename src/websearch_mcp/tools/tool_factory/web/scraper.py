from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup

from websearch_mcp.tools.tool_factory.web.http_get import fetch_text, utc_timestamp

MAX_CONTENT_CHARS = 5000
MAX_LINKS = 20
MAX_IMAGES = 10

_NOISE_SELECTORS = "script, style, nav, header, footer, aside, .ad, .advertisement, .sidebar"
_MAIN_SELECTORS = "main, article, .content, .post-content, .entry-content, #content"
_FALLBACK_SELECTORS = 'div[class*="content"], div[class*="article"], div[class*="post"]'


def extract_page(html: str, url: str) -> dict[str, Any]:
    """Reduce an HTML document to title, main text and a few structural lists."""
    soup = BeautifulSoup(html, "html.parser")

    for element in soup.select(_NOISE_SELECTORS):
        element.decompose()

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""
    meta = soup.find("meta", attrs={"name": "description"})
    meta_description = (meta.get("content") or "").strip() if meta else ""

    main = soup.select_one(_MAIN_SELECTORS) or soup.select_one(_FALLBACK_SELECTORS)
    container = main or soup.body or soup
    content = re.sub(r"\s+", " ", container.get_text(" ")).strip()

    headings = [
        {"level": int(h.name[1]), "text": h.get_text(strip=True)}
        for h in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
    ]
    links = [
        {"text": a.get_text(strip=True), "href": a.get("href", "")}
        for a in soup.find_all("a", href=True)[:MAX_LINKS]
    ]
    images = [
        {
            "src": img.get("src", ""),
            "alt": img.get("alt", ""),
            "title": img.get("title", ""),
        }
        for img in soup.find_all("img", src=True)[:MAX_IMAGES]
    ]

    return {
        "url": url,
        "title": title,
        "meta_description": meta_description,
        "content": content[:MAX_CONTENT_CHARS],
        "headings": headings,
        "links": links,
        "images": images,
        "word_count": len(content.split()),
        "scraped_at": utc_timestamp(),
    }


async def scrape_url(url: str, timeout_seconds: float = 10) -> dict[str, Any]:
    try:
        html = await fetch_text(url, timeout_seconds=timeout_seconds)
    except Exception as exc:  # noqa: BLE001
        return {"url": url, "error": str(exc) or type(exc).__name__, "scraped_at": utc_timestamp()}
    return extract_page(html, url)
