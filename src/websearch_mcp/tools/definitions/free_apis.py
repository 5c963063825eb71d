from __future__ import annotations

import asyncio
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

JSONPLACEHOLDER_URL = "https://jsonplaceholder.typicode.com"
RANDOM_USER_URL = "https://randomuser.me/api/"
CAT_FACT_URL = "https://catfact.ninja/fact"
DOG_CEO_URL = "https://dog.ceo/api"
QUOTABLE_URL = "https://api.quotable.io/quotes"


class JsonPlaceholderUsersInput(BaseModel):
    limit: int = Field(default=5, ge=1, le=10, description="Number of users to fetch (1-10)")


class JsonPlaceholderPostsInput(BaseModel):
    limit: int = Field(default=10, ge=1, le=20, description="Number of posts to fetch (1-20)")
    user_id: int | None = Field(default=None, description="Filter posts by user ID")


class JsonPlaceholderCommentsInput(BaseModel):
    limit: int = Field(default=10, ge=1, le=20, description="Number of comments to fetch (1-20)")
    post_id: int | None = Field(default=None, description="Filter comments by post ID")


class QuotesInput(BaseModel):
    limit: int = Field(default=5, ge=1, le=20, description="Number of quotes to fetch (1-20)")
    author: str | None = Field(default=None, description="Filter quotes by author name")
    tags: str | None = Field(
        default=None, description="Filter quotes by tags (comma-separated)"
    )


class RandomUserInput(BaseModel):
    limit: int = Field(default=1, ge=1, le=10, description="Number of users to generate (1-10)")
    gender: Literal["male", "female"] | None = Field(default=None, description="Filter by gender")
    nationality: str | None = Field(
        default=None, description="Filter by nationality (e.g., 'US', 'GB', 'DE')"
    )


class CatFactsInput(BaseModel):
    limit: int = Field(default=3, ge=1, le=10, description="Number of cat facts to fetch (1-10)")


class DogImagesInput(BaseModel):
    limit: int = Field(default=3, ge=1, le=10, description="Number of dog images to fetch (1-10)")
    breed: str | None = Field(
        default=None,
        description="Filter by dog breed (e.g., 'hound', 'poodle', 'retriever')",
    )


def build_free_apis(context: AdapterContext) -> Adapter:
    timeout = context.settings.default_api_timeout_seconds

    async def _users(limit: int = 5):
        try:
            users = await fetch_json(f"{JSONPLACEHOLDER_URL}/users", timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        selected = users[:limit]
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "total_users": len(users),
                "returned_users": len(selected),
                "users": selected,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _posts(limit: int = 10, user_id: int | None = None):
        params = {"userId": user_id} if user_id is not None else None
        try:
            posts = await fetch_json(
                f"{JSONPLACEHOLDER_URL}/posts", params=params, timeout_seconds=timeout
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        selected = posts[:limit]
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "total_posts": len(posts),
                "returned_posts": len(selected),
                "filter_user_id": user_id,
                "posts": selected,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _comments(limit: int = 10, post_id: int | None = None):
        params = {"postId": post_id} if post_id is not None else None
        try:
            comments = await fetch_json(
                f"{JSONPLACEHOLDER_URL}/comments", params=params, timeout_seconds=timeout
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        selected = comments[:limit]
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "total_comments": len(comments),
                "returned_comments": len(selected),
                "filter_post_id": post_id,
                "comments": selected,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _quotes(limit: int = 5, author: str | None = None, tags: str | None = None):
        params: dict[str, Any] = {"limit": limit}
        if author:
            params["author"] = author
        if tags:
            params["tags"] = tags
        try:
            data = await fetch_json(QUOTABLE_URL, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("Quotable API", exc)

        # Paged responses wrap the list in "results"; older deployments return it bare.
        if isinstance(data, dict):
            quotes = data.get("results") or []
            total = data.get("count") or len(quotes)
        else:
            quotes = data
            total = len(quotes)
        return json_result(
            {
                "source": "Quotable API",
                "total_quotes": total,
                "returned_quotes": len(quotes),
                "filter_author": author,
                "filter_tags": tags,
                "quotes": quotes,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _random_users(
        limit: int = 1, gender: str | None = None, nationality: str | None = None
    ):
        params: dict[str, Any] = {"results": limit}
        if gender:
            params["gender"] = gender
        if nationality:
            params["nat"] = nationality
        try:
            data = await fetch_json(RANDOM_USER_URL, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("Random User Generator API", exc)

        users = data.get("results", [])
        return json_result(
            {
                "source": "Random User Generator API",
                "total_users": len(users),
                "filter_gender": gender,
                "filter_nationality": nationality,
                "users": users,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _cat_facts(limit: int = 3):
        try:
            facts = await asyncio.gather(
                *(fetch_json(CAT_FACT_URL, timeout_seconds=timeout) for _ in range(limit))
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("Cat Facts API", exc)

        return json_result(
            {
                "source": "Cat Facts API",
                "total_facts": len(facts),
                "facts": list(facts),
                "fetched_at": utc_timestamp(),
            }
        )

    async def _dog_images(limit: int = 3, breed: str | None = None):
        if breed:
            url = f"{DOG_CEO_URL}/breed/{breed.lower()}/images/random/{limit}"
        else:
            url = f"{DOG_CEO_URL}/breeds/image/random/{limit}"
        try:
            data = await fetch_json(url, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("Dog CEO API", exc)

        images = data.get("message") or []
        if isinstance(images, str):
            images = [images]
        return json_result(
            {
                "source": "Dog CEO API",
                "total_images": len(images),
                "filter_breed": breed,
                "images": [
                    {"id": f"dog_{index}", "url": image, "breed": breed or "random"}
                    for index, image in enumerate(images)
                ],
                "fetched_at": utc_timestamp(),
            }
        )

    return Adapter(
        name="free-apis",
        description="Collection of free APIs for testing and development",
        tools=(
            Tool(
                name="jsonplaceholder_users",
                description="Get fake user data from JSONPlaceholder API for testing",
                args_schema=JsonPlaceholderUsersInput,
                handler=_users,
            ),
            Tool(
                name="jsonplaceholder_posts",
                description="Get fake blog posts from JSONPlaceholder API for testing",
                args_schema=JsonPlaceholderPostsInput,
                handler=_posts,
            ),
            Tool(
                name="jsonplaceholder_comments",
                description="Get fake comments from JSONPlaceholder API for testing",
                args_schema=JsonPlaceholderCommentsInput,
                handler=_comments,
            ),
            Tool(
                name="quotes_api",
                description="Get inspirational quotes from Quotes REST API",
                args_schema=QuotesInput,
                handler=_quotes,
            ),
            Tool(
                name="random_user_api",
                description="Generate random user profiles from Random User Generator API",
                args_schema=RandomUserInput,
                handler=_random_users,
            ),
            Tool(
                name="cat_facts_api",
                description="Get random cat facts from Cat Facts API",
                args_schema=CatFactsInput,
                handler=_cat_facts,
            ),
            Tool(
                name="dog_images_api",
                description="Get random dog images from Dog CEO API",
                args_schema=DogImagesInput,
                handler=_dog_images,
            ),
        ),
    )


adapter = AdapterSpec(
    name="free-apis",
    builder=build_free_apis,
    intent="Provide keyless sample data for demos and connectivity checks.",
    schema_notes="All tools take an optional 'limit'; no API keys involved.",
)
