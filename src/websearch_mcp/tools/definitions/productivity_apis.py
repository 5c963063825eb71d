from __future__ import annotations

import asyncio
from typing import Any, Literal

from pydantic import BaseModel, Field

from websearch_mcp.tools.tool_factory.web.http_get import (
    fetch_json,
    send_request,
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
HTTPBIN_URL = "https://httpbin.org"
DATASETS = ("users", "posts", "comments", "albums", "photos", "todos")
BODY_METHODS = ("POST", "PUT", "PATCH")


class TodosInput(BaseModel):
    limit: int = Field(default=10, ge=1, le=20, description="Number of todos to fetch (1-20)")
    completed: bool | None = Field(default=None, description="Filter by completion status")
    user_id: int | None = Field(default=None, description="Filter by user ID")


class AlbumsInput(BaseModel):
    limit: int = Field(default=10, ge=1, le=20, description="Number of albums to fetch (1-20)")
    user_id: int | None = Field(default=None, description="Filter by user ID")


class PhotosInput(BaseModel):
    limit: int = Field(default=20, ge=1, le=50, description="Number of photos to fetch (1-50)")
    album_id: int | None = Field(default=None, description="Filter by album ID")


class HttpbinInput(BaseModel):
    method: Literal["get", "post", "put", "patch", "delete"] = Field(
        default="get", description="HTTP method to test"
    )
    endpoint: str = Field(default="/get", description="HTTPBin endpoint to test")
    data: str | None = Field(default=None, description="Data to send (for POST/PUT/PATCH)")
    headers: dict[str, str] | None = Field(default=None, description="Custom headers to send")


class CompleteDatasetInput(BaseModel):
    include_users: bool = Field(default=True, description="Include users data")
    include_posts: bool = Field(default=True, description="Include posts data")
    include_comments: bool = Field(default=True, description="Include comments data")
    include_albums: bool = Field(default=True, description="Include albums data")
    include_photos: bool = Field(default=True, description="Include photos data")
    include_todos: bool = Field(default=True, description="Include todos data")


class UuidInput(BaseModel):
    count: int = Field(default=1, ge=1, le=100, description="Number of UUIDs to generate (1-100)")


def build_productivity_apis(context: AdapterContext) -> Adapter:
    timeout = context.settings.default_api_timeout_seconds

    async def _listing(resource: str, params: dict[str, Any] | None) -> list[dict[str, Any]]:
        return await fetch_json(
            f"{JSONPLACEHOLDER_URL}/{resource}", params=params, timeout_seconds=timeout
        )

    async def _todos(limit: int = 10, completed: bool | None = None, user_id: int | None = None):
        params: dict[str, Any] = {}
        if completed is not None:
            params["completed"] = str(completed).lower()
        if user_id is not None:
            params["userId"] = user_id
        try:
            todos = await _listing("todos", params or None)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        selected = todos[:limit]
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "total_todos": len(todos),
                "returned_todos": len(selected),
                "filters": {"completed": completed, "user_id": user_id},
                "todos": selected,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _albums(limit: int = 10, user_id: int | None = None):
        try:
            albums = await _listing("albums", {"userId": user_id} if user_id is not None else None)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        selected = albums[:limit]
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "total_albums": len(albums),
                "returned_albums": len(selected),
                "filter_user_id": user_id,
                "albums": selected,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _photos(limit: int = 20, album_id: int | None = None):
        try:
            photos = await _listing(
                "photos", {"albumId": album_id} if album_id is not None else None
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        selected = photos[:limit]
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "total_photos": len(photos),
                "returned_photos": len(selected),
                "filter_album_id": album_id,
                "photos": [
                    {
                        "id": photo.get("id"),
                        "title": photo.get("title"),
                        "url": photo.get("url"),
                        "thumbnail_url": photo.get("thumbnailUrl"),
                        "album_id": photo.get("albumId"),
                    }
                    for photo in selected
                ],
                "fetched_at": utc_timestamp(),
            }
        )

    async def _httpbin(
        method: str = "get",
        endpoint: str = "/get",
        data: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        verb = method.upper()
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        try:
            response = await send_request(
                verb,
                f"{HTTPBIN_URL}{path}",
                content=data if verb in BODY_METHODS else None,
                headers={"Content-Type": "application/json", **(headers or {})},
                timeout_seconds=timeout,
            )
            body = response.json()
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("HTTPBin API", exc)

        return json_result(
            {
                "source": "HTTPBin API",
                "method": verb,
                "endpoint": path,
                "status_code": response.status_code,
                "status_text": response.reason_phrase,
                "response_headers": dict(response.headers),
                "result": body,
                "sent_data": data,
                "sent_headers": headers,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _complete(**include: bool):
        wanted = [name for name in DATASETS if include.get(f"include_{name}", True)]
        try:
            fetched = await asyncio.gather(*(_listing(name, None) for name in wanted))
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("JSONPlaceholder API", exc)

        data = dict(zip(wanted, fetched))
        return json_result(
            {
                "source": "JSONPlaceholder API",
                "fetched_at": utc_timestamp(),
                "data": data,
                "summary": {name: len(data.get(name, [])) for name in DATASETS},
            }
        )

    async def _uuids(count: int = 1):
        try:
            results = await asyncio.gather(
                *(fetch_json(f"{HTTPBIN_URL}/uuid", timeout_seconds=timeout) for _ in range(count))
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("HTTPBin UUID API", exc)

        uuids = [result.get("uuid") for result in results]
        return json_result(
            {
                "source": "HTTPBin UUID API",
                "total_uuids": len(uuids),
                "uuids": uuids,
                "fetched_at": utc_timestamp(),
            }
        )

    return Adapter(
        name="productivity-apis",
        description="Productivity and testing APIs for development and data management",
        tools=(
            Tool(
                name="jsonplaceholder_todos",
                description="Get todo items from JSONPlaceholder API for testing",
                args_schema=TodosInput,
                handler=_todos,
            ),
            Tool(
                name="jsonplaceholder_albums",
                description="Get photo albums from JSONPlaceholder API for testing",
                args_schema=AlbumsInput,
                handler=_albums,
            ),
            Tool(
                name="jsonplaceholder_photos",
                description="Get photos from JSONPlaceholder API for testing",
                args_schema=PhotosInput,
                handler=_photos,
            ),
            Tool(
                name="httpbin_test",
                description="Test HTTP requests with HTTPBin API",
                args_schema=HttpbinInput,
                handler=_httpbin,
            ),
            Tool(
                name="jsonplaceholder_complete",
                description="Get complete dataset from JSONPlaceholder API",
                args_schema=CompleteDatasetInput,
                handler=_complete,
            ),
            Tool(
                name="uuid_generator",
                description="Generate UUIDs using HTTPBin UUID service",
                args_schema=UuidInput,
                handler=_uuids,
            ),
        ),
    )


adapter = AdapterSpec(
    name="productivity-apis",
    builder=build_productivity_apis,
    intent="Sample datasets and request echo services for exercising HTTP clients.",
    schema_notes="httpbin_test only sends a body for POST, PUT and PATCH.",
)
