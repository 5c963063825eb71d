"""Tests for the HTTP-backed adapters with the upstream fetch patched out."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from websearch_mcp.tools.definitions.finance_apis import build_finance_apis
from websearch_mcp.tools.definitions.free_apis import build_free_apis
from websearch_mcp.tools.definitions.news_apis import build_news_apis
from websearch_mcp.tools.definitions.productivity_apis import build_productivity_apis
from websearch_mcp.tools.definitions.science_apis import build_science_apis
from websearch_mcp.tools.definitions.weather_apis import build_weather_apis
from websearch_mcp.tools.dispatch import ToolDispatcher
from websearch_mcp.tools.registry import ToolRegistry


def make_dispatcher(context, *builders) -> ToolDispatcher:
    registry = ToolRegistry()
    for builder in builders:
        registry.register(builder(context))
    return ToolDispatcher(registry)


def http_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://api.example.test")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


async def call(dispatcher, name, arguments=None):
    result = await dispatcher.invoke(name, arguments or {})
    return result, json.loads(result.text)


class TestFinance:
    @pytest.mark.asyncio
    async def test_exchange_rate_for_target(self, context):
        dispatcher = make_dispatcher(context, build_finance_apis)
        data = {"base": "USD", "date": "2025-01-01", "rates": {"EUR": 0.9, "GBP": 0.8}}
        with patch(
            "websearch_mcp.tools.definitions.finance_apis.fetch_json",
            AsyncMock(return_value=data),
        ) as fetch:
            result, payload = await call(dispatcher, "exchange_rates", {"base": "usd", "target": "eur"})

        assert not result.is_error
        assert payload["exchange_rate"] == 0.9
        assert payload["target_currency"] == "EUR"
        assert fetch.await_args.args[0].endswith("/latest/USD")

    @pytest.mark.asyncio
    async def test_exchange_rate_unknown_target(self, context):
        dispatcher = make_dispatcher(context, build_finance_apis)
        data = {"base": "USD", "date": "2025-01-01", "rates": {"EUR": 0.9}}
        with patch(
            "websearch_mcp.tools.definitions.finance_apis.fetch_json",
            AsyncMock(return_value=data),
        ):
            result, payload = await call(dispatcher, "exchange_rates", {"target": "XYZ"})

        assert result.is_error
        assert payload["available_currencies"] == ["EUR"]

    @pytest.mark.asyncio
    async def test_coingecko_prices_counts(self, context):
        dispatcher = make_dispatcher(context, build_finance_apis)
        data = {"bitcoin": {"usd": 1}, "ethereum": {"usd": 2}}
        with patch(
            "websearch_mcp.tools.definitions.finance_apis.fetch_json",
            AsyncMock(return_value=data),
        ) as fetch:
            _, payload = await call(dispatcher, "coingecko_prices")

        assert payload["coins_requested"] == 3
        assert payload["coins_returned"] == 2
        assert fetch.await_args.kwargs["params"]["include_market_cap"] == "true"

    @pytest.mark.asyncio
    async def test_alphavantage_requires_key(self, context):
        dispatcher = make_dispatcher(context, build_finance_apis)
        result, _ = await call(dispatcher, "alphavantage_stock", {"symbol": "AAPL"})
        assert result.is_error
        assert "API key required" in result.error

    @pytest.mark.asyncio
    async def test_alphavantage_parses_quote(self, context):
        dispatcher = make_dispatcher(context, build_finance_apis)
        data = {
            "Global Quote": {
                "01. symbol": "AAPL",
                "05. price": "190.50",
                "06. volume": "1000",
                "09. change": "-1.25",
                "10. change percent": "-0.65%",
            }
        }
        with patch(
            "websearch_mcp.tools.definitions.finance_apis.fetch_json",
            AsyncMock(return_value=data),
        ):
            _, payload = await call(
                dispatcher, "alphavantage_stock", {"symbol": "aapl", "api_key": "k"}
            )

        assert payload["price"] == 190.5
        assert payload["volume"] == 1000
        assert payload["change"] == -1.25
        assert payload["open"] is None

    @pytest.mark.asyncio
    async def test_upstream_failure_is_tool_error(self, context):
        dispatcher = make_dispatcher(context, build_finance_apis)
        with patch(
            "websearch_mcp.tools.definitions.finance_apis.fetch_json",
            AsyncMock(side_effect=http_error(500)),
        ):
            result, payload = await call(dispatcher, "coingecko_trending")

        assert result.is_error
        assert payload["status_code"] == 500
        assert payload["source"] == "CoinGecko API"


class TestWeather:
    @pytest.mark.asyncio
    async def test_openweather_bad_key_message(self, context):
        dispatcher = make_dispatcher(context, build_weather_apis)
        with patch(
            "websearch_mcp.tools.definitions.weather_apis.fetch_json",
            AsyncMock(side_effect=http_error(401)),
        ):
            result, _ = await call(dispatcher, "openweather_current", {"location": "Paris"})

        assert result.is_error
        assert result.error.startswith("Invalid API key")

    @pytest.mark.asyncio
    async def test_env_key_used_when_argument_missing(self, context):
        context.settings.weatherapi_key = "from-env"
        dispatcher = make_dispatcher(context, build_weather_apis)
        with patch(
            "websearch_mcp.tools.definitions.weather_apis.fetch_json",
            AsyncMock(return_value={"location": {"name": "Paris"}, "current": {}}),
        ) as fetch:
            await call(dispatcher, "weatherapi_current", {"location": "Paris"})
            assert fetch.await_args.kwargs["params"]["key"] == "from-env"

            await call(dispatcher, "weatherapi_current", {"location": "Paris", "api_key": "explicit"})
            assert fetch.await_args.kwargs["params"]["key"] == "explicit"

    @pytest.mark.asyncio
    async def test_forecast_days_bounds(self, context):
        dispatcher = make_dispatcher(context, build_weather_apis)
        result, _ = await call(dispatcher, "weatherapi_forecast", {"location": "Paris", "days": 4})
        assert result.is_error


class TestNews:
    @pytest.mark.asyncio
    async def test_mock_news_category_filter(self, context):
        dispatcher = make_dispatcher(context, build_news_apis)
        _, payload = await call(dispatcher, "mock_news", {"category": "markets"})
        assert payload["total_results"] == 1
        assert payload["articles"][0]["title"] == "Global Markets React to Economic Changes"

    @pytest.mark.asyncio
    async def test_newsapi_query_switches_endpoint(self, context):
        dispatcher = make_dispatcher(context, build_news_apis)
        article = {"title": "T", "source": {"name": "S"}, "content": "x" * 250}
        with patch(
            "websearch_mcp.tools.definitions.news_apis.fetch_json",
            AsyncMock(return_value={"totalResults": 1, "articles": [article]}),
        ) as fetch:
            _, payload = await call(dispatcher, "newsapi", {"query": "python"})

        assert fetch.await_args.args[0].endswith("/everything")
        assert "country" not in fetch.await_args.kwargs["params"]
        assert payload["articles"][0]["source"] == "S"
        assert payload["articles"][0]["content_preview"] == "x" * 200 + "..."

    @pytest.mark.asyncio
    async def test_guardian_maps_results(self, context):
        dispatcher = make_dispatcher(context, build_news_apis)
        data = {
            "response": {
                "total": 1,
                "currentPage": 1,
                "pages": 1,
                "results": [
                    {
                        "id": "a",
                        "webTitle": "Title",
                        "webUrl": "https://example.com/a",
                        "fields": {"byline": "Reporter"},
                    }
                ],
            }
        }
        with patch(
            "websearch_mcp.tools.definitions.news_apis.fetch_json",
            AsyncMock(return_value=data),
        ) as fetch:
            _, payload = await call(dispatcher, "guardian_news", {"section": "technology"})

        assert fetch.await_args.kwargs["params"]["api-key"] == "demo"
        assert payload["articles"][0]["author"] == "Reporter"
        assert payload["articles"][0]["body_preview"] is None


class TestFreeApis:
    @pytest.mark.asyncio
    async def test_users_limit(self, context):
        dispatcher = make_dispatcher(context, build_free_apis)
        users = [{"id": i} for i in range(10)]
        with patch(
            "websearch_mcp.tools.definitions.free_apis.fetch_json",
            AsyncMock(return_value=users),
        ):
            _, payload = await call(dispatcher, "jsonplaceholder_users", {"limit": 3})

        assert payload["total_users"] == 10
        assert payload["returned_users"] == 3

    @pytest.mark.asyncio
    async def test_cat_facts_fetches_limit_times(self, context):
        dispatcher = make_dispatcher(context, build_free_apis)
        fetch = AsyncMock(return_value={"fact": "Cats sleep a lot.", "length": 17})
        with patch("websearch_mcp.tools.definitions.free_apis.fetch_json", fetch):
            _, payload = await call(dispatcher, "cat_facts_api", {"limit": 4})

        assert fetch.await_count == 4
        assert payload["total_facts"] == 4

    @pytest.mark.asyncio
    async def test_dog_images_by_breed(self, context):
        dispatcher = make_dispatcher(context, build_free_apis)
        data = {"message": ["https://dog.ceo/a.jpg", "https://dog.ceo/b.jpg"], "status": "success"}
        with patch(
            "websearch_mcp.tools.definitions.free_apis.fetch_json",
            AsyncMock(return_value=data),
        ) as fetch:
            _, payload = await call(dispatcher, "dog_images_api", {"limit": 2, "breed": "Hound"})

        assert fetch.await_args.args[0].endswith("/breed/hound/images/random/2")
        assert payload["images"][1] == {"id": "dog_1", "url": "https://dog.ceo/b.jpg", "breed": "Hound"}

    @pytest.mark.asyncio
    async def test_comments_filter_by_post(self, context):
        dispatcher = make_dispatcher(context, build_free_apis)
        comments = [{"id": i, "postId": 2} for i in range(5)]
        with patch(
            "websearch_mcp.tools.definitions.free_apis.fetch_json",
            AsyncMock(return_value=comments),
        ) as fetch:
            _, payload = await call(dispatcher, "jsonplaceholder_comments", {"limit": 2, "post_id": 2})

        assert fetch.await_args.args[0].endswith("/comments")
        assert fetch.await_args.kwargs["params"] == {"postId": 2}
        assert payload["total_comments"] == 5
        assert payload["returned_comments"] == 2

    @pytest.mark.asyncio
    async def test_quotes_paged_response(self, context):
        dispatcher = make_dispatcher(context, build_free_apis)
        data = {"count": 2, "totalCount": 40, "results": [{"content": "a"}, {"content": "b"}]}
        with patch(
            "websearch_mcp.tools.definitions.free_apis.fetch_json",
            AsyncMock(return_value=data),
        ) as fetch:
            _, payload = await call(dispatcher, "quotes_api", {"limit": 2, "author": "Seneca"})

        assert fetch.await_args.kwargs["params"] == {"limit": 2, "author": "Seneca"}
        assert payload["returned_quotes"] == 2
        assert payload["filter_author"] == "Seneca"

    @pytest.mark.asyncio
    async def test_quotes_upstream_down(self, context):
        dispatcher = make_dispatcher(context, build_free_apis)
        with patch(
            "websearch_mcp.tools.definitions.free_apis.fetch_json",
            AsyncMock(side_effect=http_error(503)),
        ):
            result, payload = await call(dispatcher, "quotes_api")

        assert result.is_error
        assert payload["source"] == "Quotable API"


class TestScience:
    @pytest.mark.asyncio
    async def test_apod_date_and_demo_key(self, context):
        dispatcher = make_dispatcher(context, build_science_apis)
        with patch(
            "websearch_mcp.tools.definitions.science_apis.fetch_json",
            AsyncMock(return_value={"title": "Nebula", "hdurl": "https://hd"}),
        ) as fetch:
            _, payload = await call(dispatcher, "nasa_apod", {"date": "2024-02-29"})

        params = fetch.await_args.kwargs["params"]
        assert params["api_key"] == "DEMO_KEY"
        assert params["date"] == date(2024, 2, 29).isoformat()
        assert payload["hd_url"] == "https://hd"

    @pytest.mark.asyncio
    async def test_apod_rejects_bad_date(self, context):
        dispatcher = make_dispatcher(context, build_science_apis)
        result, _ = await call(dispatcher, "nasa_apod", {"date": "yesterday"})
        assert result.is_error

    @pytest.mark.asyncio
    async def test_iss_position_parses_floats(self, context):
        dispatcher = make_dispatcher(context, build_science_apis)
        data = {
            "timestamp": 1700000000,
            "message": "success",
            "iss_position": {"latitude": "12.5", "longitude": "-45.25"},
        }
        with patch(
            "websearch_mcp.tools.definitions.science_apis.fetch_json",
            AsyncMock(return_value=data),
        ):
            _, payload = await call(dispatcher, "iss_position")

        assert payload["iss_position"] == {"latitude": 12.5, "longitude": -45.25}


class TestProductivity:
    @pytest.mark.asyncio
    async def test_todos_filters(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)
        todos = [{"id": i, "completed": False} for i in range(15)]
        with patch(
            "websearch_mcp.tools.definitions.productivity_apis.fetch_json",
            AsyncMock(return_value=todos),
        ) as fetch:
            _, payload = await call(
                dispatcher, "jsonplaceholder_todos", {"completed": False, "user_id": 1}
            )

        assert fetch.await_args.kwargs["params"] == {"completed": "false", "userId": 1}
        assert payload["total_todos"] == 15
        assert payload["returned_todos"] == 10
        assert payload["filters"] == {"completed": False, "user_id": 1}

    @pytest.mark.asyncio
    async def test_photos_are_reshaped(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)
        photos = [
            {"id": 1, "albumId": 3, "title": "p", "url": "https://u", "thumbnailUrl": "https://t"}
        ]
        with patch(
            "websearch_mcp.tools.definitions.productivity_apis.fetch_json",
            AsyncMock(return_value=photos),
        ):
            _, payload = await call(dispatcher, "jsonplaceholder_photos", {"album_id": 3})

        assert payload["photos"] == [
            {"id": 1, "title": "p", "url": "https://u", "thumbnail_url": "https://t", "album_id": 3}
        ]

    @pytest.mark.asyncio
    async def test_httpbin_sends_body_only_for_write_methods(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)
        request = httpx.Request("POST", "https://httpbin.org/post")
        response = httpx.Response(200, json={"data": "{}"}, request=request)
        send = AsyncMock(return_value=response)
        with patch("websearch_mcp.tools.definitions.productivity_apis.send_request", send):
            _, payload = await call(
                dispatcher,
                "httpbin_test",
                {"method": "post", "endpoint": "/post", "data": "{}", "headers": {"X-Test": "1"}},
            )
            assert send.await_args.args == ("POST", "https://httpbin.org/post")
            assert send.await_args.kwargs["content"] == "{}"
            assert send.await_args.kwargs["headers"]["X-Test"] == "1"

            await call(dispatcher, "httpbin_test", {"method": "get", "data": "ignored"})
            assert send.await_args.kwargs["content"] is None

        assert payload["status_code"] == 200
        assert payload["result"] == {"data": "{}"}

    @pytest.mark.asyncio
    async def test_httpbin_rejects_unknown_method(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)
        result, _ = await call(dispatcher, "httpbin_test", {"method": "trace"})
        assert result.is_error

    @pytest.mark.asyncio
    async def test_complete_dataset_respects_flags(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)

        async def fake_fetch(url, params=None, timeout_seconds=20):
            return [{"from": url.rsplit("/", 1)[-1]}] * 2

        with patch(
            "websearch_mcp.tools.definitions.productivity_apis.fetch_json",
            AsyncMock(side_effect=fake_fetch),
        ) as fetch:
            _, payload = await call(
                dispatcher,
                "jsonplaceholder_complete",
                {"include_photos": False, "include_comments": False},
            )

        assert fetch.await_count == 4
        assert set(payload["data"]) == {"users", "posts", "albums", "todos"}
        assert payload["summary"]["photos"] == 0
        assert payload["summary"]["todos"] == 2

    @pytest.mark.asyncio
    async def test_uuid_generator_count(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)
        fetch = AsyncMock(return_value={"uuid": "0000-1111"})
        with patch("websearch_mcp.tools.definitions.productivity_apis.fetch_json", fetch):
            _, payload = await call(dispatcher, "uuid_generator", {"count": 3})

        assert fetch.await_count == 3
        assert payload["uuids"] == ["0000-1111"] * 3

    @pytest.mark.asyncio
    async def test_uuid_generator_bounds(self, context):
        dispatcher = make_dispatcher(context, build_productivity_apis)
        result, _ = await call(dispatcher, "uuid_generator", {"count": 101})
        assert result.is_error
