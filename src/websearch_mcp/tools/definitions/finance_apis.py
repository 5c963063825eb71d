from __future__ import annotations

from typing import Any

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
    ToolError,
    json_result,
)

EXCHANGE_RATE_URL = "https://api.exchangerate-api.com/v4/latest"
COINGECKO_URL = "https://api.coingecko.com/api/v3"
ALPHAVANTAGE_URL = "https://www.alphavantage.co/query"


class ExchangeRatesInput(BaseModel):
    base: str = Field(default="USD", description="Base currency (e.g., USD, EUR, GBP)")
    target: str | None = Field(
        default=None,
        description="Target currency (e.g., EUR, GBP) - if not provided, returns all rates",
    )


class CoinGeckoPricesInput(BaseModel):
    coins: str = Field(
        default="bitcoin,ethereum,dogecoin", description="Comma-separated list of coin IDs"
    )
    vs_currency: str = Field(default="usd", description="Target currency (e.g., usd, eur, gbp)")
    include_market_cap: bool = Field(default=True, description="Include market cap data")
    include_24hr_change: bool = Field(default=True, description="Include 24h change data")


class CoinGeckoTrendingInput(BaseModel):
    pass


class AlphaVantageStockInput(BaseModel):
    symbol: str = Field(min_length=1, description="Stock symbol (e.g., AAPL, GOOGL, MSFT)")
    api_key: str | None = Field(
        default=None, description="Alpha Vantage API key (required for real data)"
    )


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def build_finance_apis(context: AdapterContext) -> Adapter:
    settings = context.settings
    timeout = settings.default_api_timeout_seconds

    async def _exchange_rates(base: str = "USD", target: str | None = None):
        try:
            data = await fetch_json(f"{EXCHANGE_RATE_URL}/{base.upper()}", timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("ExchangeRate-API.com", exc)

        rates: dict[str, float] = data.get("rates", {})
        if target:
            code = target.upper()
            if code not in rates:
                return ToolError(
                    f'Currency "{target}" not found',
                    message="Unknown target currency",
                    details={"available_currencies": sorted(rates)},
                )
            return json_result(
                {
                    "source": "ExchangeRate-API.com",
                    "base_currency": data.get("base"),
                    "target_currency": code,
                    "exchange_rate": rates[code],
                    "date": data.get("date"),
                    "fetched_at": utc_timestamp(),
                }
            )

        return json_result(
            {
                "source": "ExchangeRate-API.com",
                "base_currency": data.get("base"),
                "total_rates": len(rates),
                "rates": rates,
                "date": data.get("date"),
                "fetched_at": utc_timestamp(),
            }
        )

    async def _coingecko_prices(
        coins: str = "bitcoin,ethereum,dogecoin",
        vs_currency: str = "usd",
        include_market_cap: bool = True,
        include_24hr_change: bool = True,
    ):
        params = {
            "ids": coins,
            "vs_currencies": vs_currency,
            "include_market_cap": str(include_market_cap).lower(),
            "include_24hr_change": str(include_24hr_change).lower(),
        }
        try:
            data = await fetch_json(
                f"{COINGECKO_URL}/simple/price", params=params, timeout_seconds=timeout
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("CoinGecko API", exc)

        return json_result(
            {
                "source": "CoinGecko API",
                "target_currency": vs_currency.upper(),
                "coins_requested": len([c for c in coins.split(",") if c.strip()]),
                "coins_returned": len(data),
                "prices": data,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _coingecko_trending():
        try:
            data = await fetch_json(f"{COINGECKO_URL}/search/trending", timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("CoinGecko API", exc)

        trending = []
        for coin in data.get("coins", []):
            item = coin.get("item", {})
            trending.append(
                {
                    "rank": item.get("market_cap_rank"),
                    "name": item.get("name"),
                    "symbol": item.get("symbol"),
                    "price_btc": item.get("price_btc"),
                    "market_cap_rank": item.get("market_cap_rank"),
                    "id": item.get("id"),
                }
            )
        return json_result(
            {
                "source": "CoinGecko API",
                "trending_coins": trending,
                "fetched_at": utc_timestamp(),
            }
        )

    async def _alphavantage_stock(symbol: str, api_key: str | None = None):
        key = api_key or settings.alphavantage_api_key
        if not key:
            return ToolError(
                "Alpha Vantage API key required",
                message="Get a free key from https://www.alphavantage.co/support/#api-key",
            )

        params = {"function": "GLOBAL_QUOTE", "symbol": symbol.upper(), "apikey": key}
        try:
            data = await fetch_json(ALPHAVANTAGE_URL, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("Alpha Vantage API", exc)

        if "Error Message" in data:
            return ToolError(data["Error Message"], message="Alpha Vantage rejected the request")
        if "Note" in data:
            return ToolError(f"API limit reached: {data['Note']}", message="Rate limited")

        quote = data.get("Global Quote") or {}
        if not quote:
            return ToolError(f'Stock symbol "{symbol}" not found', message="Empty quote")

        return json_result(
            {
                "source": "Alpha Vantage API",
                "symbol": quote.get("01. symbol"),
                "price": _to_float(quote.get("05. price")),
                "change": _to_float(quote.get("09. change")),
                "change_percent": quote.get("10. change percent"),
                "volume": _to_int(quote.get("06. volume")),
                "last_updated": quote.get("07. latest trading day"),
                "open": _to_float(quote.get("02. open")),
                "high": _to_float(quote.get("03. high")),
                "low": _to_float(quote.get("04. low")),
                "close": _to_float(quote.get("08. previous close")),
                "fetched_at": utc_timestamp(),
            }
        )

    return Adapter(
        name="finance-apis",
        description="Financial data APIs for currency rates, crypto prices and stock quotes",
        tools=(
            Tool(
                name="exchange_rates",
                description="Get current exchange rates from exchangerate-api.com",
                args_schema=ExchangeRatesInput,
                handler=_exchange_rates,
            ),
            Tool(
                name="coingecko_prices",
                description="Get cryptocurrency prices from CoinGecko API",
                args_schema=CoinGeckoPricesInput,
                handler=_coingecko_prices,
            ),
            Tool(
                name="coingecko_trending",
                description="Get trending cryptocurrencies from CoinGecko",
                args_schema=CoinGeckoTrendingInput,
                handler=_coingecko_trending,
            ),
            Tool(
                name="alphavantage_stock",
                description="Get stock prices from Alpha Vantage API",
                args_schema=AlphaVantageStockInput,
                handler=_alphavantage_stock,
            ),
        ),
    )


adapter = AdapterSpec(
    name="finance-apis",
    builder=build_finance_apis,
    intent="Look up live currency, crypto and equity prices.",
    schema_notes="alphavantage_stock needs an api_key argument or ALPHAVANTAGE_API_KEY.",
)
