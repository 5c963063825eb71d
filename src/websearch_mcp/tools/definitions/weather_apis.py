from __future__ import annotations

from typing import Literal

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

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
WEATHERAPI_URL = "https://api.weatherapi.com/v1"
DEMO_KEY = "demo"

OPENWEATHER_KEY_HINT = (
    "Invalid API key. Please provide a valid OpenWeatherMap API key or get one "
    "free from https://openweathermap.org/api"
)
WEATHERAPI_KEY_HINT = (
    "Invalid API key. Please provide a valid WeatherAPI.com key or get one free "
    "from https://www.weatherapi.com/"
)


class OpenWeatherCurrentInput(BaseModel):
    location: str = Field(min_length=1, description="City name or coordinates (lat,lon)")
    units: Literal["metric", "imperial", "standard"] = Field(
        default="metric", description="Temperature units"
    )
    api_key: str | None = Field(
        default=None, description="OpenWeatherMap API key (optional, uses demo key)"
    )


class WeatherApiCurrentInput(BaseModel):
    location: str = Field(min_length=1, description="City name or coordinates (lat,lon)")
    api_key: str | None = Field(
        default=None, description="WeatherAPI.com key (optional, uses demo key)"
    )


class WeatherApiForecastInput(BaseModel):
    location: str = Field(min_length=1, description="City name or coordinates (lat,lon)")
    days: int = Field(default=3, ge=1, le=3, description="Number of forecast days (1-3)")
    api_key: str | None = Field(
        default=None, description="WeatherAPI.com key (optional, uses demo key)"
    )


def build_weather_apis(context: AdapterContext) -> Adapter:
    settings = context.settings
    timeout = settings.default_api_timeout_seconds

    async def _openweather_current(
        location: str, units: str = "metric", api_key: str | None = None
    ):
        params = {
            "q": location,
            "appid": api_key or settings.openweather_api_key or DEMO_KEY,
            "units": units,
        }
        try:
            data = await fetch_json(OPENWEATHER_URL, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("OpenWeatherMap API", exc, 401, OPENWEATHER_KEY_HINT)

        weather = (data.get("weather") or [{}])[0]
        main = data.get("main", {})
        coord = data.get("coord", {})
        wind = data.get("wind", {})
        sys_info = data.get("sys", {})
        return json_result(
            {
                "source": "OpenWeatherMap API",
                "location": data.get("name"),
                "coordinates": {"lat": coord.get("lat"), "lon": coord.get("lon")},
                "weather": {
                    "main": weather.get("main"),
                    "description": weather.get("description"),
                    "icon": weather.get("icon"),
                },
                "temperature": {
                    "current": main.get("temp"),
                    "feels_like": main.get("feels_like"),
                    "min": main.get("temp_min"),
                    "max": main.get("temp_max"),
                    "units": units,
                },
                "conditions": {
                    "humidity": main.get("humidity"),
                    "pressure": main.get("pressure"),
                    "visibility": data.get("visibility"),
                    "wind_speed": wind.get("speed"),
                    "wind_direction": wind.get("deg"),
                    "clouds": (data.get("clouds") or {}).get("all"),
                },
                "sunrise": sys_info.get("sunrise"),
                "sunset": sys_info.get("sunset"),
                "fetched_at": utc_timestamp(),
            }
        )

    async def _weatherapi_current(location: str, api_key: str | None = None):
        params = {
            "key": api_key or settings.weatherapi_key or DEMO_KEY,
            "q": location,
            "aqi": "yes",
        }
        try:
            data = await fetch_json(
                f"{WEATHERAPI_URL}/current.json", params=params, timeout_seconds=timeout
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("WeatherAPI.com", exc, 403, WEATHERAPI_KEY_HINT)

        current = data.get("current") or {}
        return json_result(
            {
                "source": "WeatherAPI.com",
                "location": data.get("location"),
                "current": current,
                "air_quality": current.get("air_quality"),
                "fetched_at": utc_timestamp(),
            }
        )

    async def _weatherapi_forecast(location: str, days: int = 3, api_key: str | None = None):
        params = {
            "key": api_key or settings.weatherapi_key or DEMO_KEY,
            "q": location,
            "days": str(days),
            "aqi": "yes",
            "alerts": "yes",
        }
        try:
            data = await fetch_json(
                f"{WEATHERAPI_URL}/forecast.json", params=params, timeout_seconds=timeout
            )
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("WeatherAPI.com", exc, 403, WEATHERAPI_KEY_HINT)

        return json_result(
            {
                "source": "WeatherAPI.com",
                "location": data.get("location"),
                "current": data.get("current"),
                "forecast": data.get("forecast"),
                "alerts": data.get("alerts"),
                "fetched_at": utc_timestamp(),
            }
        )

    return Adapter(
        name="weather-apis",
        description="Weather APIs for current conditions and forecasts",
        tools=(
            Tool(
                name="openweather_current",
                description="Get current weather from OpenWeatherMap API",
                args_schema=OpenWeatherCurrentInput,
                handler=_openweather_current,
            ),
            Tool(
                name="weatherapi_current",
                description="Get current weather from WeatherAPI.com",
                args_schema=WeatherApiCurrentInput,
                handler=_weatherapi_current,
            ),
            Tool(
                name="weatherapi_forecast",
                description="Get weather forecast from WeatherAPI.com",
                args_schema=WeatherApiForecastInput,
                handler=_weatherapi_forecast,
            ),
        ),
    )


adapter = AdapterSpec(
    name="weather-apis",
    builder=build_weather_apis,
    intent="Report current weather and short-range forecasts for a location.",
    schema_notes="'location' is a city name or 'lat,lon'; keys fall back to env then demo.",
)
