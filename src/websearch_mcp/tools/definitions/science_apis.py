from __future__ import annotations

from datetime import date as date_type

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

NASA_APOD_URL = "https://api.nasa.gov/planetary/apod"
ISS_NOW_URL = "http://api.open-notify.org/iss-now.json"
NASA_DEMO_KEY = "DEMO_KEY"

NASA_KEY_HINT = (
    "Invalid NASA API key. Please provide a valid NASA API key or get one free "
    "from https://api.nasa.gov/"
)


class NasaApodInput(BaseModel):
    date: date_type | None = Field(
        default=None, description="Date in YYYY-MM-DD format (defaults to today)"
    )
    hd: bool = Field(default=True, description="Return high-resolution image URL")
    api_key: str | None = Field(
        default=None, description="NASA API key (optional, uses demo key)"
    )


class IssPositionInput(BaseModel):
    pass


def build_science_apis(context: AdapterContext) -> Adapter:
    settings = context.settings
    timeout = settings.default_api_timeout_seconds

    async def _nasa_apod(
        date: date_type | None = None, hd: bool = True, api_key: str | None = None
    ):
        params = {
            "api_key": api_key or settings.nasa_api_key or NASA_DEMO_KEY,
            "hd": str(hd).lower(),
        }
        if date:
            params["date"] = date.isoformat()

        try:
            data = await fetch_json(NASA_APOD_URL, params=params, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("NASA APOD API", exc, 403, NASA_KEY_HINT)

        return json_result(
            {
                "source": "NASA APOD API",
                "title": data.get("title"),
                "explanation": data.get("explanation"),
                "date": data.get("date"),
                "media_type": data.get("media_type"),
                "url": data.get("url"),
                "hd_url": data.get("hdurl") if hd else None,
                "service_version": data.get("service_version"),
                "fetched_at": utc_timestamp(),
            }
        )

    async def _iss_position():
        try:
            data = await fetch_json(ISS_NOW_URL, timeout_seconds=timeout)
        except Exception as exc:  # noqa: BLE001
            return upstream_failure("Open Notify ISS API", exc)

        position = data.get("iss_position", {})
        return json_result(
            {
                "source": "Open Notify ISS API",
                "timestamp": data.get("timestamp"),
                "iss_position": {
                    "latitude": float(position.get("latitude", 0)),
                    "longitude": float(position.get("longitude", 0)),
                },
                "message": data.get("message"),
                "fetched_at": utc_timestamp(),
            }
        )

    return Adapter(
        name="science-apis",
        description="Science and space APIs including NASA and ISS tracking",
        tools=(
            Tool(
                name="nasa_apod",
                description="Get Astronomy Picture of the Day from NASA API",
                args_schema=NasaApodInput,
                handler=_nasa_apod,
            ),
            Tool(
                name="iss_position",
                description="Get current ISS position from Open Notify API",
                args_schema=IssPositionInput,
                handler=_iss_position,
            ),
        ),
    )


adapter = AdapterSpec(
    name="science-apis",
    builder=build_science_apis,
    intent="Surface space imagery and live spacecraft telemetry.",
    schema_notes="nasa_apod 'date' is YYYY-MM-DD; iss_position takes no arguments.",
)
