import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Transport
    transport: Literal["http", "stdio"] = Field(default="http", alias="TRANSPORT")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Terminal sessions
    default_shell: str = Field(default="/bin/bash", alias="DEFAULT_SHELL")
    default_cwd: str = Field(default_factory=os.getcwd, alias="DEFAULT_CWD")

    # Registry
    tool_name_conflict: Literal["replace", "error"] = Field(
        default="replace", alias="TOOL_NAME_CONFLICT"
    )

    # Web search / scraping
    searxng_base_url: str = Field(
        default="http://127.0.0.1:8888", alias="SEARXNG_BASE_URL"
    )
    default_api_timeout_seconds: int = Field(
        default=20, alias="DEFAULT_API_TIMEOUT_SECONDS"
    )
    scrape_timeout_seconds: int = Field(default=10, alias="SCRAPE_TIMEOUT_SECONDS")

    # Pass-through API keys; tool arguments take precedence.
    openweather_api_key: str = Field(default="", alias="OPENWEATHER_API_KEY")
    weatherapi_key: str = Field(default="", alias="WEATHERAPI_KEY")
    newsapi_key: str = Field(default="", alias="NEWSAPI_KEY")
    guardian_api_key: str = Field(default="", alias="GUARDIAN_API_KEY")
    nasa_api_key: str = Field(default="", alias="NASA_API_KEY")
    alphavantage_api_key: str = Field(default="", alias="ALPHAVANTAGE_API_KEY")


@lru_cache
def get_settings() -> Settings:
    return Settings()
