"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DISPATCHER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Journey Dispatcher API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:9002",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Dispatch API
    dispatch_host: Optional[str] = Field(
        default=None,
        description="Host name of the dispatch API (e.g., api.example.com).",
    )
    dispatch_api_path: str = Field(default="v2", description="Path prefix of the dispatch API.")
    dispatch_app_key: Optional[str] = Field(default=None, description="Dispatch API application key.")
    dispatch_secret_key: Optional[str] = Field(default=None, description="Dispatch API secret key.")
    dispatch_timeout_seconds: float = Field(default=30.0, gt=0.0)
    dispatch_max_retries: int = Field(default=3, ge=0)
    dispatch_backoff_seconds: float = Field(default=1.0, ge=0.0)

    # Journey envelope defaults
    journey_logs: bool = False
    delete_outstanding_journeys: bool = False
    keyless_response: bool = True

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @property
    def dispatch_configured(self) -> bool:
        return bool(self.dispatch_host and self.dispatch_app_key and self.dispatch_secret_key)


settings = Settings()
