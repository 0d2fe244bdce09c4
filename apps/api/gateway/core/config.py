"""Application configuration for the room gateway."""
from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5001)
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    livekit_host: str = Field(default="")
    livekit_api_key: str = Field(default="")
    livekit_api_secret: str = Field(default="")

    token_ttl_seconds: int = Field(default=6 * 60 * 60, ge=1)

    egress_layout: str = Field(default="grid")
    egress_segment_duration: int = Field(default=10, ge=1)
    egress_output_prefix: str = Field(default="recordings")

    end_room_require_host: bool = Field(default=True)
    end_room_wait_for_deletion: bool = Field(default=True)
    end_room_poll_attempts: int = Field(default=10, ge=1)
    end_room_poll_interval_ms: int = Field(default=500, ge=0)

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Accept comma-separated or JSON list env values for CORS origins."""

        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
