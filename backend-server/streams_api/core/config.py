# streams_api/core/config.py
import json
from functools import lru_cache
from typing import Annotated, Literal

from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator, model_validator


class Settings(BaseSettings):
    """
    Central application settings loaded from environment variables (and .env).

    Notes
    -----
    - `storage_backend="memory"` swaps the AWS collaborators for in-process
      ones; offsets and bodies are then lost on restart.
    - `cors_allow_origins` accepts JSON array or comma-separated string.
    - A consume `limit` above `max_consume_limit` is clamped, never rejected.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---------- Collaborators ----------
    storage_backend: Literal["aws", "memory"] = "aws"
    bucket_name: str = Field("serverless-streams-messages", min_length=3)
    counters_table: str = Field("serverless-streams-counters", min_length=3)

    aws_region: str | None = None
    s3_endpoint_url: str | None = None
    dynamodb_endpoint_url: str | None = None

    # Create the bucket / counters table on startup when missing (local dev)
    create_resources: bool = False

    # ---------- Consume ----------
    max_concurrent_reads: int = Field(
        default=10, ge=1, le=64,
        description="Width of the body fetch pool used by a single consume call."
    )
    default_consume_limit: int = Field(default=10, ge=1)
    max_consume_limit: int = Field(default=100, ge=1)

    # ---------- Logging ----------
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # ---------- CORS ----------
    cors_allow_origins: Annotated[list[str] | None, NoDecode] = None

    @field_validator("cors_allow_origins", mode="before")
    def _parse_cors_origins(cls, v):
        """Accept JSON array or comma-separated string."""
        if v is None:
            return None
        if isinstance(v, str):
            try:
                parsed = json.loads(v)  # JSON array
                if isinstance(parsed, list):
                    return [str(s).strip() for s in parsed if str(s).strip()]
            except ValueError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("log_level", mode="before")
    def _upper_level(cls, v):
        return str(v).upper() if v is not None else "INFO"

    @model_validator(mode="after")
    def _check_limits(self):
        if self.default_consume_limit > self.max_consume_limit:
            raise ValueError("default_consume_limit must not exceed max_consume_limit")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


