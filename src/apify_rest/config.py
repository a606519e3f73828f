"""
Client configuration.

Holds everything the HTTP layer needs: base URLs, token, timeouts, retry
limits and the user-agent suffix. A config is never mutated after the
client is built, so one instance is safely shared by concurrent calls.
"""

from __future__ import annotations

import os
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientConfig(BaseModel):
    """Apify API client configuration."""

    model_config = ConfigDict(frozen=True)

    DEFAULT_BASE_URL: ClassVar[str] = "https://api.apify.com"
    DEFAULT_TIMEOUT_SECS: ClassVar[float] = 360.0
    DEFAULT_STREAM_CHUNK_TIMEOUT_SECS: ClassVar[float] = 30.0
    DEFAULT_MAX_RETRIES: ClassVar[int] = 8
    DEFAULT_MIN_DELAY_BETWEEN_RETRIES_MS: ClassVar[int] = 500
    TOKEN_ENV_VAR: ClassVar[str] = "APIFY_TOKEN"
    API_VERSION: ClassVar[str] = "v2"

    token: Optional[str] = Field(
        default=None,
        description="Apify API token, sent as a bearer Authorization header",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the API (without the version segment)",
    )
    public_base_url: Optional[str] = Field(
        default=None,
        description="Base URL used for public links (defaults to base_url)",
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=0,
        description="Maximum retries for idempotent requests that fail transiently",
    )
    min_delay_between_retries_ms: int = Field(
        default=DEFAULT_MIN_DELAY_BETWEEN_RETRIES_MS,
        ge=0,
        description="Base backoff delay in milliseconds",
    )
    timeout_secs: float = Field(
        default=DEFAULT_TIMEOUT_SECS,
        gt=0,
        description="Per-request timeout in seconds",
    )
    stream_chunk_timeout_secs: float = Field(
        default=DEFAULT_STREAM_CHUNK_TIMEOUT_SECS,
        gt=0,
        description="Maximum wait for a single chunk of a streamed response",
    )
    user_agent_suffix: Optional[str] = Field(
        default=None,
        description="Appended to the User-Agent header",
    )

    @field_validator("base_url", "public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a config, reading the token from APIFY_TOKEN when not given.

        Keyword arguments set to None are ignored so callers can pass
        optional CLI flags straight through.
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        if "token" not in values:
            env_token = os.environ.get(cls.TOKEN_ENV_VAR)
            if env_token:
                values["token"] = env_token
        return cls(**values)

    @property
    def api_url(self) -> str:
        """Versioned base URL for API calls."""
        return f"{self.base_url}/{self.API_VERSION}"

    @property
    def public_api_url(self) -> str:
        """Versioned public base URL."""
        return f"{self.public_base_url or self.base_url}/{self.API_VERSION}"
