"""Configuration for the phishing news client using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root is 3 levels up from this file (src/phishing_news/config.py -> project root)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_ENV_FILE = PROJECT_ROOT / ".env"

DEFAULT_BASE_URL = "https://phishing-news-api.fly.dev"

# Upper bound the API accepts for the listing endpoint
MAX_LIST_LIMIT = 50


class PhishingNewsConfig(BaseSettings):
    """Configuration for the phishing news digest client.

    All settings are loaded from environment variables with the PHISHING_NEWS_ prefix.

    :param base_url: Base URL of the phishing news API.
    :param request_timeout: Seconds to wait for a response to start (and between bytes).
    :param resource_timeout: Seconds allowed for the whole request including the body.
    :param list_limit: Number of digest summaries requested for the date picker.
    """

    model_config = SettingsConfigDict(
        env_prefix="PHISHING_NEWS_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the phishing news API",
    )
    request_timeout: float = Field(
        default=25,
        gt=0,
        le=300,
        description="Timeout in seconds before a response starts",
    )
    resource_timeout: float = Field(
        default=60,
        gt=0,
        le=600,
        description="Total timeout in seconds for a request including its body",
    )
    list_limit: int = Field(
        default=30,
        ge=1,
        le=MAX_LIST_LIMIT,
        description="Number of digests to list for the date picker",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise the base URL so paths can be appended directly.

        :param v: Raw base URL.
        :returns: The URL without trailing slashes.
        :raises ValueError: If the URL is empty or not http(s).
        """
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                "Base URL must start with http:// or https://. "
                "Set PHISHING_NEWS_BASE_URL environment variable."
            )
        return v

    @model_validator(mode="after")
    def check_timeouts(self) -> "PhishingNewsConfig":
        """Ensure the total timeout is not tighter than the per-request one."""
        if self.resource_timeout < self.request_timeout:
            raise ValueError(
                f"resource_timeout ({self.resource_timeout}s) must be >= "
                f"request_timeout ({self.request_timeout}s)"
            )
        return self


@lru_cache
def get_phishing_news_settings() -> PhishingNewsConfig:
    """Get cached phishing news settings.

    Settings are loaded once and cached for the lifetime of the process.

    :returns: Configured PhishingNewsConfig instance.
    """
    return PhishingNewsConfig()
