"""Pydantic models for the phishing news API."""

from datetime import UTC, datetime

import humanize
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.phishing_news.dates import parse_published_date, to_digest_date


class Article(BaseModel):
    """A single news article inside a daily digest.

    The API does not supply a numeric id; the link is the only stable unique field.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str
    description: str = ""
    link: str = Field(..., min_length=1)
    published_date: str = ""
    source: str = ""

    @property
    def id(self) -> str:
        """Stable identifier for list rendering."""
        return self.link

    @property
    def published_at(self) -> datetime | None:
        """Parsed publication time, or None when the text is malformed."""
        return parse_published_date(self.published_date)

    @property
    def formatted_date(self) -> str:
        """Human-readable publication time like "21st Jan 2025, 09:30".

        Falls back to the raw text when the timestamp cannot be parsed.
        """
        dt = self.published_at
        if dt is None:
            return self.published_date
        return f"{humanize.ordinal(dt.day)} {dt.strftime('%b %Y, %H:%M')}"

    def relative_date(self, now: datetime | None = None) -> str:
        """Relative publication time like "3 hours ago".

        :param now: Reference time, defaults to the current UTC time.
        :returns: Relative description, or the raw text if unparsable.
        """
        dt = self.published_at
        if dt is None:
            return self.published_date
        reference = now or datetime.now(UTC)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=UTC)
        return humanize.naturaltime(reference - dt)


class Digest(BaseModel):
    """One day's phishing news digest."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    date: str
    generated_at: str
    summary: str
    articles: tuple[Article, ...] = ()
    sources: tuple[str, ...] = ()

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Ensure the digest date is a YYYY-MM-DD day."""
        return to_digest_date(v)

    @field_validator("sources")
    @classmethod
    def dedupe_sources(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Drop repeated source names while keeping their order."""
        return tuple(dict.fromkeys(v))

    @property
    def generated_at_datetime(self) -> datetime | None:
        """Parsed generation time, or None when malformed."""
        return parse_published_date(self.generated_at)


class DigestSummary(BaseModel):
    """Lightweight listing entry used to populate the date picker."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    date: str
    generated_at: str = ""
    article_count: int = Field(default=0, ge=0)
    source_count: int = Field(default=0, ge=0)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        """Ensure the listed date is a YYYY-MM-DD day."""
        return to_digest_date(v)


class DigestList(BaseModel):
    """Response of the digest listing endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    count: int = Field(default=0, ge=0)
    digests: list[DigestSummary] = Field(default_factory=list)


class ErrorEnvelope(BaseModel):
    """Error body the API may return on non-success responses."""

    model_config = ConfigDict(extra="ignore")

    error: str | None = None
    detail: str | None = None

    @property
    def message(self) -> str | None:
        """Display message, preferring ``detail`` over ``error``."""
        return self.detail or self.error
