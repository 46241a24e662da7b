"""Shared test data for phishing news tests."""

from typing import Any

from src.phishing_news.models import Digest


def article_payload(
    link: str = "https://example.com/phish-1",
    *,
    title: str = "New phishing campaign targets banks",
    description: str = "Attackers impersonate a major bank.",
    published_date: str = "2025-01-21T09:30:00Z",
    source: str = "KrebsOnSecurity",
) -> dict[str, Any]:
    """Build an article as returned by the API."""
    return {
        "title": title,
        "description": description,
        "link": link,
        "published_date": published_date,
        "source": source,
    }


def digest_payload(day: str = "2025-01-21", **overrides: Any) -> dict[str, Any]:
    """Build a digest as returned by the API."""
    payload: dict[str, Any] = {
        "date": day,
        "generated_at": f"{day}T06:00:00Z",
        "summary": f"Phishing news for {day}.",
        "articles": [
            article_payload(f"https://example.com/{day}/1"),
            article_payload(
                f"https://example.com/{day}/2",
                title="Fake invoice emails on the rise",
                published_date=f"{day}T11:15:00.123Z",
                source="BleepingComputer",
            ),
        ],
        "sources": ["KrebsOnSecurity", "BleepingComputer"],
    }
    payload.update(overrides)
    return payload


def make_digest(day: str = "2025-01-21", **overrides: Any) -> Digest:
    """Build a validated Digest model."""
    return Digest.model_validate(digest_payload(day, **overrides))
