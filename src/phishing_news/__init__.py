"""Phishing news digest retrieval.

Resolves "the digest for day D" into a fresh, cached, not-yet-published or
failed result while keeping an in-memory per-day cache warm.

Show today's digest with: python -m src.phishing_news
"""

from src.phishing_news.cache import DigestCache
from src.phishing_news.client import PhishingNewsClient
from src.phishing_news.config import PhishingNewsConfig, get_phishing_news_settings
from src.phishing_news.exceptions import (
    DigestNotFoundError,
    ErrorKind,
    MalformedResponseError,
    PhishingNewsError,
    RateLimitedError,
    ServerError,
    TransportError,
)
from src.phishing_news.listing import DigestListFetcher
from src.phishing_news.models import Article, Digest, DigestList, DigestSummary
from src.phishing_news.orchestrator import DigestOrchestrator
from src.phishing_news.state import (
    DigestViewState,
    LoadOutcome,
    LoadPhase,
    Selection,
    SelectionKind,
)

__all__ = [
    "Article",
    "Digest",
    "DigestCache",
    "DigestList",
    "DigestListFetcher",
    "DigestNotFoundError",
    "DigestOrchestrator",
    "DigestSummary",
    "DigestViewState",
    "ErrorKind",
    "LoadOutcome",
    "LoadPhase",
    "MalformedResponseError",
    "PhishingNewsClient",
    "PhishingNewsConfig",
    "PhishingNewsError",
    "RateLimitedError",
    "Selection",
    "SelectionKind",
    "ServerError",
    "TransportError",
    "get_phishing_news_settings",
]
