"""Source filtering and search over a digest's articles."""

from collections.abc import Iterable
from datetime import UTC, datetime

from src.phishing_news.models import Article

ALL_SOURCES = "All"

_OLDEST = datetime.min.replace(tzinfo=UTC)


def source_categories(articles: Iterable[Article]) -> list[str]:
    """List the source filter options for a set of articles.

    :param articles: Articles of the displayed digest.
    :returns: "All" followed by the unique source names in alphabetical order.
    """
    return [ALL_SOURCES, *sorted({article.source for article in articles if article.source})]


def filter_articles(
    articles: Iterable[Article],
    *,
    source: str = ALL_SOURCES,
    search_text: str = "",
) -> list[Article]:
    """Filter articles by source and search text, newest first.

    Search is a case-insensitive substring match over title, description and
    source. Articles whose publication date cannot be parsed sort last.

    :param articles: Articles to filter.
    :param source: Exact source name, or "All" for no source filter.
    :param search_text: Text to search for; empty means no search filter.
    :returns: Matching articles ordered by publication time, newest first.
    """
    filtered = list(articles)
    if source != ALL_SOURCES:
        filtered = [article for article in filtered if article.source == source]

    needle = search_text.strip().casefold()
    if needle:
        filtered = [
            article
            for article in filtered
            if needle in article.title.casefold()
            or needle in article.description.casefold()
            or needle in article.source.casefold()
        ]

    return sorted(filtered, key=lambda article: article.published_at or _OLDEST, reverse=True)
