"""Background fetcher for the dates shown in the digest picker."""

import asyncio
import logging

from src.phishing_news.client import PhishingNewsClient
from src.phishing_news.exceptions import PhishingNewsError

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 30


class DigestListFetcher:
    """Fetches which days have a published digest.

    Failures are absorbed: the picker keeps whatever dates it already had.
    """

    def __init__(self, client: PhishingNewsClient, limit: int = DEFAULT_LIST_LIMIT) -> None:
        """Initialise the fetcher.

        :param client: Client used for the listing request.
        :param limit: Number of digests to request (clamped by the client).
        """
        self._client = client
        self._limit = limit

    async def fetch_dates(self) -> tuple[str, ...] | None:
        """Fetch the published digest dates, newest first.

        :returns: The dates, or None if the listing could not be fetched.
        """
        try:
            listing = await asyncio.to_thread(self._client.list_digests, self._limit)
        except PhishingNewsError as e:
            logger.info(f"Digest listing unavailable ({e.kind}): {e}")
            return None

        dates = tuple(sorted({summary.date for summary in listing.digests}, reverse=True))
        logger.debug(f"Fetched {len(dates)} digest date(s) for the picker")
        return dates
