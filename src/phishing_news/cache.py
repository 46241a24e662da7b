"""In-memory per-day digest cache."""

import logging
from collections.abc import Iterator
from datetime import date

from src.phishing_news.dates import to_digest_date
from src.phishing_news.models import Digest

logger = logging.getLogger(__name__)


class DigestCache:
    """Maps UTC digest dates to the last successfully fetched digest for that day.

    Entries are never evicted or expired; the working set is a few dozen days
    per session. Digests are immutable, so a ``put`` for an existing day swaps
    the entry wholesale and concurrent readers never see a partial update.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Digest] = {}

    def get(self, day: str) -> Digest | None:
        """Look up the digest stored for a day.

        :param day: Digest date in YYYY-MM-DD format.
        :returns: The cached digest, or None.
        """
        return self._entries.get(to_digest_date(day))

    def put(self, digest: Digest) -> None:
        """Store a digest under its own date, replacing any previous entry.

        :param digest: A digest returned by a successful fetch.
        """
        replaced = digest.date in self._entries
        self._entries[digest.date] = digest
        logger.debug(f"Cached digest: date={digest.date}, replaced={replaced}")

    def has(self, day: date | str) -> bool:
        """Check whether a digest is cached for a day."""
        return to_digest_date(day) in self._entries

    def dates(self) -> list[str]:
        """Cached dates, newest first."""
        return sorted(self._entries, reverse=True)

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, str | date):
            return False
        try:
            return self.has(day)
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.dates())
