"""Date helpers for digest keys and article timestamps.

Digest dates are always ``YYYY-MM-DD`` strings in UTC. The server decides what
"today" is in UTC, so converting the client's local time first avoids asking
for a different day than the one the server publishes.
"""

import re
from datetime import UTC, date, datetime

from dateutil import parser as dateparser

DIGEST_DATE_FORMAT = "%Y-%m-%d"

_DIGEST_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_FRACTIONAL_SECONDS = re.compile(r"\.\d+")


def utc_today(now: datetime | None = None) -> str:
    """Return today's digest date in UTC.

    :param now: Optional reference time (naive values are treated as UTC).
    :returns: Date string in YYYY-MM-DD format.
    """
    return to_digest_date(now or datetime.now(UTC))


def to_digest_date(value: date | datetime | str) -> str:
    """Normalise a day into the digest date key.

    :param value: A date, a datetime (converted to UTC) or a YYYY-MM-DD string.
    :returns: Date string in YYYY-MM-DD format.
    :raises ValueError: If a string is not a valid calendar date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).strftime(DIGEST_DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DIGEST_DATE_FORMAT)

    value = value.strip()
    if not _DIGEST_DATE_PATTERN.match(value):
        raise ValueError(f"Invalid digest date: {value!r} (expected YYYY-MM-DD)")
    # Rejects impossible days such as 2025-02-30
    datetime.strptime(value, DIGEST_DATE_FORMAT)
    return value


def parse_published_date(raw: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, with or without fractional seconds.

    Some upstream feeds produce fractional-second variants that strict parsers
    reject, so a second attempt is made with the fraction removed.

    :param raw: Timestamp text from the API.
    :returns: A timezone-aware datetime, or None if it cannot be parsed.
    """
    if not raw:
        return None

    for candidate in (raw.strip(), _FRACTIONAL_SECONDS.sub("", raw.strip(), count=1)):
        try:
            parsed = dateparser.isoparse(candidate)
        except (ValueError, OverflowError):
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    return None
