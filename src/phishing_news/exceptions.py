"""Classified errors raised by the phishing news client.

Every failure of a digest request is one of the subclasses below, so callers
never have to inspect raw ``requests`` exceptions or HTTP responses.
"""

from enum import StrEnum

NOT_FOUND_MESSAGE = "No digest available for this date"
RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."
MALFORMED_RESPONSE_MESSAGE = "The server returned an unexpected response."


class ErrorKind(StrEnum):
    """Closed set of failure classes for a digest request."""

    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    SERVER_ERROR = "server_error"
    TRANSPORT_ERROR = "transport_error"


class PhishingNewsError(Exception):
    """Base class for classified phishing news API failures."""

    kind: ErrorKind

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialise the error.

        :param message: User-displayable error message.
        :param status_code: HTTP status code if a response was received.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class DigestNotFoundError(PhishingNewsError):
    """Raised when the API has no digest for the requested day (HTTP 404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = NOT_FOUND_MESSAGE) -> None:
        super().__init__(message, status_code=404)


class RateLimitedError(PhishingNewsError):
    """Raised when the API rejects the request with HTTP 429."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str = RATE_LIMITED_MESSAGE) -> None:
        super().__init__(message, status_code=429)


class MalformedResponseError(PhishingNewsError):
    """Raised when a successful response body cannot be decoded."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, message: str = MALFORMED_RESPONSE_MESSAGE) -> None:
        super().__init__(message, status_code=200)


class ServerError(PhishingNewsError):
    """Raised for any other non-success HTTP status."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(message or f"Server error (HTTP {status_code})", status_code=status_code)


class TransportError(PhishingNewsError):
    """Raised when the request fails below the HTTP layer (timeouts, resets, broken streams)."""

    kind = ErrorKind.TRANSPORT_ERROR
