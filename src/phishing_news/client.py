"""HTTP client for the phishing news digest API."""

import concurrent.futures
import json
import logging
import threading
import time
from datetime import date, datetime
from typing import Any, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from src.phishing_news.config import MAX_LIST_LIMIT, PhishingNewsConfig, get_phishing_news_settings
from src.phishing_news.dates import to_digest_date
from src.phishing_news.exceptions import (
    DigestNotFoundError,
    MalformedResponseError,
    RateLimitedError,
    ServerError,
    TransportError,
)
from src.phishing_news.models import Digest, DigestList, ErrorEnvelope

logger = logging.getLogger(__name__)

DIGEST_PATH = "/api/phishing-news"

# Size of body chunks handed back by the reader thread
CHUNK_SIZE = 8192

# Worker threads for body reads; an abandoned read keeps its thread until the socket returns
BODY_READER_THREADS = 4

# Seconds between cancellation checks while a body is being read
CANCEL_POLL_INTERVAL = 0.1

USER_AGENT = "phishing-news-digest/1.0"

ModelT = TypeVar("ModelT", bound=BaseModel)


def clamp_list_limit(limit: int) -> int:
    """Clamp a listing limit into the range the API accepts.

    :param limit: Requested number of digests.
    :returns: The limit bounded to 1..MAX_LIST_LIMIT.
    """
    return max(1, min(limit, MAX_LIST_LIMIT))


class PhishingNewsClient:
    """Client for the phishing news digest API.

    Each call issues exactly one GET request and either returns a typed model or
    raises a ``PhishingNewsError`` subclass. Nothing is retried or cached here.
    """

    def __init__(
        self,
        settings: PhishingNewsConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialise the client.

        :param settings: Client settings. If not provided, loads from env.
        :param session: HTTP session to reuse. If not provided, one is created and owned.
        """
        self._settings = settings or get_phishing_news_settings()
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json", "User-Agent": USER_AGENT})
        self._body_readers = concurrent.futures.ThreadPoolExecutor(
            max_workers=BODY_READER_THREADS, thread_name_prefix="phishing-news-body"
        )
        logger.debug(f"PhishingNewsClient initialised: base_url={self._settings.base_url}")

    @property
    def base_url(self) -> str:
        """Base URL requests are sent to."""
        return self._settings.base_url

    def get_today(self, cancel_event: threading.Event | None = None) -> Digest:
        """Fetch the digest for the current UTC day.

        :param cancel_event: Optional event that aborts the body read when set.
        :returns: Today's digest.
        :raises PhishingNewsError: If the request fails.
        """
        return self.fetch_digest(f"{DIGEST_PATH}/today", cancel_event=cancel_event)

    def get_latest(self, cancel_event: threading.Event | None = None) -> Digest:
        """Fetch the most recently published digest.

        :param cancel_event: Optional event that aborts the body read when set.
        :returns: The latest digest, whatever its date.
        :raises PhishingNewsError: If the request fails.
        """
        return self.fetch_digest(f"{DIGEST_PATH}/latest", cancel_event=cancel_event)

    def get_digest(
        self,
        day: date | datetime | str,
        cancel_event: threading.Event | None = None,
    ) -> Digest:
        """Fetch the digest for a specific day.

        :param day: The day, normalised to UTC before building the URL.
        :param cancel_event: Optional event that aborts the body read when set.
        :returns: The digest for that day.
        :raises ValueError: If the day is not a valid date.
        :raises PhishingNewsError: If the request fails.
        """
        return self.fetch_digest(f"{DIGEST_PATH}/{to_digest_date(day)}", cancel_event=cancel_event)

    def list_digests(
        self,
        limit: int,
        cancel_event: threading.Event | None = None,
    ) -> DigestList:
        """List recently published digests.

        :param limit: Maximum number of entries; clamped to 1..50 before sending.
        :param cancel_event: Optional event that aborts the body read when set.
        :returns: The listing with lightweight digest summaries.
        :raises PhishingNewsError: If the request fails.
        """
        params = {"limit": clamp_list_limit(limit)}
        data = self._get(DIGEST_PATH, params=params, cancel_event=cancel_event)
        return self._decode(DigestList, data)

    def fetch_digest(self, path: str, cancel_event: threading.Event | None = None) -> Digest:
        """Fetch and decode a digest from an API path.

        :param path: Endpoint path relative to the base URL.
        :param cancel_event: Optional event that aborts the body read when set.
        :returns: The decoded digest.
        :raises PhishingNewsError: If the request fails.
        """
        data = self._get(path, cancel_event=cancel_event)
        return self._decode(Digest, data)

    def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Any:
        """Make a GET request and return the parsed JSON body of a 200 response.

        :param path: Endpoint path relative to the base URL.
        :param params: Query parameters.
        :param cancel_event: Optional event that aborts the body read when set.
        :returns: Parsed JSON body.
        :raises PhishingNewsError: If the request fails.
        """
        url = f"{self._settings.base_url}{path}"
        request_timeout = self._settings.request_timeout
        logger.debug(f"Making GET request: path={path} params={params}")

        started = time.monotonic()
        try:
            response = self._session.get(
                url,
                params=params,
                timeout=(request_timeout, request_timeout),
                stream=True,
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timed out after {request_timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Network error: {e}") from e

        try:
            body = self._read_body(response, started, cancel_event)
        finally:
            response.close()

        status = response.status_code
        if status == 200:
            try:
                return json.loads(body)
            except ValueError as e:
                logger.warning(f"Undecodable response body: path={path}")
                raise MalformedResponseError() from e

        if status == 404:
            logger.info(f"No digest available: path={path}")
            raise DigestNotFoundError()
        if status == 429:
            logger.warning(f"Rate limited by phishing news API: path={path}")
            raise RateLimitedError()

        message = self._extract_error_message(body)
        logger.warning(f"Phishing news request failed: path={path} -> {status}: {message}")
        raise ServerError(status, message)

    def _read_body(
        self,
        response: requests.Response,
        started: float,
        cancel_event: threading.Event | None,
    ) -> bytes:
        """Read a streamed response body within the total timeout.

        The body is read on a worker thread while this thread waits for it
        against the deadline, so a server trickling bytes cannot hold the call
        past ``resource_timeout``. The caller closes the response afterwards,
        which also ends an abandoned read.

        :param response: Streamed response.
        :param started: Monotonic time the request was issued.
        :param cancel_event: Optional event that aborts the read when set.
        :returns: The complete body.
        :raises TransportError: On timeout, cancellation or a broken stream.
        """
        resource_timeout = self._settings.resource_timeout
        deadline = started + resource_timeout
        if cancel_event is not None and cancel_event.is_set():
            raise TransportError("Request cancelled")
        stop = threading.Event()
        future = self._body_readers.submit(self._collect_chunks, response, stop)
        try:
            while not future.done():
                if cancel_event is not None and cancel_event.is_set():
                    raise TransportError("Request cancelled")
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning(f"Response body not complete after {resource_timeout:g}s")
                    raise TransportError(f"Request timed out after {resource_timeout:g}s")
                concurrent.futures.wait([future], timeout=min(remaining, CANCEL_POLL_INTERVAL))
            return future.result()
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request timed out after {self._settings.request_timeout:g}s"
            ) from e
        except requests.exceptions.RequestException as e:
            # Connection resets and truncated streams surface here
            raise TransportError(f"Network error: the response could not be read ({e})") from e
        finally:
            stop.set()

    @staticmethod
    def _collect_chunks(response: requests.Response, stop: threading.Event) -> bytes:
        """Read the whole body, giving up once ``stop`` is set."""
        chunks: list[bytes] = []
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if stop.is_set():
                break
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _decode(model: type[ModelT], data: Any) -> ModelT:
        """Validate a JSON payload into a model.

        :param model: Model class to validate into.
        :param data: Parsed JSON payload.
        :returns: The validated model.
        :raises MalformedResponseError: If the payload does not match the model.
        """
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Response did not match {model.__name__}: {e.error_count()} error(s)")
            raise MalformedResponseError() from e

    @staticmethod
    def _extract_error_message(body: bytes) -> str | None:
        """Extract a display message from an error envelope body.

        :param body: Raw response body.
        :returns: The envelope's detail or error text, if present.
        """
        try:
            envelope = ErrorEnvelope.model_validate_json(body)
        except ValidationError:
            return None
        return envelope.message

    def close(self) -> None:
        """Stop the body reader threads and close the HTTP session if this client created it."""
        self._body_readers.shutdown(wait=False, cancel_futures=True)
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "PhishingNewsClient":
        """Enter context manager."""
        return self

    def __exit__(self, *args: object) -> None:
        """Exit context manager."""
        self.close()
